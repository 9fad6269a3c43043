"""Shared testing fixtures for the md_quiz test suite."""

from .documents import QuestionBankBuilder, question_block  # noqa: F401
from .session import FakeClock, ScriptedRandom  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "FakeClock",
    "QuestionBankBuilder",
    "ScriptedRandom",
    "WorkspaceBuilder",
    "build_tree",
    "question_block",
]
