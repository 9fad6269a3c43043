from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import FakeClock, QuestionBankBuilder, WorkspaceBuilder  # noqa: E402


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def bank() -> QuestionBankBuilder:
    """Fresh Markdown question-bank builder."""

    return QuestionBankBuilder()


@pytest.fixture
def clock() -> FakeClock:
    """Clock advancing a fixed step on every call."""

    return FakeClock(
        start=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        step=timedelta(seconds=30),
    )


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep workspace and config lookups inside the test tmp dir."""

    monkeypatch.setenv("MDQUIZ_HOME", str(tmp_path / "mdquiz-home"))
    for name in (
        "MDQUIZ_CONFIG",
        "MDQUIZ_QUESTION_COUNT",
        "MDQUIZ_SEED",
        "MDQUIZ_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    logger = logging.getLogger("md_quiz")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
