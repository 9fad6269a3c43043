from ._main import check_main, config_main, run_main
from .config import (
    ConfigOverrides,
    LoadResult,
    QuizConfig,
    QuizConfigError,
    load_config,
)
from .console import (
    RunnerCommand,
    RunnerResult,
    parse_runner_command,
    run_quiz_session,
)

__all__ = [
    "check_main",
    "config_main",
    "run_main",
    "ConfigOverrides",
    "LoadResult",
    "QuizConfig",
    "QuizConfigError",
    "load_config",
    "RunnerCommand",
    "RunnerResult",
    "parse_runner_command",
    "run_quiz_session",
]
