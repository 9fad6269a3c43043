"""Configuration loader for the mdquiz commands."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from ..bank.loader import DEFAULT_EXTENSIONS, DEFAULT_MAX_BYTES
from ..bank.scanner import Vocabulary
from ..bank.validator import ValidationRules
from ..core import config as core_config
from ..core import workspace as workspace_mod
from ..core.logging import DEFAULT_LOG_LEVEL

CONFIG_FILENAME = "mdquiz.toml"
CONFIG_ENV = "MDQUIZ_CONFIG"
ENV_PREFIX = "MDQUIZ_"

DEFAULT_QUESTION_COUNT = 10
DEFAULT_MAX_QUESTIONS = 100

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizSettings:
    question_count: int
    max_questions: int
    seed: Optional[int]


@dataclass(frozen=True)
class LoaderSettings:
    extensions: tuple[str, ...]
    max_bytes: int


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved configuration for a check or quiz run."""

    quiz: QuizSettings
    vocabulary: Vocabulary
    rules: ValidationRules
    loader: LoaderSettings
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    question_count: Optional[int] = None
    seed: Optional[int] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Result of loading configuration, including workspace context."""

    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc
    default_path = layout.path_for("config") / CONFIG_FILENAME

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_path,
    )

    parsed: Mapping[str, Any] = {}
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        try:
            parsed = core_config.load_toml(requested_path)
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
    elif config_path is not None or _has_env_config(env_map):
        raise QuizConfigError(f"Config file not found: {requested_path}")
    try:
        file_options = core_config.merged_with_defaults(
            DEFAULT_OPTIONS, parsed
        )
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc

    quiz_table = file_options["quiz"]
    max_questions = _coerce_int(
        quiz_table["max_questions"], "quiz.max_questions", minimum=1
    )
    question_count = _coerce_int(
        _pick_first(
            overrides.question_count,
            _parse_env_int(env_map, "QUESTION_COUNT"),
            quiz_table["question_count"],
        ),
        "quiz.question_count",
        minimum=1,
    )
    if question_count > max_questions:
        raise QuizConfigError(
            f"quiz.question_count must be at most {max_questions}, "
            f"got {question_count}."
        )
    seed_value = _pick_first(
        overrides.seed,
        _parse_env_int(env_map, "SEED"),
        quiz_table["seed"],
    )
    seed = None if seed_value is None else _coerce_int(seed_value, "quiz.seed")

    config = QuizConfig(
        quiz=QuizSettings(
            question_count=question_count,
            max_questions=max_questions,
            seed=seed,
        ),
        vocabulary=_build_vocabulary(file_options["parser"]),
        rules=_build_rules(file_options["rules"]),
        loader=_build_loader(file_options["loader"]),
        log_level=_resolve_log_level(
            overrides.log_level,
            _parse_env_string(env_map, "LOG_LEVEL"),
            file_options["logging"]["level"],
        ),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> dict[str, dict[str, Any]]:
    vocabulary = Vocabulary()
    rules = ValidationRules()
    return {
        "quiz": {
            "question_count": DEFAULT_QUESTION_COUNT,
            "max_questions": DEFAULT_MAX_QUESTIONS,
            "seed": None,
        },
        "parser": {
            "heading_keywords": list(vocabulary.heading_keywords),
            "answer_attribute": vocabulary.answer_attribute,
            "additional_attribute": vocabulary.additional_attribute,
        },
        "rules": {
            "min_content_length": rules.min_content_length,
            "max_content_length": rules.max_content_length,
            "min_options": rules.min_options,
            "max_options": rules.max_options,
            "required_option_letters": list(rules.required_option_letters),
            "max_option_text_length": rules.max_option_text_length,
        },
        "loader": {
            "extensions": list(DEFAULT_EXTENSIONS),
            "max_bytes": DEFAULT_MAX_BYTES,
        },
        "logging": {"level": DEFAULT_LOG_LEVEL},
    }


# Every key a config file may set; unknown keys are rejected.
DEFAULT_OPTIONS: Mapping[str, Mapping[str, Any]] = _default_table()


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return Path(config_path).expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _has_env_config(env_map: Mapping[str, str]) -> bool:
    return bool((env_map.get(CONFIG_ENV) or "").strip())


def _build_vocabulary(table: Mapping[str, Any]) -> Vocabulary:
    keywords = _coerce_str_list(
        table["heading_keywords"], "parser.heading_keywords"
    )
    try:
        return Vocabulary(
            heading_keywords=tuple(keywords),
            answer_attribute=_coerce_name(
                table["answer_attribute"], "parser.answer_attribute"
            ),
            additional_attribute=_coerce_name(
                table["additional_attribute"], "parser.additional_attribute"
            ),
        )
    except ValueError as exc:
        raise QuizConfigError(f"Invalid [parser] table: {exc}") from exc


def _build_rules(table: Mapping[str, Any]) -> ValidationRules:
    letters = _coerce_str_list(
        table["required_option_letters"], "rules.required_option_letters"
    )
    normalized_letters: list[str] = []
    for letter in letters:
        upper = letter.strip().upper()
        if len(upper) != 1 or not ("A" <= upper <= "Z"):
            raise QuizConfigError(
                "rules.required_option_letters must contain single letters "
                f"A-Z, got '{letter}'."
            )
        normalized_letters.append(upper)
    try:
        return ValidationRules(
            min_content_length=_coerce_int(
                table["min_content_length"], "rules.min_content_length",
                minimum=0,
            ),
            max_content_length=_coerce_int(
                table["max_content_length"], "rules.max_content_length",
                minimum=1,
            ),
            min_options=_coerce_int(
                table["min_options"], "rules.min_options", minimum=1
            ),
            max_options=_coerce_int(
                table["max_options"], "rules.max_options", minimum=1
            ),
            required_option_letters=tuple(normalized_letters),
            max_option_text_length=_coerce_int(
                table["max_option_text_length"],
                "rules.max_option_text_length",
                minimum=1,
            ),
        )
    except ValueError as exc:
        raise QuizConfigError(f"Invalid [rules] table: {exc}") from exc


def _build_loader(table: Mapping[str, Any]) -> LoaderSettings:
    return LoaderSettings(
        extensions=_normalize_extensions(
            _coerce_str_list(table["extensions"], "loader.extensions")
        ),
        max_bytes=_coerce_int(
            table["max_bytes"], "loader.max_bytes", minimum=1
        ),
    )


def _normalize_extensions(value: Sequence[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    result: list[str] = []
    for item in value:
        normalized = item.strip().lower().lstrip(".")
        if not normalized:
            raise QuizConfigError(
                "loader.extensions must be non-empty strings."
            )
        if normalized not in seen:
            seen.add(normalized)
            result.append(normalized)
    if not result:
        raise QuizConfigError(
            "At least one loader extension must be configured."
        )
    return tuple(result)


def _resolve_log_level(
    override: Optional[str],
    env_value: Optional[str],
    file_value: object,
) -> str:
    candidate = _pick_first(override, env_value, file_value)
    if not isinstance(candidate, str) or not candidate.strip():
        raise QuizConfigError("logging.level must be a non-empty string.")
    level = candidate.strip().upper()
    if level not in _LOG_LEVELS:
        expected = ", ".join(_LOG_LEVELS)
        raise QuizConfigError(
            f"Unknown log level '{candidate}'. Expected one of: {expected}."
        )
    return level


def _coerce_int(value: object, name: str, *, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise QuizConfigError(f"{name} must be an integer.")
    if minimum is not None and value < minimum:
        raise QuizConfigError(f"{name} must be at least {minimum}.")
    return value


def _coerce_name(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError(f"{name} must be a non-empty string.")
    return value.strip()


def _coerce_str_list(value: object, name: str) -> list[str]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise QuizConfigError(f"{name} must be a list of strings.")
    if not all(isinstance(item, str) for item in value):
        raise QuizConfigError(f"{name} must be a list of strings.")
    return list(value)


def _parse_env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise QuizConfigError(
            f"{ENV_PREFIX}{key} must be an integer, got '{raw}'."
        ) from exc


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
