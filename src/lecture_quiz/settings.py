"""Settings loader for lecture-quiz runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from .core import config as core_config
from .core import workspace as workspace_mod
from .errors import ConfigError
from .models import AssessmentType, Language

CONFIG_FILENAME = "lecture_quiz.toml"
CONFIG_ENV = "LECTURE_QUIZ_CONFIG"
ENV_PREFIX = "LECTURE_QUIZ_"

DEFAULT_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class GenerationSettings:
    """Model parameters for the question generation call."""

    model: str
    temperature: float
    max_tokens: int


@dataclass(frozen=True)
class ReportSettings:
    """Where and how PDF reports are written."""

    output_dir: Path
    paper_size: str
    orientation: str
    margin: str


@dataclass(frozen=True)
class LectureQuizConfig:
    """Fully resolved settings for a run."""

    generation: GenerationSettings
    assessment_type: AssessmentType
    language: Language
    report: ReportSettings
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """Command-line values applied on top of environment and file settings."""

    model: Optional[str] = None
    assessment_type: Optional[str] = None
    language: Optional[str] = None
    report_dir: Optional[Path] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    config: LectureQuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_settings(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Resolve settings with precedence CLI > env > TOML > defaults.

    A missing file is fine when it was only the implicit workspace default;
    an explicitly requested file (argument or ``LECTURE_QUIZ_CONFIG``) must
    exist.
    """

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise ConfigError(ConfigError.INVALID_SETTING, detail=str(exc)) from exc

    requested = _requested_path(config_path, env_map)
    table = _default_table()
    loaded_path: Optional[Path] = None
    candidate = requested or layout.path_for("config") / CONFIG_FILENAME
    if candidate.exists():
        try:
            core_config.merge_defaults(table, core_config.load_toml(candidate))
        except core_config.TomlConfigError as exc:
            raise ConfigError(
                ConfigError.INVALID_SETTING, detail=str(exc)
            ) from exc
        loaded_path = candidate
    elif requested is not None:
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail=f"Config file not found: {requested}",
        )

    def env_(key: str) -> Optional[str]:
        return core_config.env_value(env_map, ENV_PREFIX, key)

    generation = GenerationSettings(
        model=_non_empty(
            core_config.pick_first(
                overrides.model, env_("MODEL"), table["generation"]["model"]
            ),
            "generation.model",
        ),
        temperature=_number(
            table["generation"]["temperature"], "generation.temperature"
        ),
        max_tokens=_positive_int(
            table["generation"]["max_tokens"], "generation.max_tokens"
        ),
    )
    assessment_type = AssessmentType.from_value(
        _non_empty(
            core_config.pick_first(
                overrides.assessment_type,
                env_("ASSESSMENT_TYPE"),
                table["quiz"]["assessment_type"],
            ),
            "quiz.assessment_type",
        )
    )
    language = Language.from_value(
        _non_empty(
            core_config.pick_first(
                overrides.language, env_("LANGUAGE"), table["quiz"]["language"]
            ),
            "quiz.language",
        )
    )
    report_dir_raw = core_config.pick_first(
        overrides.report_dir,
        env_("REPORT_DIR"),
        table["report"]["output_dir"],
    )
    report = ReportSettings(
        output_dir=_resolve_dir(report_dir_raw, layout),
        paper_size=_non_empty(table["report"]["paper_size"], "report.paper_size"),
        orientation=_non_empty(
            table["report"]["orientation"], "report.orientation"
        ),
        margin=_non_empty(table["report"]["margin"], "report.margin"),
    )
    log_level = _non_empty(
        core_config.pick_first(
            overrides.log_level, env_("LOG_LEVEL"), table["logging"]["level"]
        ),
        "logging.level",
    ).upper()

    config = LectureQuizConfig(
        generation=generation,
        assessment_type=assessment_type,
        language=language,
        report=report,
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "generation": {
            "model": DEFAULT_MODEL,
            "temperature": 0.4,
            "max_tokens": 8192,
        },
        "quiz": {
            "assessment_type": AssessmentType.QUIZ.value,
            "language": Language.PRIMARY.value,
        },
        "report": {
            "output_dir": None,
            "paper_size": "a4",
            "orientation": "portrait",
            "margin": "2cm",
        },
        "logging": {"level": "INFO"},
    }


def _requested_path(
    config_path: Optional[Path], env_map: Mapping[str, str]
) -> Optional[Path]:
    if config_path is not None:
        return Path(config_path).expanduser()
    from_env = (env_map.get(CONFIG_ENV) or "").strip()
    if from_env:
        return Path(from_env).expanduser()
    return None


def _resolve_dir(
    value: object, layout: workspace_mod.WorkspaceLayout
) -> Path:
    if value is None:
        return layout.path_for("reports")
    if not isinstance(value, (str, Path)) or not str(value).strip():
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail="report.output_dir must be a non-empty string",
        )
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = layout.home / path
    return path.resolve()


def _non_empty(value: object, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail=f"{key} must be a non-empty string",
        )
    return value.strip()


def _number(value: object, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(
            ConfigError.INVALID_SETTING, detail=f"{key} must be a number"
        )
    return float(value)


def _positive_int(value: object, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(
            ConfigError.INVALID_SETTING,
            detail=f"{key} must be a positive integer",
        )
    return value
