"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``LOAN_PRIORITY_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The engine itself never reads configuration. Callers (the CLI, a service)
load ``AppConfig`` once and pass values such as ``stats.thresholds()`` into
the engine factories.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from loan_priority.engine.priority_engine import StatsThresholds

# ── Sub-config models ─────────────────────────────────────────────────────────


class StatsConfig(BaseModel):
    """Bucket boundaries shared by every domain engine.

    Validation of the ordering happens in ``StatsThresholds``.
    """

    model_config = ConfigDict(frozen=True)

    critical: float = 70.0
    high: float = 50.0
    medium: float = 25.0

    def thresholds(self) -> StatsThresholds:
        return StatsThresholds(critical=self.critical, high=self.high, medium=self.medium)


class OutputConfig(BaseModel):
    """Where and how ranking exports are written."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "data/outputs/rankings"
    default_format: Literal["csv", "json"] = "json"
    top_n: int = 25

    @field_validator("top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"top_n must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    stats: StatsConfig = StatsConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            raw = _deep_merge(raw, tomllib.load(f))

    # 3. Apply LOAN_PRIORITY_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply LOAN_PRIORITY_* env vars to the raw config dict.

    Supported overrides:
      LOAN_PRIORITY_LOG_LEVEL   → raw["logging"]["level"]
      LOAN_PRIORITY_OUTPUT_DIR  → raw["output"]["output_dir"]
      LOAN_PRIORITY_DEBUG       → raw["debug"]
    """
    if log_level := os.environ.get("LOAN_PRIORITY_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if output_dir := os.environ.get("LOAN_PRIORITY_OUTPUT_DIR"):
        raw.setdefault("output", {})["output_dir"] = output_dir

    if debug := os.environ.get("LOAN_PRIORITY_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure.

    Thresholds are checked eagerly so a bad ``[stats]`` section fails at
    load time rather than when the first engine is built.
    """
    stats = StatsConfig(**raw.get("stats", {}))
    stats.thresholds()

    return AppConfig(
        stats=stats,
        output=OutputConfig(**raw.get("output", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
