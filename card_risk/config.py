"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``CARD_RISK_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The scoring engine itself never calls ``load_config()``. Callers pass the
relevant sections (``ScoringSettings``, ``SanitizerConfig``, ...) explicitly,
so tests can build them directly without touching the filesystem.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite settings for persisted speculation scores."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/card_risk.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class SanitizerConfig(BaseModel):
    """Price-series cleaning thresholds."""

    model_config = ConfigDict(frozen=True)

    outlier_sigma: float = 3.0
    max_gap_days: int = 2

    @field_validator("outlier_sigma")
    @classmethod
    def validate_sigma(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"outlier_sigma must be positive, got {v}.")
        return v

    @field_validator("max_gap_days")
    @classmethod
    def validate_gap(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_gap_days must be >= 1, got {v}.")
        return v


class MacroDefaultsConfig(BaseModel):
    """Static "current environment" snapshot used when live macro data is missing."""

    model_config = ConfigDict(frozen=True)

    btc_correlation: float = 0.65
    fear_greed_index: float = 68.0
    policy_rate: float = 4.5

    @field_validator("btc_correlation")
    @classmethod
    def validate_correlation(cls, v: float) -> float:
        if not -1.0 <= v <= 1.0:
            raise ValueError(f"btc_correlation must be in [-1, 1], got {v}.")
        return v

    @field_validator("fear_greed_index")
    @classmethod
    def validate_fear_greed(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"fear_greed_index must be in [0, 100], got {v}.")
        return v


class ScoringConfig(BaseModel):
    """Engine behaviour switches."""

    model_config = ConfigDict(frozen=True)

    sanitize_input: bool = True
    exclude_interpolated: bool = False


class ProvidersConfig(BaseModel):
    """External data provider settings."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["static", "http"] = "static"
    timeout_seconds: float = 10.0
    coingecko_url: str = "https://api.coingecko.com/api/v3"
    fear_greed_url: str = "https://api.alternative.me/fng/"
    reddit_url: str = "https://www.reddit.com"
    subreddits: list[str] = ["PokeInvesting", "PokemonTCG", "pkmntcgcollections"]
    user_agent: str = "card-risk/0.1 (collectible card risk scoring)"
    btc_history_days: int = 90

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class BatchConfig(BaseModel):
    """Batch scoring parameters."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["quick", "full"] = "quick"
    concurrency: int = 8

    @field_validator("concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"concurrency must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/card_risk.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class ScoringSettings(BaseModel):
    """The subset of configuration the scoring engine needs per call.

    Built from ``AppConfig.scoring_settings()`` in the CLI, or directly
    (all defaults) in library use and tests.
    """

    model_config = ConfigDict(frozen=True)

    scoring: ScoringConfig = ScoringConfig()
    sanitizer: SanitizerConfig = SanitizerConfig()
    macro_defaults: MacroDefaultsConfig = MacroDefaultsConfig()
    provider_timeout_seconds: float = 10.0


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    CLI commands receive an ``AppConfig`` instance constructed by
    ``load_config()``, which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    scoring: ScoringConfig = ScoringConfig()
    sanitizer: SanitizerConfig = SanitizerConfig()
    macro_defaults: MacroDefaultsConfig = MacroDefaultsConfig()
    providers: ProvidersConfig = ProvidersConfig()
    batch: BatchConfig = BatchConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False

    def scoring_settings(self) -> ScoringSettings:
        """Project this config onto the engine's per-call settings."""
        return ScoringSettings(
            scoring=self.scoring,
            sanitizer=self.sanitizer,
            macro_defaults=self.macro_defaults,
            provider_timeout_seconds=self.providers.timeout_seconds,
        )


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

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

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
    """Apply CARD_RISK_* env vars to the raw config dict.

    Supported overrides:
      CARD_RISK_DB_PATH        → raw["database"]["db_path"]
      CARD_RISK_LOG_LEVEL      → raw["logging"]["level"]
      CARD_RISK_PROVIDER_MODE  → raw["providers"]["mode"]
      CARD_RISK_DEBUG          → raw["debug"]
    """
    if db_path := os.environ.get("CARD_RISK_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("CARD_RISK_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if provider_mode := os.environ.get("CARD_RISK_PROVIDER_MODE"):
        raw.setdefault("providers", {})["mode"] = provider_mode

    if debug := os.environ.get("CARD_RISK_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        scoring=ScoringConfig(**raw.get("scoring", {})),
        sanitizer=SanitizerConfig(**raw.get("sanitizer", {})),
        macro_defaults=MacroDefaultsConfig(**raw.get("macro_defaults", {})),
        providers=ProvidersConfig(**raw.get("providers", {})),
        batch=BatchConfig(**raw.get("batch", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
