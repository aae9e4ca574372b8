"""Settings loader for Chronoid."""

from __future__ import annotations

import os
import tomllib
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from Chronoid.codec import DEFAULT_ALPHABET
from Chronoid.errors import ConfigurationError
from Chronoid.schemas import DEFAULT_EPOCH_START, GeneratorConfig
from Chronoid.units import MaxSortableRate, TimestampLevel

DEFAULT_CONFIG_FILE = "chronoid.toml"


def _config_path() -> Path:
    return Path(os.environ.get("CHRONOID_CONFIG_FILE", DEFAULT_CONFIG_FILE))


def _toml_to_fields(t: dict[str, Any]) -> dict[str, Any]:
    gen = t.get("generator", {}) or {}
    log_cfg = t.get("logging", {}) or {}
    out: dict[str, Any] = {}
    for key in (
        "alphabet",
        "total_length",
        "epoch_start",
        "epoch_end",
        "timestamp_length",
        "timestamp_level",
        "max_sortable_rate",
        "pool_size",
        "allow_insecure_fallback",
        "exhaustion_retries",
        "exhaustion_wait_seconds",
    ):
        if key in gen:
            out[key] = gen[key]

    overall = str(log_cfg.get("level", "INFO")).upper()
    if "enabled" in log_cfg:
        out["logging_enabled"] = bool(log_cfg["enabled"])
    if "level" in log_cfg:
        out["logging_level"] = overall

    # Per-handler levels: INFO|DEBUG|WARNING|ERROR|CRITICAL|NONE; booleans map
    # True -> overall level, False -> NONE.
    def _norm_level(v: Any) -> str | None:
        if isinstance(v, str):
            return v.upper()
        if isinstance(v, bool):
            return overall if v else "NONE"
        return None

    console = _norm_level(log_cfg.get("console"))
    to_file = _norm_level(log_cfg.get("to_file"))
    if console is not None:
        out["logging_console"] = console
    if to_file is not None:
        out["logging_file"] = to_file
    for src, dst in (
        ("file_path", "logging_file_path"),
        ("max_bytes", "logging_max_bytes"),
        ("backup_count", "logging_backup_count"),
    ):
        if src in log_cfg:
            out[dst] = log_cfg[src]
    return out


def read_toml_settings(path: Path) -> dict[str, Any]:
    """Load a chronoid TOML file with keys mapped to Settings fields."""
    if not path.exists():
        return {}
    with path.open("rb") as f:
        return _toml_to_fields(tomllib.load(f))


def _toml_settings_source() -> dict[str, Any]:
    """Project defaults from chronoid.toml; LOWER priority than env/.env."""
    return read_toml_settings(_config_path())


class Settings(BaseSettings):
    # --- Generator ---
    alphabet: str = DEFAULT_ALPHABET
    total_length: int = 32
    epoch_start: datetime = DEFAULT_EPOCH_START
    epoch_end: datetime | None = None
    timestamp_length: int | None = None
    timestamp_level: TimestampLevel = TimestampLevel.microsecond
    max_sortable_rate: MaxSortableRate = MaxSortableRate.micro100
    pool_size: int = Field(default=1024, ge=1)
    allow_insecure_fallback: bool = False
    exhaustion_retries: int = Field(default=0, ge=0)
    exhaustion_wait_seconds: float = Field(default=0.001, gt=0)

    # --- Logging ---
    logging_enabled: bool = True
    logging_level: str = "INFO"
    logging_console: str = "INFO"
    logging_file: str = "NONE"
    logging_file_path: str = "logs/chronoid.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="CHRONOID_",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Precedence (highest to lowest):
        # 1) init_settings (explicit overrides in code/tests/CLI flags)
        # 2) dotenv (.env in cwd)
        # 3) env_settings (OS env, CHRONOID_*)
        # 4) TOML (chronoid.toml) project defaults
        # 5) file_secret_settings
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )

    def generator_config(self) -> GeneratorConfig:
        return GeneratorConfig(
            alphabet=self.alphabet,
            total_length=self.total_length,
            epoch_start=self.epoch_start,
            epoch_end=self.epoch_end,
            timestamp_length=self.timestamp_length,
            timestamp_level=self.timestamp_level,
            max_sortable_rate=self.max_sortable_rate,
            pool_size=self.pool_size,
            allow_insecure_fallback=self.allow_insecure_fallback,
            exhaustion_retries=self.exhaustion_retries,
            exhaustion_wait_seconds=self.exhaustion_wait_seconds,
        )


def load_settings(config_path: str | Path | None = None, **overrides: Any) -> Settings:
    """Build settings; an explicit ``config_path`` must exist and is applied as
    init overrides.

    ``overrides`` with a ``None`` value are ignored so CLI flags that were not
    given fall through to the lower-priority sources.
    """
    init: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigurationError(f"Config file not found: {path}", context={"path": str(path)})
        init.update(read_toml_settings(path))
    init.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**init)
