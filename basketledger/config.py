"""
Store configuration.

Precedence (lowest first): defaults, TOML file, environment, explicit
overrides from the CLI. The TOML file holds a single [basketledger]
table:

    [basketledger]
    store_dir = ".basketledger"
    max_update_attempts = 3
    log_level = "INFO"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError
from .pos.engine import DEFAULT_MAX_UPDATE_ATTEMPTS, BasketEngine
from .store import FileSubstrate, MemorySubstrate, Substrate

CONFIG_FILENAME = "basketledger.toml"
STORE_DIRNAME = ".basketledger"

ENV_STORE = "BASKETLEDGER_STORE"
ENV_LOG_LEVEL = "BASKETLEDGER_LOG_LEVEL"
ENV_MAX_UPDATE_ATTEMPTS = "BASKETLEDGER_MAX_UPDATE_ATTEMPTS"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class StoreConfig:
    """Where the store lives and how the engine behaves."""

    store_dir: Path | None = None  # None: in-memory substrate
    max_update_attempts: int = DEFAULT_MAX_UPDATE_ATTEMPTS
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if isinstance(self.max_update_attempts, bool) or not isinstance(self.max_update_attempts, int):
            raise ConfigError(f"max_update_attempts must be an integer, got {self.max_update_attempts!r}")
        if self.max_update_attempts < 1:
            raise ConfigError(f"max_update_attempts must be at least 1, got {self.max_update_attempts}")
        level = str(self.log_level).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")
        object.__setattr__(self, "log_level", level)

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level)


def _parse_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _from_mapping(config: StoreConfig, data: Mapping[str, Any], *, base_dir: Path | None) -> StoreConfig:
    updates: dict[str, Any] = {}
    if data.get("store_dir") not in (None, ""):
        store_dir = Path(str(data["store_dir"])).expanduser()
        if base_dir is not None and not store_dir.is_absolute():
            store_dir = base_dir / store_dir
        updates["store_dir"] = store_dir
    if data.get("max_update_attempts") not in (None, ""):
        updates["max_update_attempts"] = _parse_int(data["max_update_attempts"], "max_update_attempts")
    if data.get("log_level") not in (None, ""):
        updates["log_level"] = str(data["log_level"])
    return replace(config, **updates) if updates else config


def load_config_file(path: Path) -> dict[str, Any]:
    """Read the [basketledger] table from a TOML file."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    table = data.get("basketledger", {})
    if not isinstance(table, dict):
        raise ConfigError(f"[basketledger] in {path} must be a table")
    return table


def load_config(
    path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> StoreConfig:
    """
    Build the effective configuration.

    Args:
        path: Optional TOML file; relative store_dir is resolved against its folder
        environ: Environment mapping (defaults to os.environ)
        overrides: Explicit values, e.g. from CLI options (None values ignored)

    Raises:
        ConfigError: a value is invalid or the file cannot be parsed
    """
    env = os.environ if environ is None else environ
    config = StoreConfig()

    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        config = _from_mapping(config, load_config_file(path), base_dir=path.parent)

    config = _from_mapping(
        config,
        {
            "store_dir": env.get(ENV_STORE),
            "log_level": env.get(ENV_LOG_LEVEL),
            "max_update_attempts": env.get(ENV_MAX_UPDATE_ATTEMPTS),
        },
        base_dir=None,
    )

    if overrides:
        config = _from_mapping(config, overrides, base_dir=None)
    return config


def open_substrate(config: StoreConfig) -> Substrate:
    if config.store_dir is None:
        return MemorySubstrate()
    return FileSubstrate(config.store_dir)


def open_engine(config: StoreConfig) -> BasketEngine:
    """Engine over the substrate selected by the configuration."""
    return BasketEngine(open_substrate(config), max_update_attempts=config.max_update_attempts)
