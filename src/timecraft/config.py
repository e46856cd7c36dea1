"""
Configuration for timecraft hosts.

The config file format:

```toml
[registry]
storage_dir = "~/.timecraft/kernels"   # omit for in-memory storage
path_prefix = "_buffer_"
path_suffix = ".bin"
chronos_capacity = 256

[logging]
level = "INFO"
json = false
```

Environment variables override the file:
    TIMECRAFT_STORAGE_DIR   storage directory
    TIMECRAFT_LOG_LEVEL     log level name
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found]

from .kernel.errors import ConfigError
from .kernel.registry import (
    CHRONOS_OUTPUT_CAPACITY,
    DEFAULT_PATH_PREFIX,
    DEFAULT_PATH_SUFFIX,
    KernelRegistry,
)
from .kernel.storage import DirectoryStorage, KernelStorage, MemoryStorage
from .kernel.toolkit import KernelPool, SpiceKernelPool, TimeConverter

DEFAULT_CONFIG_PATH = Path.home() / ".timecraft" / "config.toml"

ENV_STORAGE_DIR = "TIMECRAFT_STORAGE_DIR"
ENV_LOG_LEVEL = "TIMECRAFT_LOG_LEVEL"


@dataclass
class TimecraftConfig:
    """Settings for building a registry and its logging."""

    storage_dir: Optional[Path] = None  # None = in-memory storage
    path_prefix: str = DEFAULT_PATH_PREFIX
    path_suffix: str = DEFAULT_PATH_SUFFIX
    chronos_capacity: int = CHRONOS_OUTPUT_CAPACITY
    log_level: str = "INFO"
    json_logs: bool = False

    def validate(self) -> None:
        if not isinstance(self.chronos_capacity, int) or self.chronos_capacity <= 0:
            raise ConfigError(
                f"chronos_capacity must be a positive integer, got {self.chronos_capacity!r}"
            )
        if not self.path_prefix and not self.path_suffix:
            raise ConfigError("path_prefix and path_suffix cannot both be empty")
        if not isinstance(self.log_level, str) or not isinstance(
            logging.getLevelName(self.log_level.upper()), int
        ):
            raise ConfigError(f"Unknown log level: {self.log_level!r}")


def _table(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table")
    return table


def load_config(path: Path | str | None = None) -> TimecraftConfig:
    """Load configuration from config.toml, then apply environment overrides.

    A missing file yields the defaults. Raises ConfigError for values that
    fail validation or for a file that is not valid TOML.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    else:
        path = Path(path)

    data: Dict[str, Any] = {}
    if path.exists():
        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid config file {path}: {e}") from e

    registry = _table(data, "registry")
    logging_table = _table(data, "logging")

    config = TimecraftConfig(
        path_prefix=registry.get("path_prefix", DEFAULT_PATH_PREFIX),
        path_suffix=registry.get("path_suffix", DEFAULT_PATH_SUFFIX),
        chronos_capacity=registry.get("chronos_capacity", CHRONOS_OUTPUT_CAPACITY),
        log_level=logging_table.get("level", "INFO"),
        json_logs=bool(logging_table.get("json", False)),
    )

    storage_dir = os.environ.get(ENV_STORAGE_DIR) or registry.get("storage_dir")
    if storage_dir:
        config.storage_dir = Path(storage_dir).expanduser()

    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        config.log_level = log_level

    config.validate()
    return config


def create_storage(config: TimecraftConfig) -> KernelStorage:
    if config.storage_dir is None:
        return MemoryStorage()
    return DirectoryStorage(config.storage_dir)


def create_registry(
    config: Optional[TimecraftConfig] = None,
    pool: Optional[KernelPool] = None,
    converter: Optional[TimeConverter] = None,
) -> KernelRegistry:
    """Build a registry from configuration.

    The pool defaults to the SpiceyPy-backed toolkit pool.
    """
    if config is None:
        config = load_config()
    config.validate()
    if pool is None:
        pool = SpiceKernelPool()

    return KernelRegistry(
        create_storage(config),
        pool,
        converter,
        path_prefix=config.path_prefix,
        path_suffix=config.path_suffix,
        chronos_capacity=config.chronos_capacity,
    )
