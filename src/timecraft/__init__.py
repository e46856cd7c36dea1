"""
timecraft: kernel management for the SPICE toolkit.

Public API re-exports from kernel/ (machinery) and lib/ (helpers).
"""
from .config import TimecraftConfig, create_registry, load_config
from .kernel.errors import (
    ConfigError,
    DuplicateKeyError,
    MalformedMetakernelError,
    RegistryError,
    TimecraftError,
    ToolkitUnavailableError,
    UnknownKeyError,
)
from .kernel.metakernel import parse_metakernel
from .kernel.registry import KernelRegistry
from .kernel.schema import KernelRecord, ParsedMetakernel
from .kernel.sniffer import is_metakernel
from .kernel.storage import DirectoryStorage, MemoryStorage
from .kernel.toolkit import RecordingKernelPool, SpiceKernelPool
from .lib.furnish import furnish, unfurnish
from .observability import configure_logging

__version__ = "0.1.0"

__all__ = [
    # Parsing
    "is_metakernel",
    "parse_metakernel",
    "ParsedMetakernel",
    # Registry
    "KernelRegistry",
    "KernelRecord",
    "DirectoryStorage",
    "MemoryStorage",
    "RecordingKernelPool",
    "SpiceKernelPool",
    # Furnishing
    "furnish",
    "unfurnish",
    # Config / logging
    "TimecraftConfig",
    "create_registry",
    "load_config",
    "configure_logging",
    # Errors
    "ConfigError",
    "DuplicateKeyError",
    "MalformedMetakernelError",
    "RegistryError",
    "TimecraftError",
    "ToolkitUnavailableError",
    "UnknownKeyError",
]
