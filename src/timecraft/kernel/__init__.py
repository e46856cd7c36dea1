"""
Kernel: the machinery of timecraft.

This module contains the kernel-management infrastructure:
- schema: parsed metakernel and kernel record structures
- errors: the exception hierarchy
- sniffer: cheap "is this a metakernel?" probe
- metakernel: metakernel lexer, parser and path-symbol resolution
- storage: where buffered kernels are materialized
- toolkit: call contracts for the SPICE kernel pool and chronos
- registry: the key -> kernel table and its load/unload protocol

The kernel is distinct from lib/ (helpers composed from the machinery).
"""
from .errors import (
    ConfigError,
    DuplicateKeyError,
    MalformedMetakernelError,
    RegistryError,
    TimecraftError,
    ToolkitUnavailableError,
    UnknownKeyError,
)
from .metakernel import parse_metakernel
from .registry import KernelRegistry
from .schema import FieldValue, KernelRecord, ParsedMetakernel
from .sniffer import is_metakernel
from .storage import DirectoryStorage, KernelStorage, MemoryStorage
from .toolkit import KernelPool, RecordingKernelPool, SpiceKernelPool, TimeConverter

__all__ = [
    # Errors
    "ConfigError",
    "DuplicateKeyError",
    "MalformedMetakernelError",
    "RegistryError",
    "TimecraftError",
    "ToolkitUnavailableError",
    "UnknownKeyError",
    # Schema
    "FieldValue",
    "KernelRecord",
    "ParsedMetakernel",
    # Parsing
    "is_metakernel",
    "parse_metakernel",
    # Storage
    "DirectoryStorage",
    "KernelStorage",
    "MemoryStorage",
    # Toolkit
    "KernelPool",
    "RecordingKernelPool",
    "SpiceKernelPool",
    "TimeConverter",
    # Registry
    "KernelRegistry",
]
