"""
Furnishing: route a buffer into the registry.

A buffer that sniffs and parses as a metakernel is expanded into the kernels
it lists; anything else is loaded as a single opaque kernel. Child kernels of
a keyed metakernel are keyed `<key>/<resolved path>` so the whole set can be
unloaded together with unfurnish().
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

from ..kernel.errors import UnknownKeyError
from ..kernel.metakernel import parse_metakernel
from ..kernel.registry import KernelBuffer, KernelRegistry
from ..kernel.schema import KernelRecord
from ..kernel.sniffer import is_metakernel

logger = logging.getLogger(__name__)

KernelFetcher = Callable[[str], bytes]

CHILD_KEY_SEPARATOR = "/"


def read_kernel_file(path: str) -> bytes:
    """Read a kernel from the local filesystem."""
    return Path(path).expanduser().read_bytes()


def child_key(key: str, path: str) -> str:
    return f"{key}{CHILD_KEY_SEPARATOR}{path}"


def furnish(
    registry: KernelRegistry,
    buffer: KernelBuffer,
    key: Optional[str] = None,
    fetch: KernelFetcher = read_kernel_file,
) -> List[KernelRecord]:
    """Load buffer, expanding it first if it is a metakernel.

    Returns the records of every kernel loaded, in load order. If any listed
    kernel cannot be fetched or loaded, the keyed kernels this call already
    loaded are unloaded again before the error propagates. Unkeyed kernels
    cannot be unloaded and stay furnished.
    """
    parsed = parse_metakernel(buffer) if is_metakernel(buffer) else None
    if parsed is None or parsed.paths is None:
        return [registry.load_kernel(buffer, key)]

    loaded: List[KernelRecord] = []
    try:
        for path in parsed.paths:
            record = registry.load_kernel(
                fetch(path),
                child_key(key, path) if key is not None else None,
            )
            loaded.append(record)
    except Exception:
        logger.warning(
            "Metakernel furnish failed after %d of %d kernels, rolling back",
            len(loaded), len(parsed.paths),
        )
        for record in reversed(loaded):
            if record.key is not None:
                registry.unload_kernel(record.key)
        raise

    logger.info("Furnished %d kernels from metakernel", len(loaded), extra={"kernel_key": key})
    return loaded


def unfurnish(registry: KernelRegistry, key: str) -> int:
    """Unload key and every child kernel furnished under it.

    Returns how many kernels were unloaded. Raises UnknownKeyError when
    nothing is registered under key.
    """
    prefix = key + CHILD_KEY_SEPARATOR
    matches = [k for k in registry.keys() if k == key or k.startswith(prefix)]
    if not matches:
        raise UnknownKeyError(key)
    for k in reversed(matches):
        registry.unload_kernel(k)
    return len(matches)
