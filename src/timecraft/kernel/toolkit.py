"""
Toolkit capabilities: the narrow call contracts timecraft uses to reach SPICE.

Nothing here does astrodynamics. The kernel pool only furnishes and unloads
files, and the time converter is an opaque chronos-style call.
"""
from __future__ import annotations

from typing import Any, List, Protocol, runtime_checkable


@runtime_checkable
class KernelPool(Protocol):
    def furnish(self, path: str) -> None:
        """Load the kernel file at path into the toolkit's kernel pool."""
        ...

    def unload(self, path: str) -> None:
        """Remove a previously furnished kernel file from the pool."""
        ...


@runtime_checkable
class TimeConverter(Protocol):
    def convert(self, command_line: str, input_time: str, capacity: int) -> str:
        """Convert input_time as directed by a chronos command line.

        The result must fit in `capacity` characters.
        """
        ...


class SpiceKernelPool:
    """Kernel pool backed by the CSPICE library through SpiceyPy.

    Install with the `spice` extra. Toolkit errors (spiceypy's SpiceyError
    family) propagate unchanged.
    """

    def __init__(self) -> None:
        import spiceypy

        self._spice: Any = spiceypy

    def furnish(self, path: str) -> None:
        self._spice.furnsh(path)

    def unload(self, path: str) -> None:
        self._spice.unload(path)

    def count(self) -> int:
        """Number of files currently loaded in the pool (all kinds)."""
        return int(self._spice.ktotal("ALL"))


class RecordingKernelPool:
    """In-memory pool that records what would be furnished.

    Lets hosts stage kernels without a native toolkit, and backs the tests.
    """

    def __init__(self) -> None:
        self._loaded: List[str] = []

    @property
    def loaded(self) -> List[str]:
        """Currently furnished paths, in load order."""
        return list(self._loaded)

    def furnish(self, path: str) -> None:
        self._loaded.append(path)

    def unload(self, path: str) -> None:
        if path not in self._loaded:
            raise KeyError(path)
        self._loaded.remove(path)

    def count(self) -> int:
        return len(self._loaded)
