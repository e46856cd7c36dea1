"""
Kernel storage: where buffered kernels are materialized before furnishing.

The registry only needs to write and delete whole files, so storage is a
narrow protocol. `write` returns the location the toolkit should be given,
which for a directory is the absolute file path.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Protocol, Union, runtime_checkable


@runtime_checkable
class KernelStorage(Protocol):
    def write(self, path: str, data: bytes) -> str:
        """Store data at path, returning the location to furnish."""
        ...

    def delete(self, path: str) -> None:
        ...

    def exists(self, path: str) -> bool:
        ...


class DirectoryStorage:
    """Kernels stored as files under a root directory."""

    def __init__(self, root: Union[Path, str]) -> None:
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _file(self, path: str) -> Path:
        return self._root / path

    def write(self, path: str, data: bytes) -> str:
        self._root.mkdir(parents=True, exist_ok=True)
        target = self._file(path)
        with open(target, "wb") as f:
            f.write(data)
        return str(target)

    def delete(self, path: str) -> None:
        self._file(path).unlink()

    def exists(self, path: str) -> bool:
        return self._file(path).is_file()


class MemoryStorage:
    """Kernels held in memory, keyed by their generated path.

    Useful when the toolkit reads from its own virtual filesystem, and in
    tests.
    """

    def __init__(self) -> None:
        self._files: Dict[str, bytes] = {}

    def write(self, path: str, data: bytes) -> str:
        self._files[path] = bytes(data)
        return path

    def delete(self, path: str) -> None:
        try:
            del self._files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def exists(self, path: str) -> bool:
        return path in self._files

    def read(self, path: str) -> bytes:
        try:
            return self._files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def __len__(self) -> int:
        return len(self._files)
