from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, List, Optional, Union

from .errors import DuplicateKeyError, ToolkitUnavailableError, UnknownKeyError
from .schema import KernelRecord
from .storage import KernelStorage
from .toolkit import KernelPool, TimeConverter

logger = logging.getLogger(__name__)

KernelBuffer = Union[bytes, bytearray, memoryview, str]

DEFAULT_PATH_PREFIX = "_buffer_"
DEFAULT_PATH_SUFFIX = ".bin"
CHRONOS_OUTPUT_CAPACITY = 256


def _as_bytes(buffer: KernelBuffer) -> bytes:
    if isinstance(buffer, str):
        return buffer.encode("utf-8")
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        return bytes(buffer)
    raise TypeError(f"Expected a bytes-like kernel buffer, got {type(buffer).__name__}")


class KernelRegistry:
    """Tracks kernels furnished from in-memory buffers.

    Each load writes the buffer to storage under a freshly generated path,
    furnishes it, and optionally remembers it under a caller-chosen key so
    it can be unloaded later. Generated paths come from a counter that only
    ever grows, so a path is never reused within the registry's lifetime.

    Every mutating operation runs under one lock, so a registry can be
    shared between threads.

    Example:
        registry = KernelRegistry(MemoryStorage(), RecordingKernelPool())
        registry.load_kernel(lsk_bytes, key="lsk")
        registry.unload_kernel("lsk")
    """

    def __init__(
        self,
        storage: KernelStorage,
        pool: KernelPool,
        converter: Optional[TimeConverter] = None,
        *,
        path_prefix: str = DEFAULT_PATH_PREFIX,
        path_suffix: str = DEFAULT_PATH_SUFFIX,
        chronos_capacity: int = CHRONOS_OUTPUT_CAPACITY,
    ) -> None:
        self._storage = storage
        self._pool = pool
        self._converter = converter
        self._path_prefix = path_prefix
        self._path_suffix = path_suffix
        self._chronos_capacity = chronos_capacity
        self._records: Dict[str, KernelRecord] = {}
        self._counter = 0
        self._lock = threading.RLock()

    @property
    def storage(self) -> KernelStorage:
        return self._storage

    @property
    def pool(self) -> KernelPool:
        return self._pool

    def set_time_converter(self, converter: Optional[TimeConverter]) -> None:
        """Register the toolkit binding used by chronos()."""
        self._converter = converter

    # -------------------------------------------------------------------------
    # Load / unload
    # -------------------------------------------------------------------------

    def _next_path(self) -> str:
        path = f"{self._path_prefix}{self._counter}{self._path_suffix}"
        self._counter += 1
        return path

    def load_kernel(self, buffer: KernelBuffer, key: Optional[str] = None) -> KernelRecord:
        """Materialize buffer in storage and furnish it.

        Raises DuplicateKeyError, without touching storage or the toolkit,
        if key is already registered. If furnishing fails the stored file is
        removed again and the toolkit error propagates.
        """
        data = _as_bytes(buffer)
        if key is not None and not isinstance(key, str):
            raise TypeError(f"kernel key must be a string, not {type(key).__name__}")
        with self._lock:
            if key is not None and key in self._records:
                raise DuplicateKeyError(key)

            generated_path = self._next_path()
            location = self._storage.write(generated_path, data)
            try:
                self._pool.furnish(location)
            except Exception:
                logger.warning(
                    "Furnish failed, removing %s", generated_path,
                    extra={"kernel_key": key, "kernel_path": generated_path},
                )
                try:
                    self._storage.delete(generated_path)
                except Exception:
                    logger.exception(
                        "Could not remove %s after failed furnish", generated_path,
                        extra={"kernel_key": key, "kernel_path": generated_path},
                    )
                raise

            record = KernelRecord(key=key, generated_path=generated_path, location=location)
            if key is not None:
                self._records[key] = record

        logger.debug(
            "Loaded kernel %s (%d bytes)", generated_path, len(data),
            extra={"kernel_key": key, "kernel_path": generated_path},
        )
        return record

    def unload_kernel(self, key: str) -> None:
        """Unload the kernel registered under key and delete its file.

        Raises UnknownKeyError if key is not registered, including when it
        has already been unloaded.
        Once the toolkit has released the kernel the key is dropped even if
        deleting the file fails, and that storage error propagates.
        """
        with self._lock:
            record = self._records.get(key)
            if record is None:
                raise UnknownKeyError(key)

            self._pool.unload(record.location)
            try:
                self._storage.delete(record.generated_path)
            finally:
                del self._records[key]

        logger.debug(
            "Unloaded kernel %s", record.generated_path,
            extra={"kernel_key": key, "kernel_path": record.generated_path},
        )

    def unload_all(self) -> int:
        """Unload every keyed kernel, most recently loaded first."""
        with self._lock:
            keys = list(self._records)
            for key in reversed(keys):
                self.unload_kernel(key)
        return len(keys)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[KernelRecord]:
        return self._records.get(key)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._records)

    def records(self) -> List[KernelRecord]:
        with self._lock:
            return list(self._records.values())

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __enter__(self) -> "KernelRegistry":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unload_all()

    # -------------------------------------------------------------------------
    # Toolkit passthrough
    # -------------------------------------------------------------------------

    def chronos(self, input_time: str, command_line: str) -> str:
        """Convert a time string with the toolkit's chronos utility.

        Raises ToolkitUnavailableError if no time converter is registered.
        """
        if self._converter is None:
            raise ToolkitUnavailableError("No time converter registered for chronos")
        output = self._converter.convert(command_line, input_time, self._chronos_capacity)
        return output[: self._chronos_capacity].strip()
