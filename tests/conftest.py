"""
Pytest configuration and shared fixtures for timecraft tests.
"""
import pytest

from timecraft.kernel.registry import KernelRegistry
from timecraft.kernel.storage import MemoryStorage
from timecraft.kernel.toolkit import RecordingKernelPool


class EchoTimeConverter:
    """Time converter that records its calls and pads its answer."""

    def __init__(self, answer: str = "2000-01-01T12:00:00") -> None:
        self.answer = answer
        self.calls = []

    def convert(self, command_line: str, input_time: str, capacity: int) -> str:
        self.calls.append((command_line, input_time, capacity))
        return self.answer.ljust(capacity)


@pytest.fixture
def storage():
    """In-memory kernel storage."""
    return MemoryStorage()


@pytest.fixture
def pool():
    """Kernel pool that records furnished paths."""
    return RecordingKernelPool()


@pytest.fixture
def converter():
    return EchoTimeConverter()


@pytest.fixture
def registry(storage, pool, converter):
    """A fresh registry per test."""
    return KernelRegistry(storage, pool, converter)
