"""
Errors raised by the timecraft kernel machinery.

Registry errors also subclass KeyError so callers that treat the registry
as a mapping can catch them the usual way.
"""
from __future__ import annotations


class TimecraftError(Exception):
    """Base class for all timecraft errors."""

    pass


class RegistryError(TimecraftError):
    """Error in the kernel load/unload protocol."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class DuplicateKeyError(RegistryError, KeyError):
    """A kernel is already registered under this key."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Kernel key already registered: {key!r}")


class UnknownKeyError(RegistryError, KeyError):
    """No kernel is registered under this key."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"No kernel registered under key: {key!r}")


class MalformedMetakernelError(TimecraftError, ValueError):
    """A metakernel data line is not a NAME = VALUE assignment."""

    def __init__(self, line_number: int, line: str) -> None:
        super().__init__(
            f"Malformed metakernel assignment on data line {line_number}: {line.strip()!r}"
        )
        self.line_number = line_number
        self.line = line


class ToolkitUnavailableError(TimecraftError):
    """The requested toolkit capability was not configured."""

    pass


class ConfigError(TimecraftError):
    """Invalid timecraft configuration."""

    pass
