"""
Format sniffing: does a blob look like a metakernel?

This is advisory only. The marker may appear inside a comment block and
still count; callers that need certainty should run the full parser.
"""
from __future__ import annotations

from typing import Union

METAKERNEL_MARKER = "KERNELS_TO_LOAD"
_METAKERNEL_MARKER_BYTES = METAKERNEL_MARKER.encode("utf-8")

Contents = Union[str, bytes, bytearray, memoryview]


def is_metakernel(contents: Contents) -> bool:
    """Return True if the KERNELS_TO_LOAD marker occurs anywhere in contents.

    Text is searched by code point, bytes-like input byte by byte (so binary
    kernels never need decoding).
    """
    if isinstance(contents, str):
        return METAKERNEL_MARKER in contents
    if isinstance(contents, memoryview):
        contents = contents.tobytes()
    if isinstance(contents, (bytes, bytearray)):
        return contents.find(_METAKERNEL_MARKER_BYTES) != -1
    raise TypeError(
        f"Expected text or bytes-like contents, got {type(contents).__name__}"
    )
