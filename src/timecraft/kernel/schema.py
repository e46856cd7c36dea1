from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


Number = Union[int, float]
Scalar = Union[str, int, float]
FieldValue = Union[str, int, float, List[Scalar]]
FieldTable = Dict[str, FieldValue]


class ParsedMetakernel(BaseModel):
    """Result of parsing a metakernel's data section.

    `paths` is None when the metakernel declares no KERNELS_TO_LOAD;
    otherwise it holds the symbol-resolved kernel paths in load order.
    """

    paths: Optional[List[str]] = None
    fields: Dict[str, FieldValue] = Field(default_factory=dict)


class KernelRecord(BaseModel):
    """A kernel materialized in storage and furnished to the toolkit."""

    key: Optional[str] = None
    generated_path: str
    location: str
