"""
Field — the column descriptor a fingerprint is computed for.

Fields are supplied by the caller (column-metadata resolution happens
upstream) and carried through to output records unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from fingerprinting.config import DEFAULT_CONFIG, FingerprintConfig
from fingerprinting.costs import MaxCost
from fingerprinting.models.types import ANY, Scale, TypeSignature

__all__ = ["Field", "field_type", "ProfilingOptions"]


@dataclass(frozen=True)
class Field:
    """Immutable reference to a single column.

    Parameters
    ----------
    name : str
        Column name; also used as the first column header of rendered
        histograms.
    base_type : str
        Storage type tag, e.g. ``"type/Integer"``.
    special_type : str, optional
        Semantic type tag, e.g. ``"type/Category"``.  ``None`` means no
        special type and is treated as ``"type/*"``.
    """

    name: str
    base_type: str
    special_type: str | None = None
    display_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "base_type": self.base_type}
        if self.special_type is not None:
            out["special_type"] = self.special_type
        if self.display_name is not None:
            out["display_name"] = self.display_name
        return out


def field_type(f: Field | Sequence[Field]) -> TypeSignature:
    """Return the dispatch key of a field, or a tuple of keys for several fields.

    >>> field_type(Field("age", "type/Integer"))
    ('type/Integer', 'type/*')
    """
    if isinstance(f, Field):
        return (f.base_type, f.special_type or ANY)
    return tuple(field_type(x) for x in f)


@dataclass(frozen=True)
class ProfilingOptions:
    """Caller-owned knobs shared by every pass of a fingerprinting run."""

    max_cost: MaxCost = field(default_factory=MaxCost)
    scale: Scale = Scale.RAW
    config: FingerprintConfig = DEFAULT_CONFIG

    def __post_init__(self) -> None:
        if not isinstance(self.scale, Scale):
            # Accept the plain string form ("month", …).
            object.__setattr__(self, "scale", Scale(self.scale))
