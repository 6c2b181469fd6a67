"""
Type ontology used as the dispatch key for fingerprinters.

Type tags are plain strings (``"type/Integer"``, ``"type/Category"`` …)
arranged in a single-inheritance hierarchy rooted at ``"type/*"``.
Base types (what a column stores) and special types (what a column means)
share the same hierarchy, so one :func:`isa` answers both questions.

Also defines the :class:`Scale` enum used by temporal fingerprints.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

__all__ = [
    "ANY",
    "NUMBER",
    "TEXT",
    "DATETIME",
    "CATEGORY",
    "PARENTS",
    "isa",
    "signature_matches",
    "Signature",
    "TypeSignature",
    "Scale",
]


ANY = "type/*"
NUMBER = "type/Number"
TEXT = "type/Text"
DATETIME = "type/DateTime"
CATEGORY = "type/Category"

# child -> parent.  Anything not listed derives directly from ``type/*``.
PARENTS: dict[str, str] = {
    # ── Base types ─────────────────────────────────────────────────────
    "type/Number": ANY,
    "type/Integer": NUMBER,
    "type/BigInteger": "type/Integer",
    "type/Float": NUMBER,
    "type/Decimal": "type/Float",
    "type/Text": ANY,
    "type/DateTime": ANY,
    "type/Date": DATETIME,
    "type/Time": DATETIME,
    "type/Boolean": ANY,
    # ── Special types ──────────────────────────────────────────────────
    "type/Special": ANY,
    "type/PK": "type/Special",
    "type/FK": "type/Special",
    "type/Category": "type/Special",
    "type/Enum": CATEGORY,
    "type/City": CATEGORY,
    "type/State": CATEGORY,
    "type/Country": CATEGORY,
    "type/ZipCode": CATEGORY,
    "type/Name": CATEGORY,
    "type/URL": "type/Special",
    "type/Email": "type/Special",
    "type/UUID": "type/Special",
    "type/Description": "type/Special",
}


Signature = tuple[str, str]
"""``(base_type, special_type)`` of a single field."""

TypeSignature = Union[Signature, tuple[Signature, ...]]


def isa(tag: str | None, parent: str) -> bool:
    """Return ``True`` if *tag* is *parent* or one of its descendants.

    >>> isa("type/Decimal", "type/Number")
    True
    >>> isa("type/Text", "type/Category")
    False
    """
    if parent == ANY:
        return True
    while tag is not None:
        if tag == parent:
            return True
        tag = PARENTS.get(tag, ANY if tag != ANY else None)
    return False


def signature_matches(signature: Signature, pattern: Signature) -> bool:
    """Component-wise :func:`isa` of a ``(base, special)`` pair."""
    return len(signature) == 2 and all(isa(t, p) for t, p in zip(signature, pattern))


class Scale(Enum):
    """Bucket granularity of a temporal series."""

    RAW = "raw"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
