"""
Fingerprint — the immutable record produced by one fingerprinting pass.

A fingerprint is a read-only mapping of statistic name to value.  Every
fingerprint carries ``type`` (the variant's type signature) and ``field``
(the :class:`~fingerprinting.models.field.Field` it describes); the other
keys depend on the variant.  Renderers never mutate a fingerprint, they
derive new ones through :meth:`Fingerprint.evolve`, :meth:`Fingerprint.without`
and :meth:`Fingerprint.select`.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

__all__ = ["Fingerprint"]


class Fingerprint(Mapping[str, Any]):
    """Read-only ``Mapping[str, Any]`` with copy-on-write helpers."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        merged = dict(data or {})
        merged.update(kwargs)
        object.__setattr__(self, "_data", merged)

    def __setattr__(self, name: str, value: Any) -> None:  # noqa: D105
        raise AttributeError("Fingerprint is immutable")

    def __getitem__(self, key: str) -> Any:  # noqa: D105
        return self._data[key]

    def __iter__(self) -> Iterator[str]:  # noqa: D105
        return iter(self._data)

    def __len__(self) -> int:  # noqa: D105
        return len(self._data)

    def __repr__(self) -> str:  # noqa: D105
        return f"Fingerprint({self._data!r})"

    def __reduce__(self):  # noqa: D105
        return (Fingerprint, (self._data,))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def type(self) -> Any:
        return self._data.get("type")

    @property
    def field(self) -> Any:
        return self._data.get("field")

    # ------------------------------------------------------------------
    # Derivation (always returns a new Fingerprint)
    # ------------------------------------------------------------------

    def evolve(self, **changes: Any) -> Fingerprint:
        """Return a copy with *changes* applied."""
        return Fingerprint(self._data, **changes)

    def without(self, *keys: str) -> Fingerprint:
        """Return a copy with *keys* removed (missing keys are ignored)."""
        return Fingerprint({k: v for k, v in self._data.items() if k not in keys})

    def select(self, *keys: str) -> Fingerprint:
        """Return a copy holding only *keys* that are present."""
        return Fingerprint({k: self._data[k] for k in keys if k in self._data})

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)
