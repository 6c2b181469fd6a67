"""
Streaming aggregators and the combinators that compose them.

An :class:`Aggregator` is a fold split into three phases::

    state = agg.init()
    for item in items:
        state = agg.step(state, item)
    result = agg.complete(state)

:func:`fuse` turns a mapping of named aggregators into one aggregator that
feeds every item to every child and completes into a ``{name: result}``
dict, so any number of statistics share a single pass over the data.
:func:`pre_step` and :func:`post_complete` transform the input and the
output of an aggregator; :func:`with_filter` drops items before they reach
it; :func:`rollup` runs an aggregator per group.

State is owned by one pass.  Aggregators themselves are stateless
descriptions and may be reused for any number of passes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, Protocol

__all__ = [
    "Aggregator",
    "Reducer",
    "fuse",
    "pre_step",
    "post_complete",
    "with_filter",
    "rollup",
    "reduce_with",
]

logger = logging.getLogger(__name__)


def _identity(x: Any) -> Any:
    return x


# ---------------------------------------------------------------------------
# Protocol + the generic implementation
# ---------------------------------------------------------------------------

class Aggregator(Protocol):
    """Protocol every aggregator satisfies."""

    def init(self) -> Any:
        """Return a fresh state for one pass."""
        ...

    def step(self, state: Any, item: Any) -> Any:
        """Fold *item* into *state* and return the new state."""
        ...

    def complete(self, state: Any) -> Any:
        """Turn the final state into the aggregator's result."""
        ...


class Reducer:
    """Aggregator assembled from three plain callables.

    Parameters
    ----------
    init : callable
        ``() -> state``.
    step : callable
        ``(state, item) -> state``.
    complete : callable, optional
        ``state -> result``; identity by default.
    """

    __slots__ = ("_init", "_step", "_complete")

    def __init__(
        self,
        init: Callable[[], Any],
        step: Callable[[Any, Any], Any],
        complete: Callable[[Any], Any] = _identity,
    ) -> None:
        self._init = init
        self._step = step
        self._complete = complete

    def init(self) -> Any:
        return self._init()

    def step(self, state: Any, item: Any) -> Any:
        return self._step(state, item)

    def complete(self, state: Any) -> Any:
        return self._complete(state)


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------

class _Fused:
    __slots__ = ("_children",)

    def __init__(self, children: Mapping[str, Aggregator]) -> None:
        self._children = dict(children)

    def init(self) -> dict[str, Any]:
        return {name: agg.init() for name, agg in self._children.items()}

    def step(self, state: dict[str, Any], item: Any) -> dict[str, Any]:
        for name, agg in self._children.items():
            state[name] = agg.step(state[name], item)
        return state

    def complete(self, state: dict[str, Any]) -> dict[str, Any]:
        return {name: agg.complete(state[name]) for name, agg in self._children.items()}


def fuse(children: Mapping[str, Aggregator]) -> Aggregator:
    """Run every aggregator in *children* over the same single pass.

    The result is a dict with the same keys as *children*.
    """
    return _Fused(children)


def pre_step(agg: Aggregator, f: Callable[[Any], Any]) -> Aggregator:
    """Apply *f* to every item before it reaches *agg*."""
    return Reducer(agg.init, lambda state, item: agg.step(state, f(item)), agg.complete)


def post_complete(agg: Aggregator, g: Callable[[Any], Any]) -> Aggregator:
    """Apply *g* to the result of *agg*."""
    return Reducer(agg.init, agg.step, lambda state: g(agg.complete(state)))


def with_filter(agg: Aggregator, pred: Callable[[Any], bool]) -> Aggregator:
    """Feed *agg* only the items for which *pred* holds."""

    def step(state: Any, item: Any) -> Any:
        return agg.step(state, item) if pred(item) else state

    return Reducer(agg.init, step, agg.complete)


def rollup(agg: Aggregator, key_fn: Callable[[Any], Hashable]) -> Aggregator:
    """Group items by ``key_fn(item)`` and run a separate *agg* per group.

    Each group gets its own ``agg.init()`` state.  The builder dict is private
    to the pass; the result is a read-only ``{key: result}`` mapping.
    """

    def step(groups: dict[Hashable, Any], item: Any) -> dict[Hashable, Any]:
        key = key_fn(item)
        state = groups[key] if key in groups else agg.init()
        groups[key] = agg.step(state, item)
        return groups

    def complete(groups: dict[Hashable, Any]) -> Mapping[Hashable, Any]:
        return MappingProxyType({k: agg.complete(v) for k, v in groups.items()})

    return Reducer(dict, step, complete)


def reduce_with(agg: Aggregator, items: Iterable[Any]) -> Any:
    """Run one complete pass of *agg* over *items* and return its result."""
    state = agg.init()
    n = 0
    for item in items:
        state = agg.step(state, item)
        n += 1
    logger.debug("Folded %d items", n)
    return agg.complete(state)
