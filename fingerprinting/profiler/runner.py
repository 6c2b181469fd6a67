"""
Batch runner — fingerprint many columns concurrently.

Every column gets its own aggregator and its own pass; nothing is shared
between passes, so columns can be fingerprinted in parallel without any
coordination.  A failed pass (e.g. a malformed timestamp) fails only its
own column: the error is logged and recorded, the other columns complete.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent import futures
from typing import Any, Union

from fingerprinting.models.field import Field, ProfilingOptions
from fingerprinting.models.fingerprint import Fingerprint
from fingerprinting.profiler.dispatch import fingerprint

__all__ = ["FingerprintRunner", "column_key"]

logger = logging.getLogger(__name__)

ColumnKey = Union[str, tuple[str, ...]]


def column_key(field: Field | Sequence[Field]) -> ColumnKey:
    """Field name, or the tuple of names for a pair of fields."""
    if isinstance(field, Field):
        return field.name
    return tuple(f.name for f in field)


class FingerprintRunner:
    """Runs one fingerprinting pass per column and collects the results.

    Usage::

        runner = FingerprintRunner(ProfilingOptions(scale=Scale.MONTH))
        runner.run([(price_field, prices), ((ts_field, price_field), pairs)])
        runner.fingerprints["price"]
    """

    def __init__(self, options: ProfilingOptions | None = None) -> None:
        self._options = options or ProfilingOptions()
        self._fingerprints: dict[ColumnKey, Fingerprint] = {}
        self._failures: dict[ColumnKey, BaseException] = {}

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def run(
        self,
        columns: Iterable[tuple[Field | Sequence[Field], Iterable[Any]]],
        *,
        max_workers: int = 4,
    ) -> None:
        """Fingerprint every ``(field, values)`` in *columns* on a thread pool.

        At most ``2 * max_workers`` passes are in flight, so *columns* may be
        a lazy generator over more data than fits in memory at once.
        """
        max_queue_size = max_workers * 2

        with futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            active: dict[futures.Future[Fingerprint], ColumnKey] = {}

            for field, values in columns:
                fut = executor.submit(fingerprint, field, values, self._options)
                active[fut] = column_key(field)

                if len(active) >= max_queue_size:
                    done, _ = futures.wait(active, return_when=futures.FIRST_COMPLETED)
                    for d in done:
                        self._collect(active.pop(d), d)

            for fut in futures.as_completed(list(active)):
                self._collect(active.pop(fut), fut)

        logger.info(
            "Fingerprinted %d columns (%d failed)",
            len(self._fingerprints),
            len(self._failures),
        )

    def _collect(self, key: ColumnKey, fut: futures.Future[Fingerprint]) -> None:
        try:
            self._fingerprints[key] = fut.result()
        except Exception as e:
            logger.error("Fingerprinting %s failed: %s", key, e)
            self._failures[key] = e

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def fingerprints(self) -> dict[ColumnKey, Fingerprint]:
        return dict(self._fingerprints)

    @property
    def failures(self) -> dict[ColumnKey, BaseException]:
        return dict(self._failures)
