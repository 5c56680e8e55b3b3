from __future__ import annotations

from typing import Optional

from normconv.core.numeric import to_int_or_none
from normconv.engine.constants import COMPOSITE_CEILING, COMPOSITE_FLOOR, FALLBACK_HALF_WIDTH
from normconv.engine.norms.merge import MergedTables
from normconv.engine.norms.value_objects import CompositeLookup, Interval, IntervalSource

__all__ = ["CompositeResolver", "IntervalResolver", "fallback_interval"]


def fallback_interval(composite: Optional[int]) -> Optional[Interval]:
    """Placeholder interval of +/-8 points, lower bound floored at 40 and upper bound capped at 160.

    Only a visual stand-in for a missing published interval; it is tagged
    ``IntervalSource.FALLBACK`` so callers can tell it apart.
    """
    if composite is None:
        return None
    return Interval(
        lo=max(COMPOSITE_FLOOR, composite - FALLBACK_HALF_WIDTH),
        hi=min(COMPOSITE_CEILING, composite + FALLBACK_HALF_WIDTH),
        source=IntervalSource.FALLBACK,
    )


class CompositeResolver:
    """Exact-match lookup of raw sums in merged conversion tables."""

    def __init__(self, tables: MergedTables) -> None:
        self._tables = tables

    def resolve(self, key: str, raw_sum: Optional[int]) -> CompositeLookup:
        raw = to_int_or_none(raw_sum)
        if raw is None:
            return CompositeLookup(raw_sum=None, composite=None, percentile=None)
        row = self._tables.row(key, raw)
        if row is None:
            return CompositeLookup(raw_sum=raw, composite=None, percentile=None)
        return CompositeLookup(raw_sum=raw, composite=row.composite, percentile=row.percentile)


class IntervalResolver:
    """Published interval for a composite, else :func:`fallback_interval`."""

    def __init__(self, tables: MergedTables) -> None:
        self._tables = tables

    def resolve(self, key: str, composite: Optional[int]) -> Optional[Interval]:
        if composite is None:
            return None
        published = self._tables.interval(key, composite)
        if published is not None:
            return published
        return fallback_interval(composite)
