from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, Mapping, Tuple

from normconv.core.metrics import inc_counter
from normconv.engine.constants import COMPOSITE_KEYS
from normconv.engine.norms.value_objects import Interval, NormRow

if TYPE_CHECKING:  # pragma: no cover
    from normconv.engine.norms.store import NormativeTableStore

__all__ = ["MergedTables", "TableMerger"]


@dataclass(frozen=True, slots=True)
class MergedTables:
    """Effective conversion and interval tables for one set of bands."""

    band_ids: Tuple[str, ...]
    conversions: Mapping[str, Mapping[int, NormRow]]
    intervals: Mapping[str, Mapping[int, Interval]]

    def row(self, key: str, raw_sum: int) -> NormRow | None:
        return self.conversions.get(key, {}).get(raw_sum)

    def interval(self, key: str, composite: int) -> Interval | None:
        return self.intervals.get(key, {}).get(composite)


class TableMerger:
    """Combine the tables of eligible bands into one table per composite key.

    Bands are applied in the store's ascending ``min_months`` order whatever
    order the caller passes ids in; on a raw-sum collision the later band's
    entry replaces the earlier one. Entries are never averaged.

    Results are memoised per band set. Merged tables are read-only views, so
    sharing them between requests is indistinguishable from rebuilding.
    """

    def __init__(self, store: "NormativeTableStore", *, max_entries: int = 256) -> None:
        self._store = store
        self._max_entries = max_entries
        self._memo: Dict[Tuple[str, ...], MergedTables] = {}
        self._lock = Lock()

    def ordered_ids(self, band_ids: Iterable[str]) -> Tuple[str, ...]:
        wanted = set(band_ids)
        return tuple(band.id for band in self._store.bands if band.id in wanted)

    def merge(self, band_ids: Iterable[str]) -> MergedTables:
        order = self.ordered_ids(band_ids)
        cached = self._memo.get(order)
        if cached is not None:
            inc_counter("norms.merge.memo_hit")
            return cached
        merged = self._build(order)
        with self._lock:
            if len(self._memo) >= self._max_entries:
                self._memo.pop(next(iter(self._memo)))
            self._memo.setdefault(order, merged)
        inc_counter("norms.merge.built")
        return merged

    def _build(self, order: Tuple[str, ...]) -> MergedTables:
        conversions: Dict[str, Mapping[int, NormRow]] = {}
        intervals: Dict[str, Mapping[int, Interval]] = {}
        for key in COMPOSITE_KEYS:
            rows: Dict[int, NormRow] = {}
            bounds: Dict[int, Interval] = {}
            for band_id in order:
                rows.update(self._store.conversion_table(band_id, key))
                bounds.update(self._store.interval_table(band_id, key))
            conversions[key] = MappingProxyType(rows)
            intervals[key] = MappingProxyType(bounds)
        return MergedTables(
            band_ids=order,
            conversions=MappingProxyType(conversions),
            intervals=MappingProxyType(intervals),
        )
