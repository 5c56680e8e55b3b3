from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from normconv.core.errors import BandNotFoundError
from normconv.core.logging import get_logger
from normconv.core.numeric import to_int_or_none
from normconv.engine.constants import COMPOSITE_KEYS, OVERALL_KEY
from normconv.engine.norms.merge import MergedTables, TableMerger
from normconv.engine.norms.rows import normalize_interval, normalize_row
from normconv.engine.norms.value_objects import Interval, NormativeBand, NormRow

__all__ = ["NormativeTableStore", "SkippedDefinition", "BandTables"]

logger = get_logger("normconv.engine.norms.store", component="norm_store")

ConversionTable = Mapping[int, NormRow]
IntervalTable = Mapping[int, Interval]

_INTERVAL_SECTIONS = ("IC90", "ic90", "intervals")
_EMPTY_CONVERSION: ConversionTable = MappingProxyType({})
_EMPTY_INTERVALS: IntervalTable = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class SkippedDefinition:
    """A table definition that ``load`` ignored, with the reason why."""

    position: int
    reason: str
    source: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BandTables:
    conversions: Mapping[str, ConversionTable]
    intervals: Mapping[str, IntervalTable]


def _definition_value(definition: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in definition and definition[name] is not None:
            return definition[name]
    return None


def _months(definition: Mapping[str, Any], camel: str, snake: str) -> Optional[int]:
    value = _definition_value(definition, camel, snake)
    if value is None:
        return 0
    return to_int_or_none(value)


def _build_conversion_table(band_id: str, key: str, raw_table: Any) -> ConversionTable:
    if not isinstance(raw_table, Mapping) or not raw_table:
        return _EMPTY_CONVERSION
    overall = key == OVERALL_KEY
    rows: Dict[int, NormRow] = {}
    for raw_key, raw_value in raw_table.items():
        raw_sum = to_int_or_none(raw_key)
        row = normalize_row(raw_value, overall=overall)
        if raw_sum is None or raw_sum < 0 or row is None:
            logger.debug(
                "norm_row_dropped",
                extra={"structured_data": {"band_id": band_id, "index": key, "raw_key": str(raw_key)}},
            )
            continue
        rows[raw_sum] = row
    return MappingProxyType(rows)


def _build_interval_table(
    band_id: str, key: str, conversions: ConversionTable, raw_section: Any
) -> IntervalTable:
    intervals: Dict[int, Interval] = {}
    # Intervals carried on conversion rows come first; the explicit interval
    # section of the definition overrides them.
    for row in conversions.values():
        if row.interval is not None:
            intervals[row.composite] = row.interval
    if isinstance(raw_section, Mapping):
        for raw_composite, raw_interval in raw_section.items():
            composite = to_int_or_none(raw_composite)
            interval = normalize_interval(raw_interval)
            if composite is None or interval is None:
                logger.debug(
                    "norm_interval_dropped",
                    extra={"structured_data": {"band_id": band_id, "index": key, "composite": str(raw_composite)}},
                )
                continue
            intervals[composite] = interval
    if not intervals:
        return _EMPTY_INTERVALS
    return MappingProxyType(intervals)


class NormativeTableStore:
    """Read-only collection of normative bands and their tables.

    Built once through :meth:`load`; nothing mutates it afterwards, so one
    instance can be shared by every conversion in the process. Bands are kept
    sorted by ascending ``min_months`` (ties keep load order), which is the
    order every downstream merge follows.
    """

    __slots__ = ("_bands", "_band_index", "_tables", "_skipped", "_merger")

    def __init__(
        self,
        bands: Iterable[NormativeBand],
        tables: Mapping[str, BandTables],
        skipped: Iterable[SkippedDefinition] = (),
    ) -> None:
        ordered = sorted(bands, key=lambda band: band.min_months)
        self._bands: Tuple[NormativeBand, ...] = tuple(ordered)
        self._band_index: Mapping[str, NormativeBand] = MappingProxyType({b.id: b for b in ordered})
        self._tables: Mapping[str, BandTables] = MappingProxyType(dict(tables))
        self._skipped: Tuple[SkippedDefinition, ...] = tuple(skipped)
        self._merger = TableMerger(self)

    @classmethod
    def load(
        cls,
        definitions: Iterable[Mapping[str, Any]],
        *,
        sources: Optional[Iterable[Optional[str]]] = None,
    ) -> "NormativeTableStore":
        """Build a store from raw band table definitions.

        Definitions without an ``id`` (or with an unusable age range) are
        skipped and logged as warnings; loading carries on with the rest.
        ``sources`` optionally names where each definition came from, for
        the warning payloads.
        """
        source_list: List[Optional[str]] = list(sources) if sources is not None else []
        bands: Dict[str, NormativeBand] = {}
        tables: Dict[str, BandTables] = {}
        skipped: List[SkippedDefinition] = []

        for position, definition in enumerate(definitions):
            source = source_list[position] if position < len(source_list) else None
            if not isinstance(definition, Mapping):
                skipped.append(cls._skip(position, "definition is not an object", source))
                continue
            band_id = definition.get("id")
            band_id = str(band_id).strip() if band_id is not None else ""
            if not band_id:
                skipped.append(cls._skip(position, "missing band id", source))
                continue
            min_months = _months(definition, "minMonths", "min_months")
            max_months = _months(definition, "maxMonths", "max_months")
            if min_months is None or max_months is None or min_months < 0 or max_months < min_months:
                skipped.append(cls._skip(position, f"invalid age range for band {band_id!r}", source))
                continue
            label = definition.get("label") or band_id
            if band_id in bands:
                logger.warning(
                    "norm_band_replaced",
                    extra={"structured_data": {"band_id": band_id, "position": position, "source": source}},
                )
                del bands[band_id]
            bands[band_id] = NormativeBand(
                id=band_id, label=str(label), min_months=min_months, max_months=max_months
            )
            tables[band_id] = cls._build_band_tables(band_id, definition)

        store = cls(bands.values(), tables, skipped)
        logger.info(
            "norm_store_loaded",
            extra={"structured_data": {"bands": [b.id for b in store.bands], "skipped": len(skipped)}},
        )
        return store

    @staticmethod
    def _skip(position: int, reason: str, source: Optional[str]) -> SkippedDefinition:
        logger.warning(
            "norm_definition_skipped",
            extra={"structured_data": {"position": position, "reason": reason, "source": source}},
        )
        return SkippedDefinition(position=position, reason=reason, source=source)

    @staticmethod
    def _build_band_tables(band_id: str, definition: Mapping[str, Any]) -> BandTables:
        interval_sections = _definition_value(definition, *_INTERVAL_SECTIONS)
        if not isinstance(interval_sections, Mapping):
            interval_sections = {}
        conversions: Dict[str, ConversionTable] = {}
        intervals: Dict[str, IntervalTable] = {}
        for key in COMPOSITE_KEYS:
            conversions[key] = _build_conversion_table(band_id, key, definition.get(key))
            intervals[key] = _build_interval_table(
                band_id, key, conversions[key], interval_sections.get(key)
            )
        return BandTables(
            conversions=MappingProxyType(conversions),
            intervals=MappingProxyType(intervals),
        )

    # Public API --------------------------------------------------------------

    @property
    def bands(self) -> Tuple[NormativeBand, ...]:
        return self._bands

    @property
    def skipped(self) -> Tuple[SkippedDefinition, ...]:
        return self._skipped

    def band(self, band_id: str) -> NormativeBand:
        try:
            return self._band_index[band_id]
        except KeyError:
            raise BandNotFoundError(detail={"band_id": band_id}) from None

    def has_band(self, band_id: str) -> bool:
        return band_id in self._band_index

    def conversion_table(self, band_id: str, key: str) -> ConversionTable:
        tables = self._tables.get(band_id)
        if tables is None:
            return _EMPTY_CONVERSION
        return tables.conversions.get(key, _EMPTY_CONVERSION)

    def interval_table(self, band_id: str, key: str) -> IntervalTable:
        tables = self._tables.get(band_id)
        if tables is None:
            return _EMPTY_INTERVALS
        return tables.intervals.get(key, _EMPTY_INTERVALS)

    def merged(self, band_ids: Iterable[str]) -> MergedTables:
        """Effective tables for a set of eligible bands (see :class:`TableMerger`)."""
        return self._merger.merge(band_ids)

    def __len__(self) -> int:
        return len(self._bands)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"NormativeTableStore(bands={[b.id for b in self._bands]!r})"
