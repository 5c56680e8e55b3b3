"""Raw sums to age-normed composite scores.

:func:`convert` is the engine entry point: resolve the eligible age bands,
merge their tables, then look up each index composite and the overall
composite with its percentile and confidence interval. It is a pure function
of its arguments and the read-only norm store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from normconv.core.config import get_settings
from normconv.core.errors import ValidationError
from normconv.core.logging import get_logger
from normconv.core.metrics import count_calls, inc_counter, measure_time
from normconv.data.registry import get_norm_store
from normconv.engine.constants import INDEX_KEYS, OVERALL_KEY
from normconv.engine.norms.bands import AgeBandResolver
from normconv.engine.norms.resolvers import CompositeResolver, IntervalResolver
from normconv.engine.norms.store import NormativeTableStore
from normconv.engine.norms.value_objects import (
    ConversionMeta,
    ConversionResult,
    Interval,
    Percentile,
)

__all__ = ["OverallConvention", "RawScoreInput", "convert", "convert_input"]

logger = get_logger("normconv.engine.conversion", component="conversion")


class OverallConvention(StrEnum):
    """Which subtest total keys the overall (QIT) table."""

    ALL_SUBTESTS = "all"
    CORE_SUBTESTS = "core"

    @classmethod
    def parse(cls, value: Any) -> "OverallConvention":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown overall convention {value!r}",
                detail={"allowed": [member.value for member in cls]},
            ) from None


@dataclass(frozen=True, slots=True)
class RawScoreInput:
    """Per-index raw sums plus both candidate overall totals.

    ``total_sum_all`` sums all ten subtests, ``total_sum_core`` the seven core
    subtests.
    """

    sums_by_index: Mapping[str, Optional[int]] = field(default_factory=dict)
    total_sum_all: Optional[int] = None
    total_sum_core: Optional[int] = None

    def overall_sum(self, convention: OverallConvention) -> Optional[int]:
        if convention is OverallConvention.CORE_SUBTESTS:
            return self.total_sum_core
        return self.total_sum_all


def _store_or_default(store: Optional[NormativeTableStore]) -> NormativeTableStore:
    if store is not None:
        return store
    return get_norm_store()


@count_calls("conversion.convert.calls")
@measure_time("conversion.convert")
def convert(
    age_months: Any,
    sums_by_index: Mapping[str, Optional[int]] | None,
    overall_sum: Optional[int],
    *,
    store: Optional[NormativeTableStore] = None,
    convention: Optional[OverallConvention] = None,
) -> ConversionResult:
    """Convert raw sums for one examinee.

    Args:
        age_months: Age in whole months, or ``"unknown"``/``None``. Invalid
            ages (negative, unparseable) are treated as unknown and select the
            all-ages bands.
        sums_by_index: Raw sum per index key (ICV, IVS, IRF, IMT, IVT).
            Missing keys and ``None`` values resolve to ``None``.
        overall_sum: The single total looked up in the overall (QIT) table.
            The engine does not choose between totals; see
            :func:`convert_input` for the explicit convention.
        store: Norm store to use; defaults to the process-wide store.
        convention: Only recorded in the result metadata.

    Returns:
        ConversionResult where every unresolvable value is ``None``.
    """
    norm_store = _store_or_default(store)
    band_ids = AgeBandResolver(norm_store.bands).resolve(age_months)
    tables = norm_store.merged(band_ids)
    composites_resolver = CompositeResolver(tables)
    intervals_resolver = IntervalResolver(tables)
    sums = sums_by_index or {}

    composites: Dict[str, Optional[int]] = {}
    percentiles: Dict[str, Optional[Percentile]] = {}
    intervals: Dict[str, Optional[Interval]] = {}
    for key in INDEX_KEYS:
        lookup = composites_resolver.resolve(key, sums.get(key))
        composites[key] = lookup.composite
        percentiles[key] = lookup.percentile
        intervals[key] = intervals_resolver.resolve(key, lookup.composite)
        _record_outcome(key, lookup.composite, intervals[key])

    overall = composites_resolver.resolve(OVERALL_KEY, overall_sum)
    overall_interval = intervals_resolver.resolve(OVERALL_KEY, overall.composite)
    _record_outcome(OVERALL_KEY, overall.composite, overall_interval)

    if not band_ids:
        logger.info(
            "conversion_no_eligible_band",
            extra={"structured_data": {"age_months": repr(age_months)}},
        )

    return ConversionResult(
        composites=MappingProxyType(composites),
        overall=overall.composite,
        meta=ConversionMeta(
            percentiles=MappingProxyType(percentiles),
            intervals=MappingProxyType(intervals),
            overall_percentile=overall.percentile,
            overall_interval=overall_interval,
            band_ids=tables.band_ids,
            overall_sum=overall.raw_sum,
            overall_convention=convention.value if convention is not None else None,
        ),
    )


def convert_input(
    age_months: Any,
    raw: RawScoreInput,
    *,
    convention: OverallConvention | str | None = None,
    store: Optional[NormativeTableStore] = None,
) -> ConversionResult:
    """Convert a :class:`RawScoreInput`, keying the overall table by an explicit convention.

    Without ``convention`` the configured ``overall_convention`` setting is used.
    """
    chosen = OverallConvention.parse(convention if convention is not None else get_settings().overall_convention)
    return convert(
        age_months,
        raw.sums_by_index,
        raw.overall_sum(chosen),
        store=store,
        convention=chosen,
    )


def _record_outcome(key: str, composite: Optional[int], interval: Optional[Interval]) -> None:
    if composite is None:
        inc_counter(f"conversion.unresolved.{key}")
    elif interval is not None and interval.is_fallback:
        inc_counter(f"conversion.interval_fallback.{key}")
