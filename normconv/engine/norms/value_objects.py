from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

Number = Union[int, float]
Percentile = Union[int, float, str]
"""Published percentile: numeric when the table gives a number, verbatim text
for bounded ranks such as ``"<0.1"`` or ``">99.9"``."""


class IntervalSource(StrEnum):
    TABLE = "table"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class NormativeBand:
    """Age range (inclusive, in months) owning its own norm tables."""

    id: str
    label: str
    min_months: int
    max_months: int

    def __post_init__(self) -> None:
        if self.min_months > self.max_months:
            raise ValueError(
                f"band {self.id!r}: min_months ({self.min_months}) must be <= max_months ({self.max_months})"
            )

    def covers(self, months: int) -> bool:
        return self.min_months <= months <= self.max_months

    def spans(self, lower: int, upper: int) -> bool:
        return self.min_months <= lower and self.max_months >= upper

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "min_months": self.min_months,
            "max_months": self.max_months,
        }


@dataclass(frozen=True, slots=True)
class Interval:
    """Confidence interval around a composite score."""

    lo: Number
    hi: Number
    source: IntervalSource = IntervalSource.TABLE

    @property
    def is_fallback(self) -> bool:
        return self.source is IntervalSource.FALLBACK

    def as_dict(self) -> dict[str, Any]:
        return {"lo": self.lo, "hi": self.hi, "source": self.source.value}


@dataclass(frozen=True, slots=True)
class NormRow:
    """Canonical conversion row: what a raw sum converts to."""

    composite: int
    percentile: Optional[Percentile] = None
    interval: Optional[Interval] = None


@dataclass(frozen=True, slots=True)
class CompositeLookup:
    raw_sum: Optional[int]
    composite: Optional[int]
    percentile: Optional[Percentile]

    @property
    def resolved(self) -> bool:
        return self.composite is not None


def _empty() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ConversionMeta:
    percentiles: Mapping[str, Optional[Percentile]] = field(default_factory=_empty)
    intervals: Mapping[str, Optional[Interval]] = field(default_factory=_empty)
    overall_percentile: Optional[Percentile] = None
    overall_interval: Optional[Interval] = None
    band_ids: Tuple[str, ...] = ()
    overall_sum: Optional[int] = None
    overall_convention: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Composite scores for the five indexes and the overall composite.

    ``None`` anywhere means the norms loaded for this age do not cover the
    submitted sum; it is never a fault.
    """

    composites: Mapping[str, Optional[int]]
    overall: Optional[int]
    meta: ConversionMeta = field(default_factory=ConversionMeta)

    def as_dict(self) -> dict[str, Any]:
        meta = self.meta
        return {
            "composites": dict(self.composites),
            "overall": self.overall,
            "meta": {
                "percentiles": dict(meta.percentiles),
                "intervals": {
                    key: interval.as_dict() if interval is not None else None
                    for key, interval in meta.intervals.items()
                },
                "overall_percentile": meta.overall_percentile,
                "overall_interval": meta.overall_interval.as_dict() if meta.overall_interval else None,
                "band_ids": list(meta.band_ids),
                "overall_sum": meta.overall_sum,
                "overall_convention": meta.overall_convention,
            },
        }
