from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from normconv.engine.constants import INDEX_KEYS


@dataclass(frozen=True, slots=True)
class SubtestDefinition:
    key: str
    label: str
    index: str
    core: bool


@dataclass(frozen=True, slots=True)
class IndexSums:
    """Raw sum and number of valid scores per index; sum is ``None`` when no score counted."""

    sums: Mapping[str, Optional[int]]
    counts: Mapping[str, int]


@dataclass(frozen=True, slots=True)
class TotalSums:
    """Both candidate overall totals with the number of scores behind each."""

    all: Optional[int]
    all_count: int
    core: Optional[int]
    core_count: int


@dataclass(frozen=True, slots=True)
class Heterogeneity:
    heterogeneous: bool
    range: int


@dataclass(frozen=True, slots=True)
class WiscParameters:
    """Immutable container for the instrument layout."""

    instrument_id: str
    version: str
    score_min: int
    score_max: int
    heterogeneity_range: int
    subtests: Tuple[SubtestDefinition, ...]

    @property
    def core_keys(self) -> Tuple[str, ...]:
        return tuple(subtest.key for subtest in self.subtests if subtest.core)

    def subtests_for(self, index: str) -> Tuple[SubtestDefinition, ...]:
        return tuple(subtest for subtest in self.subtests if subtest.index == index)

    @classmethod
    def from_raw(cls, payload: Mapping[str, Any]) -> "WiscParameters":
        subtests = tuple(
            SubtestDefinition(
                key=str(item["key"]),
                label=str(item.get("label", item["key"])),
                index=str(item["index"]),
                core=bool(item.get("core", False)),
            )
            for item in payload["subtests"]
        )
        unknown = sorted({s.index for s in subtests} - set(INDEX_KEYS))
        if unknown:
            raise ValueError(f"Subtests reference unknown index keys: {unknown}")
        return cls(
            instrument_id=str(payload["id"]),
            version=str(payload["version"]),
            score_min=int(payload.get("score_min", 1)),
            score_max=int(payload.get("score_max", 19)),
            heterogeneity_range=int(payload.get("heterogeneity_range", 7)),
            subtests=subtests,
        )
