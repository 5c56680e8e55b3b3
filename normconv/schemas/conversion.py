from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from normconv.engine.constants import INDEX_KEYS

__all__ = [
    "ConvertRequest",
    "SubtestConvertRequest",
    "IntervalOut",
    "ConversionMetaOut",
    "ConversionResponse",
    "SubtestSumsOut",
    "HeterogeneityOut",
    "SubtestConversionResponse",
    "BandOut",
    "SkippedDefinitionOut",
    "BandListResponse",
]

AgeField = Union[int, float, str, None]
PercentileOut = Union[int, float, str]
Convention = Literal["all", "core"]


class ConvertRequest(BaseModel):
    # Invalid ages are accepted here and treated as unknown by the engine.
    age_months: AgeField = None
    sums_by_index: Dict[str, Optional[int]] = Field(default_factory=dict)
    overall_sum: Optional[int] = None
    overall_convention: Optional[Convention] = None

    @field_validator("sums_by_index")
    @classmethod
    def _known_indexes(cls, value: Dict[str, Optional[int]]) -> Dict[str, Optional[int]]:
        unknown = sorted(set(value) - set(INDEX_KEYS))
        if unknown:
            raise ValueError(f"Unknown index keys: {', '.join(unknown)}")
        return value


class SubtestConvertRequest(BaseModel):
    age_months: AgeField = None
    scores: Dict[str, Optional[Union[int, float, str]]] = Field(default_factory=dict)
    overall_convention: Optional[Convention] = None


class IntervalOut(BaseModel):
    lo: Union[int, float]
    hi: Union[int, float]
    source: Literal["table", "fallback"]


class ConversionMetaOut(BaseModel):
    percentiles: Dict[str, Optional[PercentileOut]]
    intervals: Dict[str, Optional[IntervalOut]]
    overall_percentile: Optional[PercentileOut]
    overall_interval: Optional[IntervalOut]
    band_ids: List[str]
    overall_sum: Optional[int]
    overall_convention: Optional[Convention]


class ConversionResponse(BaseModel):
    composites: Dict[str, Optional[int]]
    overall: Optional[int]
    meta: ConversionMetaOut


class SubtestSumsOut(BaseModel):
    sums_by_index: Dict[str, Optional[int]]
    counts: Dict[str, int]
    total_sum_all: Optional[int]
    total_sum_all_count: int
    total_sum_core: Optional[int]
    total_sum_core_count: int


class HeterogeneityOut(BaseModel):
    heterogeneous: bool
    range: int


class SubtestConversionResponse(BaseModel):
    sums: SubtestSumsOut
    heterogeneity: HeterogeneityOut
    result: ConversionResponse


class BandOut(BaseModel):
    id: str
    label: str
    min_months: int
    max_months: int


class SkippedDefinitionOut(BaseModel):
    position: int
    reason: str
    source: Optional[str] = None


class BandListResponse(BaseModel):
    bands: List[BandOut]
    skipped: List[SkippedDefinitionOut]
