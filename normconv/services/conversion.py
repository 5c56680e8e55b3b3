from __future__ import annotations

from normconv.assessments.wiscv.calculations import (
    build_raw_input,
    compute_index_sums,
    compute_total_sums,
    heterogeneity_flag,
)
from normconv.engine.conversion import OverallConvention, convert, convert_input
from normconv.engine.norms.store import NormativeTableStore
from normconv.engine.norms.value_objects import ConversionResult
from normconv.schemas.conversion import (
    BandListResponse,
    BandOut,
    ConversionResponse,
    ConvertRequest,
    HeterogeneityOut,
    SkippedDefinitionOut,
    SubtestConversionResponse,
    SubtestConvertRequest,
    SubtestSumsOut,
)


def _to_response(result: ConversionResult) -> ConversionResponse:
    return ConversionResponse.model_validate(result.as_dict())


def build_conversion(payload: ConvertRequest, store: NormativeTableStore) -> ConversionResponse:
    convention = (
        OverallConvention.parse(payload.overall_convention) if payload.overall_convention else None
    )
    result = convert(
        payload.age_months,
        payload.sums_by_index,
        payload.overall_sum,
        store=store,
        convention=convention,
    )
    return _to_response(result)


def build_subtest_conversion(
    payload: SubtestConvertRequest, store: NormativeTableStore
) -> SubtestConversionResponse:
    index_sums = compute_index_sums(payload.scores)
    totals = compute_total_sums(payload.scores)
    heterogeneity = heterogeneity_flag(payload.scores)
    result = convert_input(
        payload.age_months,
        build_raw_input(payload.scores),
        convention=payload.overall_convention,
        store=store,
    )
    return SubtestConversionResponse(
        sums=SubtestSumsOut(
            sums_by_index=dict(index_sums.sums),
            counts=dict(index_sums.counts),
            total_sum_all=totals.all,
            total_sum_all_count=totals.all_count,
            total_sum_core=totals.core,
            total_sum_core_count=totals.core_count,
        ),
        heterogeneity=HeterogeneityOut(
            heterogeneous=heterogeneity.heterogeneous, range=heterogeneity.range
        ),
        result=_to_response(result),
    )


def list_bands(store: NormativeTableStore) -> BandListResponse:
    return BandListResponse(
        bands=[BandOut(**band.as_dict()) for band in store.bands],
        skipped=[
            SkippedDefinitionOut(position=s.position, reason=s.reason, source=s.source)
            for s in store.skipped
        ],
    )
