from fastapi import APIRouter, Depends

from normconv.data.registry import get_norm_store
from normconv.engine.norms.store import NormativeTableStore
from normconv.schemas.conversion import (
    BandListResponse,
    ConversionResponse,
    ConvertRequest,
    SubtestConversionResponse,
    SubtestConvertRequest,
)
from normconv.services.conversion import build_conversion, build_subtest_conversion, list_bands

router = APIRouter(tags=["conversion"])


@router.post("/convert", response_model=ConversionResponse)
def convert_sums(
    payload: ConvertRequest, store: NormativeTableStore = Depends(get_norm_store)
) -> ConversionResponse:
    return build_conversion(payload, store)


@router.post("/convert/subtests", response_model=SubtestConversionResponse)
def convert_subtests(
    payload: SubtestConvertRequest, store: NormativeTableStore = Depends(get_norm_store)
) -> SubtestConversionResponse:
    return build_subtest_conversion(payload, store)


@router.get("/bands", response_model=BandListResponse)
def bands(store: NormativeTableStore = Depends(get_norm_store)) -> BandListResponse:
    return list_bands(store)
