import pytest

from normconv.core.errors import ValidationError
from normconv.core.metrics import get_counters
from normconv.engine.constants import INDEX_KEYS
from normconv.engine.conversion import OverallConvention, RawScoreInput, convert, convert_input
from normconv.engine.norms.store import NormativeTableStore
from normconv.engine.norms.value_objects import Interval, IntervalSource

from tests.norm_builders import band


def test_age_84_uses_only_six_to_seven_band(scenario_store):
    result = convert(84, {"ICV": 20}, None, store=scenario_store)
    assert result.meta.band_ids == ("6-7",)
    assert result.composites["ICV"] == 95


def test_age_100_uses_eight_to_nine_band(scenario_store):
    assert convert(100, {"ICV": 20}, None, store=scenario_store).composites["ICV"] == 97


@pytest.mark.parametrize("age", [0, 71, 120, 500])
def test_age_outside_every_band_gives_all_null(scenario_store, age):
    result = convert(age, {key: 20 for key in INDEX_KEYS}, 20, store=scenario_store)
    assert result.meta.band_ids == ()
    assert all(value is None for value in result.composites.values())
    assert result.overall is None
    assert all(value is None for value in result.meta.intervals.values())
    assert all(value is None for value in result.meta.percentiles.values())
    assert result.meta.overall_interval is None


def test_unknown_age_uses_single_all_ages_band():
    store = NormativeTableStore.load(
        [
            band("6-7", 72, 95, ICV={"20": 95}),
            band("all", 0, 240, ICV={"20": 100}),
            band("8-9", 96, 119, ICV={"20": 97}),
        ]
    )
    result = convert("unknown", {"ICV": 20}, None, store=store)
    assert result.meta.band_ids == ("all",)
    assert result.composites["ICV"] == 100


def test_missing_sum_key_gives_null_composite_and_interval(scenario_store):
    result = convert(84, {"ICV": 0}, None, store=scenario_store)
    assert result.composites["ICV"] is None
    assert result.meta.intervals["ICV"] is None
    # indexes not submitted at all are null as well
    assert result.composites["IVT"] is None


def test_fixture_tables_merge_and_normalize_rows(fixture_store):
    result = convert(100, {"ICV": 20, "IVS": 18, "IMT": 22}, 100, store=fixture_store)
    assert result.meta.band_ids == ("all", "8-9")
    assert result.composites == {"ICV": 97, "IVS": 94, "IRF": None, "IMT": 106, "IVT": None}
    assert result.meta.percentiles["ICV"] == 42
    assert result.meta.intervals["ICV"] == Interval(90, 105, IntervalSource.TABLE)
    assert result.meta.intervals["IVS"] == Interval(86, 102, IntervalSource.FALLBACK)
    assert result.overall == 99
    assert result.meta.overall_percentile == 47
    assert result.meta.overall_interval == Interval(94, 104)
    assert result.meta.overall_sum == 100


def test_unknown_age_on_fixture_tables_uses_table_interval(fixture_store):
    result = convert(None, {"ICV": 20}, 100, store=fixture_store)
    assert result.meta.band_ids == ("all",)
    assert result.composites["ICV"] == 100
    assert result.meta.intervals["ICV"] == Interval(93, 107)
    assert result.overall == 100
    assert result.meta.overall_interval == Interval(95, 105)
    assert result.meta.overall_percentile is None


def test_bounded_percentile_text_passes_through(fixture_store):
    result = convert(100, {"ICV": 24}, None, store=fixture_store)
    assert result.composites["ICV"] == 112
    assert result.meta.percentiles["ICV"] == ">99.9"


def test_repeated_calls_are_identical(fixture_store):
    sums = {"ICV": 20, "IVS": 18, "IMT": 22}
    first = convert(84, sums, 100, store=fixture_store)
    second = convert(84, dict(sums), 100, store=fixture_store)
    assert first == second
    assert first.as_dict() == second.as_dict()


def test_result_mappings_are_read_only(scenario_store):
    result = convert(84, {"ICV": 20}, None, store=scenario_store)
    with pytest.raises(TypeError):
        result.composites["ICV"] = 1  # type: ignore[index]


def test_convert_input_records_explicit_convention(fixture_store):
    raw = RawScoreInput(sums_by_index={"ICV": 20}, total_sum_all=100, total_sum_core=70)
    by_all = convert_input(None, raw, convention=OverallConvention.ALL_SUBTESTS, store=fixture_store)
    by_core = convert_input(None, raw, convention="core", store=fixture_store)
    assert (by_all.overall, by_all.meta.overall_sum, by_all.meta.overall_convention) == (100, 100, "all")
    assert (by_core.overall, by_core.meta.overall_sum, by_core.meta.overall_convention) == (79, 70, "core")


def test_convert_input_defaults_to_configured_convention(fixture_store):
    raw = RawScoreInput(total_sum_all=100, total_sum_core=70)
    assert convert_input(None, raw, store=fixture_store).meta.overall_convention == "all"


def test_unknown_convention_is_rejected(fixture_store):
    with pytest.raises(ValidationError):
        convert_input(None, RawScoreInput(), convention="seven", store=fixture_store)


def test_conversion_metrics_are_counted(fixture_store, clean_metrics):
    convert(84, {"ICV": 20}, None, store=fixture_store)
    counters = get_counters()
    assert counters["conversion.convert.calls"] == 1
    assert counters["conversion.interval_fallback.ICV"] == 1
    assert counters["conversion.unresolved.QIT"] == 1
    assert counters["conversion.unresolved.IVT"] == 1
