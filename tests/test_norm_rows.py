import pytest

from normconv.engine.norms.rows import normalize_interval, normalize_row, parse_range
from normconv.engine.norms.value_objects import Interval, IntervalSource, NormRow


@pytest.mark.parametrize("text", ["113-129", "113–129", "113—129", " 113 – 129 "])
def test_parse_range_accepts_all_dash_variants(text):
    assert parse_range(text) == Interval(113, 129, IntervalSource.TABLE)


def test_parse_range_rejects_incomplete_ranges():
    assert parse_range("113") is None
    assert parse_range("113-") is None
    assert parse_range("abc-def") is None
    assert parse_range(None) is None


def test_bare_composite_becomes_row_without_percentile():
    assert normalize_row(95) == NormRow(composite=95)
    assert normalize_row("95") == NormRow(composite=95)


@pytest.mark.parametrize(
    "row",
    [
        {"comp": 95, "pct": 37, "IC90": "88-103"},
        {"Composite": 95, "percentile": "37", "ic90": {"lo": 88, "hi": 103}},
        {"composite": "95", "rang": 37, "IC90": [88, 103]},
    ],
)
def test_index_row_aliases_normalize_to_same_row(row):
    normalized = normalize_row(row)
    assert normalized == NormRow(
        composite=95,
        percentile=37,
        interval=Interval(88, 103, IntervalSource.TABLE),
    )


def test_overall_row_accepts_qit_alias_only_for_overall_tables():
    row = {"QIT": 101, "pct": "53", "IC90": "96–106"}
    assert normalize_row(row, overall=True) == NormRow(
        composite=101, percentile=53, interval=Interval(96, 106)
    )
    assert normalize_row(row) is None


def test_bounded_percentile_text_is_kept_verbatim():
    assert normalize_row({"comp": 155, "pct": ">99.9"}).percentile == ">99.9"
    assert normalize_row({"comp": 45, "pct": "<0.1"}).percentile == "<0.1"


def test_row_without_composite_is_dropped():
    assert normalize_row({"pct": 50}) is None
    assert normalize_row(None) is None
    assert normalize_row("n/a") is None


def test_unparseable_row_interval_is_ignored():
    row = normalize_row({"comp": 100, "IC90": "93 to 107"})
    assert row == NormRow(composite=100)


def test_normalize_interval_needs_both_bounds():
    assert normalize_interval({"lo": 90}) is None
    assert normalize_interval({"lo": "90.5", "hi": "99"}) == Interval(90.5, 99)
