import pytest

from normconv.core.numeric import to_int_or_none, to_number_or_none
from normconv.core.sentinels import UNKNOWN, is_unknown


@pytest.mark.parametrize(
    "value,expected",
    [(84, 84), ("84", 84), (" 84 ", 84), (84.0, 84), ("84.0", 84), (84.5, None), ("x", None), (True, None), ([], None)],
)
def test_to_int_or_none(value, expected):
    assert to_int_or_none(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [("42", 42), ("12,5", 12.5), (99.9, 99.9), ("<0.1", None), ("nan", None), ("inf", None), (False, None)],
)
def test_to_number_or_none(value, expected):
    assert to_number_or_none(value) == expected


def test_number_keeps_int_type_when_integral():
    assert isinstance(to_number_or_none("42.0"), int)


@pytest.mark.parametrize("value", [None, UNKNOWN, "unknown", " Unknown "])
def test_unknown_markers(value):
    assert is_unknown(value)


@pytest.mark.parametrize("value", [0, "84", "", "n/a"])
def test_not_unknown(value):
    assert not is_unknown(value)
