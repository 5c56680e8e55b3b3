"""Normalisation of published norm-table rows into :class:`NormRow`.

Published tables do not agree on field names. A raw-sum entry may be a bare
composite (``{"20": 95}``) or a row object using any of several aliases::

    {"comp": 95, "pct": "37", "IC90": "88–103"}
    {"Composite": 95, "percentile": 37, "ic90": {"lo": 88, "hi": 103}}
    {"QIT": 101, "rang": "53", "IC90": "96-106"}      # overall table

All alias handling lives here and runs once per row at load time; lookups
only ever see canonical rows.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Tuple

from normconv.core.numeric import to_int_or_none, to_number_or_none
from normconv.engine.norms.value_objects import Interval, IntervalSource, NormRow, Percentile

__all__ = [
    "COMPOSITE_ALIASES",
    "OVERALL_COMPOSITE_ALIASES",
    "PERCENTILE_ALIASES",
    "INTERVAL_ALIASES",
    "normalize_row",
    "normalize_interval",
    "parse_range",
]

COMPOSITE_ALIASES: Tuple[str, ...] = ("comp", "Composite", "composite")
OVERALL_COMPOSITE_ALIASES: Tuple[str, ...] = ("QIT", "qit") + COMPOSITE_ALIASES
PERCENTILE_ALIASES: Tuple[str, ...] = ("pct", "percentile", "rang")
INTERVAL_ALIASES: Tuple[str, ...] = ("IC90", "ic90")

# hyphen-minus, en dash, em dash
_RANGE_SPLIT = re.compile(r"\s*[-–—]\s*")


def _first_present(row: Mapping[str, Any], aliases: Tuple[str, ...]) -> Any:
    for alias in aliases:
        value = row.get(alias)
        if value is not None:
            return value
    return None


def parse_range(text: Any) -> Optional[Interval]:
    """Parse ``"113–129"`` style ranges; ``None`` unless both bounds parse."""
    if not isinstance(text, str):
        return None
    parts = _RANGE_SPLIT.split(text.strip(), maxsplit=1)
    if len(parts) != 2:
        return None
    lo = to_number_or_none(parts[0])
    hi = to_number_or_none(parts[1])
    if lo is None or hi is None:
        return None
    return Interval(lo=lo, hi=hi, source=IntervalSource.TABLE)


def normalize_interval(value: Any) -> Optional[Interval]:
    """Accept ``{"lo": .., "hi": ..}``, ``[lo, hi]`` or a delimited range string."""
    if value is None:
        return None
    if isinstance(value, Interval):
        return value
    if isinstance(value, str):
        return parse_range(value)
    if isinstance(value, Mapping):
        lo = to_number_or_none(value.get("lo"))
        hi = to_number_or_none(value.get("hi"))
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        lo = to_number_or_none(value[0])
        hi = to_number_or_none(value[1])
    else:
        return None
    if lo is None or hi is None:
        return None
    return Interval(lo=lo, hi=hi, source=IntervalSource.TABLE)


def _normalize_percentile(value: Any) -> Optional[Percentile]:
    if value is None:
        return None
    number = to_number_or_none(value)
    if number is not None:
        return number
    if isinstance(value, str):
        text = value.strip()
        return text or None
    return None


def normalize_row(value: Any, *, overall: bool = False) -> Optional[NormRow]:
    """Return the canonical row for one raw-sum entry, or ``None`` if it has no composite."""
    if isinstance(value, Mapping):
        aliases = OVERALL_COMPOSITE_ALIASES if overall else COMPOSITE_ALIASES
        composite = to_int_or_none(_first_present(value, aliases))
        if composite is None:
            return None
        return NormRow(
            composite=composite,
            percentile=_normalize_percentile(_first_present(value, PERCENTILE_ALIASES)),
            interval=normalize_interval(_first_present(value, INTERVAL_ALIASES)),
        )
    composite = to_int_or_none(value)
    if composite is None:
        return None
    return NormRow(composite=composite)
