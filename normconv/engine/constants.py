"""Composite keys and published score bounds used by the conversion engine.

Index keys follow the French WISC-V labels: ICV (verbal comprehension),
IVS (visual spatial), IRF (fluid reasoning), IMT (working memory),
IVT (processing speed) and QIT (full scale, the overall composite).
"""

from __future__ import annotations

from typing import Final, Tuple

__all__ = [
    "INDEX_KEYS",
    "OVERALL_KEY",
    "COMPOSITE_KEYS",
    "COMPOSITE_FLOOR",
    "COMPOSITE_CEILING",
    "FALLBACK_HALF_WIDTH",
    "ALL_AGES_MIN_MONTHS",
    "ALL_AGES_MAX_MONTHS",
]

INDEX_KEYS: Final[Tuple[str, str, str, str, str]] = ("ICV", "IVS", "IRF", "IMT", "IVT")
OVERALL_KEY: Final[str] = "QIT"
COMPOSITE_KEYS: Final[Tuple[str, ...]] = INDEX_KEYS + (OVERALL_KEY,)

COMPOSITE_FLOOR: Final[int] = 40
"""Lowest composite score the instrument publishes."""

COMPOSITE_CEILING: Final[int] = 160
"""Highest composite score the instrument publishes."""

FALLBACK_HALF_WIDTH: Final[int] = 8
"""Half-width of the placeholder interval used when no table interval exists."""

# A band counts as "all ages" when it covers at least this range.
ALL_AGES_MIN_MONTHS: Final[int] = 0
ALL_AGES_MAX_MONTHS: Final[int] = 240
