"""Numeric coercion helpers shared by table loading and conversion.

Norm tables arrive from JSON/YAML where keys are strings and values may be
ints, floats or numeric strings. These helpers centralize the coercion rules
so table loading and request handling agree on what counts as a number.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Union

__all__ = [
    "to_int_or_none",
    "to_number_or_none",
]


def to_int_or_none(value: Any) -> Optional[int]:
    """Coerce an integral value (int, integral float, digit string) to int.

    Booleans, fractional values and anything unparseable give ``None``
    rather than a silently truncated number.

    Example:
        >>> to_int_or_none("84")
        84
        >>> to_int_or_none(84.0)
        84
        >>> to_int_or_none(84.5) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            try:
                as_float = float(text)
            except ValueError:
                return None
            return int(as_float) if as_float.is_integer() else None
    return None


def to_number_or_none(value: Any) -> Optional[Union[int, float]]:
    """Coerce to int when integral, float otherwise; ``None`` if not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number: Union[int, float] = value
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number
