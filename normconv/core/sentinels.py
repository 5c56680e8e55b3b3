from __future__ import annotations

from typing import Any


class SentinelStr(str):
    """String-like sentinel that retains identity semantics."""

    __slots__ = ()

    def __new__(cls, label: str):
        return super().__new__(cls, label)

    def __repr__(self) -> str:  # pragma: no cover - repr logic trivial
        return f"<Sentinel:{super().__str__()}>"


# Age marker for "no usable age"; resolves to the all-ages bands.
UNKNOWN = SentinelStr("unknown")


def is_unknown(value: Any) -> bool:
    """True for ``None``, the sentinel itself, or any casing of ``"unknown"``."""

    if value is None or value is UNKNOWN:
        return True
    return isinstance(value, str) and value.strip().lower() == UNKNOWN


__all__ = ["UNKNOWN", "SentinelStr", "is_unknown"]
