from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

from normconv.core.logging import get_logger
from normconv.core.numeric import to_int_or_none
from normconv.core.sentinels import is_unknown
from normconv.engine.constants import ALL_AGES_MAX_MONTHS, ALL_AGES_MIN_MONTHS
from normconv.engine.norms.value_objects import NormativeBand

__all__ = ["AgeBandResolver", "normalize_age"]

logger = get_logger("normconv.engine.norms.bands", component="age_bands")

AgeInput = Any


def normalize_age(age_months: AgeInput) -> Optional[int]:
    """Return the age in whole months, or ``None`` when it must be treated as unknown.

    Negative, fractional, boolean and unparseable values all count as unknown.
    """
    if is_unknown(age_months):
        return None
    months = to_int_or_none(age_months)
    if months is None or months < 0:
        logger.debug("age_treated_as_unknown", extra={"structured_data": {"age": repr(age_months)}})
        return None
    return months


class AgeBandResolver:
    """Select the bands whose age range applies to an examinee.

    Bands are expected in ascending ``min_months`` order (as exposed by
    :class:`~normconv.engine.norms.store.NormativeTableStore`) and results keep
    that order. Several bands may match; the merge step settles conflicts.
    """

    def __init__(self, bands: Iterable[NormativeBand]) -> None:
        self._bands: Tuple[NormativeBand, ...] = tuple(bands)

    def resolve(self, age_months: AgeInput) -> Tuple[str, ...]:
        months = normalize_age(age_months)
        if months is None:
            return self.all_ages()
        return tuple(band.id for band in self._bands if band.covers(months))

    def all_ages(self) -> Tuple[str, ...]:
        """Bands covering the whole supported domain, used when the age is unknown."""
        return tuple(
            band.id
            for band in self._bands
            if band.spans(ALL_AGES_MIN_MONTHS, ALL_AGES_MAX_MONTHS)
        )
