"""Pure derivations from subtest standard scores to raw sums.

Callers pass an immutable snapshot of the scores entered so far (subtest key
to value) and get new values back; nothing here holds state. Only integral
scores inside the instrument's 1..19 scale count; anything else is ignored
as "not entered yet".
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from normconv.assessments.wiscv import load_config
from normconv.assessments.wiscv.types import Heterogeneity, IndexSums, TotalSums, WiscParameters
from normconv.core.numeric import to_int_or_none
from normconv.engine.constants import INDEX_KEYS
from normconv.engine.conversion import RawScoreInput

__all__ = [
    "valid_score",
    "valid_scores",
    "compute_index_sums",
    "compute_total_sums",
    "build_raw_input",
    "heterogeneity_flag",
]


def _params(params: Optional[WiscParameters]) -> WiscParameters:
    return params if params is not None else load_config()


def valid_score(value: Any, params: Optional[WiscParameters] = None) -> Optional[int]:
    """Return the score if it is an integer on the standard-score scale, else ``None``.

    Example:
        >>> valid_score("12")
        12
        >>> valid_score(20) is None
        True
    """
    p = _params(params)
    score = to_int_or_none(value)
    if score is None or score < p.score_min or score > p.score_max:
        return None
    return score


def valid_scores(scores: Mapping[str, Any], params: Optional[WiscParameters] = None) -> Dict[str, int]:
    """Known subtests with a valid score, in instrument order."""
    p = _params(params)
    result: Dict[str, int] = {}
    for subtest in p.subtests:
        score = valid_score(scores.get(subtest.key), p)
        if score is not None:
            result[subtest.key] = score
    return result


def compute_index_sums(scores: Mapping[str, Any], params: Optional[WiscParameters] = None) -> IndexSums:
    """Sum the valid scores of each index's subtests.

    An index with no valid score gets ``None`` rather than 0, so that an
    empty form never looks up a real table row.
    """
    p = _params(params)
    valid = valid_scores(scores, p)
    sums: Dict[str, Optional[int]] = {}
    counts: Dict[str, int] = {}
    for index in INDEX_KEYS:
        values = [valid[s.key] for s in p.subtests_for(index) if s.key in valid]
        counts[index] = len(values)
        sums[index] = sum(values) if values else None
    return IndexSums(sums=sums, counts=counts)


def compute_total_sums(scores: Mapping[str, Any], params: Optional[WiscParameters] = None) -> TotalSums:
    """Totals over all ten subtests and over the seven core subtests."""
    p = _params(params)
    valid = valid_scores(scores, p)
    core_values = [valid[key] for key in p.core_keys if key in valid]
    return TotalSums(
        all=sum(valid.values()) if valid else None,
        all_count=len(valid),
        core=sum(core_values) if core_values else None,
        core_count=len(core_values),
    )


def build_raw_input(scores: Mapping[str, Any], params: Optional[WiscParameters] = None) -> RawScoreInput:
    p = _params(params)
    index_sums = compute_index_sums(scores, p)
    totals = compute_total_sums(scores, p)
    return RawScoreInput(
        sums_by_index=dict(index_sums.sums),
        total_sum_all=totals.all,
        total_sum_core=totals.core,
    )


def heterogeneity_flag(scores: Mapping[str, Any], params: Optional[WiscParameters] = None) -> Heterogeneity:
    """Flag a profile whose valid scores spread over ``heterogeneity_range`` points or more."""
    p = _params(params)
    values = list(valid_scores(scores, p).values())
    if len(values) < 2:
        return Heterogeneity(heterogeneous=False, range=0)
    spread = max(values) - min(values)
    return Heterogeneity(heterogeneous=spread >= p.heterogeneity_range, range=spread)
