"""Score aggregation for comparison results."""

import math
from collections.abc import Iterable, Mapping

from .models import MismatchCategory, MismatchSeverity, MismatchSummary, StyleMismatch

CATEGORY_WEIGHTS: dict[MismatchCategory, float] = {
    MismatchCategory.COLOR: 0.20,
    MismatchCategory.TYPOGRAPHY: 0.20,
    MismatchCategory.SPACING: 0.15,
    MismatchCategory.LAYOUT: 0.15,
    MismatchCategory.BORDER: 0.10,
    MismatchCategory.ALIGNMENT: 0.10,
    MismatchCategory.SIZE: 0.10,
}

MAX_SCORE = 100


def calculate_category_scores(
    mismatches: Iterable[StyleMismatch],
) -> dict[MismatchCategory, int]:
    """Score every category: 100 minus severity penalties, floored at 0."""
    deductions = {category: 0 for category in MismatchCategory}
    for mismatch in mismatches:
        deductions[mismatch.category] += mismatch.severity.penalty
    return {
        category: max(0, MAX_SCORE - deduction)
        for category, deduction in deductions.items()
    }


def calculate_overall_score(category_scores: Mapping[MismatchCategory, int]) -> int:
    """Weighted average over all seven categories, rounded half-up.

    Categories absent from ``category_scores`` count as a perfect score.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for category, weight in CATEGORY_WEIGHTS.items():
        weighted_sum += category_scores.get(category, MAX_SCORE) * weight
        total_weight += weight
    # Strip float noise before rounding half-up
    average = round(weighted_sum / total_weight, 6)
    return int(math.floor(average + 0.5))


def summarize(mismatches: Iterable[StyleMismatch]) -> MismatchSummary:
    """Count mismatches by severity."""
    counts = {severity: 0 for severity in MismatchSeverity}
    total = 0
    for mismatch in mismatches:
        counts[mismatch.severity] += 1
        total += 1
    return MismatchSummary(
        total=total,
        critical=counts[MismatchSeverity.CRITICAL],
        major=counts[MismatchSeverity.MAJOR],
        minor=counts[MismatchSeverity.MINOR],
        info=counts[MismatchSeverity.INFO],
    )
