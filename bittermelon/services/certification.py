"""
Certification Classifier

Sweetness is the share of UP reviews as a percentage with two decimals.
A title is certified HoneyDew when its sweetness reaches 60%.

The certification threshold is fixed and unrelated to the per-scale
positive thresholds, which classify individual reviews.
"""

from decimal import ROUND_HALF_UP, Decimal

from bittermelon.models.stats import Certification

HONEYDEW_THRESHOLD = Decimal("60")

_TWO_PLACES = Decimal("0.01")


def sweetness_pct(positive: int, total: int) -> Decimal:
    """
    Percentage of positive reviews, rounded half-up to two decimals.

    Zero reviews give 0.00.
    """
    if total == 0:
        return Decimal("0.00")
    return (Decimal(100) * positive / Decimal(total)).quantize(
        _TWO_PLACES, rounding=ROUND_HALF_UP
    )


def certify(sweetness: Decimal) -> Certification:
    """HoneyDew at or above the threshold, HoneyDont below it."""
    if sweetness >= HONEYDEW_THRESHOLD:
        return Certification.HONEYDEW
    return Certification.HONEYDONT
