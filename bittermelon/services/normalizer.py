"""
Score Normalizer

Converts a raw score on any rating scale into a binary recommendation.
"""

from decimal import Decimal

from sqlalchemy.orm import Session

from bittermelon.models.review import Recommendation
from bittermelon.services.scales import get_threshold


def to_recommendation(numeric_score: Decimal, threshold: Decimal) -> Recommendation:
    """UP when the score reaches the threshold, DOWN otherwise."""
    return Recommendation.UP if numeric_score >= threshold else Recommendation.DOWN


def classify(db: Session, scale_id: int, numeric_score: Decimal) -> Recommendation:
    """
    Classify a score against its scale's positive threshold.

    Raises:
        NotFoundError: If the scale does not exist
    """
    return to_recommendation(Decimal(numeric_score), get_threshold(db, scale_id))
