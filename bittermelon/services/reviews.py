"""
Reviews Service

The engine's public surface for a service layer sitting on top of it:

- add_review / update_review / delete_review mutate the ledger
- get_title_stats / get_critic_stats / get_outlet_stats read the caches

Errors are the engine's own (NotFoundError, ConflictError, ...) so the
embedding layer can map them to its protocol in one place.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from bittermelon.schemas.review import ReviewCreate, ReviewUpdate
from bittermelon.schemas.stats import (
    CriticStatsResponse,
    OutletStatsResponse,
    TitleStatsResponse,
)
from bittermelon.services.ledger import ReviewLedger
from bittermelon.services.locks import KeyLockManager
from bittermelon.services.stats_cache import (
    CriticStatsCache,
    OutletStatsCache,
    TitleStatsCache,
)


def add_review(
    db: Session,
    feature_id: int,
    critic_id: int,
    numeric_score: Decimal | int | str,
    review_date: date,
    scale_id: int | None = None,
    url: str | None = None,
    locks: KeyLockManager | None = None,
) -> int:
    """
    Submit a critic's review of a feature.

    Returns:
        ID of the new review

    Raises:
        ConflictError: If the critic already reviewed the feature
        NotFoundError: If the scale, critic or feature does not exist
    """
    data = ReviewCreate(
        feature_id=feature_id,
        critic_id=critic_id,
        scale_id=scale_id,
        numeric_score=numeric_score,
        review_date=review_date,
        url=url,
    )
    return ReviewLedger(db, locks).add(data).id


def update_review(
    db: Session,
    review_id: int,
    locks: KeyLockManager | None = None,
    **patch: object,
) -> None:
    """
    Revise a review. Only the keyword arguments given are changed.

    Raises:
        NotFoundError: If the review does not exist
    """
    ReviewLedger(db, locks).update(review_id, ReviewUpdate(**patch))


def delete_review(db: Session, review_id: int, locks: KeyLockManager | None = None) -> None:
    """
    Delete a review.

    Raises:
        NotFoundError: If the review does not exist
    """
    ReviewLedger(db, locks).remove(review_id)


def get_title_stats(db: Session, feature_id: int) -> TitleStatsResponse:
    """Statistics of a title; NotFoundError while it has no reviews."""
    return TitleStatsResponse.model_validate(TitleStatsCache(db).get(feature_id))


def get_critic_stats(db: Session, critic_id: int) -> CriticStatsResponse:
    """Statistics of a critic; NotFoundError while they have no reviews."""
    return CriticStatsResponse.model_validate(CriticStatsCache(db).get(critic_id))


def get_outlet_stats(db: Session, outlet_id: int) -> OutletStatsResponse:
    """Statistics of an outlet; NotFoundError while it has no reviews."""
    return OutletStatsResponse.model_validate(OutletStatsCache(db).get(outlet_id))
