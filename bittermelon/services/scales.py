"""
Scale Registry

Service for rating scales: the scoring schemes critics use and the threshold
at which a raw score counts as a positive ("UP") review.

Scales are read on every review write and written only at setup time.
"""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bittermelon.config import get_settings
from bittermelon.database import unit_of_work
from bittermelon.exceptions import ConstraintViolationError, NotFoundError
from bittermelon.models import RatingScale, Review
from bittermelon.schemas.catalog import RatingScaleCreate

logger = logging.getLogger(__name__)

# Default scoring schemes installed by seed_rating_scales().
DEFAULT_SCALES: tuple[tuple[str, Decimal], ...] = (
    ("Five-star", Decimal("3")),
    ("Percent", Decimal("60")),
    ("Ten-point", Decimal("6")),
    ("Thumbs", Decimal("1")),
)


def get_scale(db: Session, scale_id: int) -> RatingScale:
    """
    Get a rating scale by ID.

    Raises:
        NotFoundError: If the scale does not exist
    """
    scale = db.get(RatingScale, scale_id)
    if scale is None:
        raise NotFoundError("RatingScale", scale_id)
    return scale


def get_threshold(db: Session, scale_id: int) -> Decimal:
    """
    Get the positive threshold of a rating scale.

    Args:
        db: Database session
        scale_id: ID of the scale

    Returns:
        Score at or above which a review is UP

    Raises:
        NotFoundError: If the scale does not exist
    """
    return get_scale(db, scale_id).positive_threshold


def get_scale_by_description(db: Session, description: str) -> RatingScale:
    """
    Look up a rating scale by its unique description.

    Raises:
        NotFoundError: If no scale has that description
    """
    stmt = select(RatingScale).where(RatingScale.description == description)
    scale = db.execute(stmt).scalar_one_or_none()
    if scale is None:
        raise NotFoundError("RatingScale", description)
    return scale


def resolve_scale_id(db: Session, scale_id: int | None) -> int:
    """
    Return the scale a review should be scored against.

    A missing scale_id is replaced by the configured fallback scale
    (the "thumbs" scheme by default) before classification runs.

    Raises:
        NotFoundError: If the given scale, or the fallback scale, is missing
    """
    if scale_id is not None:
        return get_scale(db, scale_id).id

    description = get_settings().fallback_scale_description
    fallback = get_scale_by_description(db, description)
    logger.debug("No scale given, using fallback scale %s (%s)", fallback.id, description)
    return fallback.id


def create_rating_scale(db: Session, data: RatingScaleCreate) -> RatingScale:
    """
    Install a new rating scale.

    Raises:
        ConstraintViolationError: If the description is already taken
    """
    with unit_of_work(db):
        taken = db.execute(
            select(RatingScale.id).where(RatingScale.description == data.description)
        ).scalar_one_or_none()
        if taken is not None:
            raise ConstraintViolationError(
                f"RatingScale '{data.description}' already exists"
            )
        scale = RatingScale(
            description=data.description,
            positive_threshold=data.positive_threshold,
        )
        db.add(scale)
        db.flush()
    logger.info("Created rating scale %s (%s)", scale.id, scale.description)
    return scale


def delete_rating_scale(db: Session, scale_id: int) -> None:
    """
    Delete a rating scale.

    Raises:
        NotFoundError: If the scale does not exist
        ConstraintViolationError: If any review still uses the scale
    """
    with unit_of_work(db):
        scale = get_scale(db, scale_id)
        in_use = db.execute(
            select(func.count(Review.id)).where(Review.scale_id == scale_id)
        ).scalar_one()
        if in_use:
            raise ConstraintViolationError(
                f"RatingScale {scale_id} is used by {in_use} review(s) and cannot be deleted"
            )
        db.delete(scale)
    logger.info("Deleted rating scale %s", scale_id)


def seed_rating_scales(db: Session) -> int:
    """
    Install the default rating scales that are not present yet.

    Safe to run repeatedly; existing descriptions are left untouched.

    Returns:
        Number of scales created
    """
    existing = set(db.execute(select(RatingScale.description)).scalars().all())
    created = 0
    with unit_of_work(db):
        for description, threshold in DEFAULT_SCALES:
            if description in existing:
                continue
            db.add(RatingScale(description=description, positive_threshold=threshold))
            created += 1
    if created:
        logger.info("Seeded %d rating scale(s)", created)
    return created
