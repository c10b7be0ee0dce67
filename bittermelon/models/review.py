"""
Review Model

One critic's review of one feature: the fact table every statistic is
derived from.

Business Rules:
- One review per critic per feature (unique constraint)
- recommendation is derived from numeric_score and the scale threshold by
  the ledger on every write; callers never set it
- Deleting a critic or a feature cascades to their reviews
- Deleting a rating scale is blocked while reviews use it
"""

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bittermelon.database import Base

if TYPE_CHECKING:
    from bittermelon.models.critic import Critic
    from bittermelon.models.rating_scale import RatingScale


class Recommendation(StrEnum):
    """Binary verdict of a single review."""

    UP = "UP"
    DOWN = "DOWN"


class Review(Base):
    """
    Review model.

    Attributes:
        id: Primary key
        feature_id: Foreign key to features (catalog)
        critic_id: Foreign key to critics
        scale_id: Foreign key to rating_scales
        numeric_score: Raw score on the review's scale
        recommendation: UP/DOWN, derived from score and scale threshold
        review_date: Publication date of the review
        url: Optional link to the review
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Foreign keys
    feature_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("features.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    critic_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("critics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scale_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rating_scales.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    numeric_score: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
    )
    recommendation: Mapped[Recommendation] = mapped_column(
        Enum(Recommendation, name="recommendation"),
        nullable=False,
        comment="Derived from numeric_score and the scale's positive_threshold",
    )

    review_date: Mapped[date] = mapped_column(Date, nullable=False)
    url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Relationships
    critic: Mapped["Critic"] = relationship("Critic")
    scale: Mapped["RatingScale"] = relationship("RatingScale")

    __table_args__ = (
        # One vote per film
        UniqueConstraint("critic_id", "feature_id", name="uq_review_critic_feature"),
        CheckConstraint("numeric_score >= 0", name="ck_review_score_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<Review(id={self.id}, feature_id={self.feature_id}, "
            f"critic_id={self.critic_id}, score={self.numeric_score}, "
            f"recommendation={self.recommendation})>"
        )
