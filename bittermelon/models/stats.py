"""
Statistic Cache Models

Materialized aggregates maintained by the aggregation engine:

- TitleStats: per feature, with the HoneyDew/HoneyDont certification
- CriticStats: per critic
- OutletStats: per outlet, over every critic currently at the outlet

These rows are caches. At any quiescent point each one equals a recompute
from the reviews table, and a key with no reviews has no row. Nothing but
bittermelon.services.aggregation writes them.
"""

from decimal import Decimal
from enum import StrEnum
from typing import Optional

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from bittermelon.database import Base


class Certification(StrEnum):
    """Title-level badge derived from sweetness_pct."""

    HONEYDEW = "HoneyDew"
    HONEYDONT = "HoneyDont"


class TitleStats(Base):
    """Aggregate statistics for one feature."""

    __tablename__ = "title_stats"

    feature_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("features.id", ondelete="CASCADE"),
        primary_key=True,
    )
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    positive_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sweetness_pct: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal("0"),
    )
    certification: Mapped[Optional[Certification]] = mapped_column(
        Enum(
            Certification,
            name="certification",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint(
            "sweetness_pct >= 0 AND sweetness_pct <= 100",
            name="ck_title_stats_sweetness_range",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"TitleStats(feature_id={self.feature_id}, total={self.total_reviews}, "
            f"positive={self.positive_reviews}, sweetness={self.sweetness_pct}, "
            f"certification={self.certification})"
        )


class CriticStats(Base):
    """Aggregate statistics for one critic."""

    __tablename__ = "critic_stats"

    critic_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("critics.id", ondelete="CASCADE"),
        primary_key=True,
    )
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sweetness_pct: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal("0"),
    )

    def __repr__(self) -> str:
        return (
            f"CriticStats(critic_id={self.critic_id}, count={self.review_count}, "
            f"sweetness={self.sweetness_pct})"
        )


class OutletStats(Base):
    """Aggregate statistics for one outlet."""

    __tablename__ = "outlet_stats"

    outlet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("outlets.id", ondelete="CASCADE"),
        primary_key=True,
    )
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sweetness_pct: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal("0"),
    )

    def __repr__(self) -> str:
        return (
            f"OutletStats(outlet_id={self.outlet_id}, count={self.review_count}, "
            f"sweetness={self.sweetness_pct})"
        )
