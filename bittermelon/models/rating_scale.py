"""
Rating Scale Model

A scoring scheme critics use (five-star, percent, ten-point, thumbs) and the
score at or above which a review counts as positive ("UP").

Rating scales are reference data: installed at setup, read on every review
write, and never deleted while a review still uses them.
"""

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from bittermelon.database import Base


class RatingScale(Base):
    """
    Rating scale model.

    Table: rating_scales

    Example:
        scale = RatingScale(
            description="Ten-point",
            positive_threshold=Decimal("6"),
        )
    """

    __tablename__ = "rating_scales"

    id: Mapped[int] = mapped_column(primary_key=True)

    description: Mapped[str] = mapped_column(
        String(80),
        unique=True,
        nullable=False,
        comment="Human readable scheme name, e.g. 'Five-star'"
    )

    # Numeric(5, 2) matches review scores, so comparisons stay in Decimal
    positive_threshold: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        comment="Scores at or above this value are classified UP"
    )

    def __repr__(self) -> str:
        return (
            f"RatingScale(id={self.id}, description='{self.description}', "
            f"positive_threshold={self.positive_threshold})"
        )
