"""
Feature Model

Mirror of the legacy catalog's `features` table (movies and TV titles).

The aggregation engine only reads this table: reviews reference it and title
statistics are keyed by it. Titles, cast, franchises and the rest of the
catalog are owned elsewhere.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bittermelon.database import Base


class Feature(Base):
    """
    Catalog title.

    Table: features
    """

    __tablename__ = "features"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    # "movie" or "tv" in the legacy data
    type: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"Feature(id={self.id}, title='{self.title}', year={self.year})"
