"""
Outlet Model

A publication or site that critics write for. Outlet statistics aggregate
the reviews of every critic currently attached to the outlet.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bittermelon.database import Base

if TYPE_CHECKING:
    from bittermelon.models.critic import Critic


class Outlet(Base):
    """
    Outlet model.

    Table: outlets

    Relationships:
    - critics: One-to-Many; deleting an outlet is blocked while critics exist
    """

    __tablename__ = "outlets"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(120),
        unique=True,
        index=True,
        nullable=False,
        comment="Publication name"
    )

    country: Mapped[Optional[str]] = mapped_column(
        String(80),
        nullable=True,
    )

    url: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    critics: Mapped[list["Critic"]] = relationship(
        "Critic",
        back_populates="outlet",
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        return f"Outlet(id={self.id}, name='{self.name}')"
