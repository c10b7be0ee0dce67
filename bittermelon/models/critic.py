"""
Critic Model

An individual reviewer writing for one outlet.

Business Rules:
- Every critic belongs to exactly one outlet (ON DELETE RESTRICT)
- Deleting a critic removes their reviews; the ledger performs that cascade
  so the affected statistics are recomputed in the same transaction
"""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bittermelon.database import Base

if TYPE_CHECKING:
    from bittermelon.models.outlet import Outlet


class Critic(Base):
    """
    Critic model.

    Table: critics

    Example:
        critic = Critic(
            display_name="Lois Lane",
            outlet_id=1,
            is_top_critic=True,
            joined_date=date(2010, 5, 1),
        )
    """

    __tablename__ = "critics"

    id: Mapped[int] = mapped_column(primary_key=True)

    display_name: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
    )

    outlet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("outlets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    is_top_critic: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    joined_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    outlet: Mapped["Outlet"] = relationship("Outlet", back_populates="critics")

    def __repr__(self) -> str:
        return (
            f"Critic(id={self.id}, display_name='{self.display_name}', "
            f"outlet_id={self.outlet_id})"
        )
