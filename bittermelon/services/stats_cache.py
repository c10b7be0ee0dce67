"""
Statistic Caches

Key-value access to the materialized statistics rows. Reads are open to
anyone; replace() is the only write path and is called exclusively by the
aggregation engine.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from bittermelon.database import Base
from bittermelon.exceptions import NotFoundError
from bittermelon.models import CriticStats, OutletStats, TitleStats

StatsT = TypeVar("StatsT", bound=Base)


class StatsCache(Generic[StatsT]):
    """Generic statistics cache over one stats table.

    Attributes:
        model: Stats model class.
        key_field: Name of the primary key column.
        entity: Name used in NotFoundError messages.
    """

    model: type[StatsT]
    key_field: str
    entity: str

    def __init__(self, session: Session) -> None:
        self._session = session

    def find(self, key: int) -> StatsT | None:
        """Return the stats row for key, or None."""
        return self._session.get(self.model, key)

    def get(self, key: int) -> StatsT:
        """Return the stats row for key.

        Raises:
            NotFoundError: If no row exists (the key has no reviews).
        """
        row = self.find(key)
        if row is None:
            raise NotFoundError(self.entity, key)
        return row

    def replace(self, key: int, values: dict[str, Any] | None) -> StatsT | None:
        """Replace the whole row for key.

        Args:
            key: Primary key of the row.
            values: Every non-key column, or None to remove the row.

        Returns:
            The stored row, or None when it was removed.
        """
        row = self.find(key)
        if values is None:
            if row is not None:
                self._session.delete(row)
                self._session.flush()
            return None

        if row is None:
            row = self.model(**{self.key_field: key}, **values)
            self._session.add(row)
        else:
            for name, value in values.items():
                setattr(row, name, value)
        self._session.flush()
        return row


class TitleStatsCache(StatsCache[TitleStats]):
    model = TitleStats
    key_field = "feature_id"
    entity = "TitleStats"


class CriticStatsCache(StatsCache[CriticStats]):
    model = CriticStats
    key_field = "critic_id"
    entity = "CriticStats"


class OutletStatsCache(StatsCache[OutletStats]):
    model = OutletStats
    key_field = "outlet_id"
    entity = "OutletStats"
