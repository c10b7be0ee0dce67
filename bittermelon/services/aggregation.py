"""
Aggregate Recomputation Engine

Keeps the title, critic and outlet statistics in sync with the reviews table.

Every ledger mutation derives the set of statistics keys it affects and calls
refresh() inside its own transaction. Each affected key is recomputed from a
full scan of its current reviews and the cache row is replaced as a whole.
Statistics are never adjusted by deltas, so a row cannot drift from the facts
it summarizes, and recomputing a key twice yields the same row.

A key whose scan finds no reviews has its row removed: a title without
reviews is unrated rather than HoneyDont.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from bittermelon.exceptions import RecomputeError
from bittermelon.models import (
    Critic,
    CriticStats,
    Feature,
    Outlet,
    OutletStats,
    Recommendation,
    Review,
    TitleStats,
)
from bittermelon.services.certification import certify, sweetness_pct
from bittermelon.services.locks import StatsKey
from bittermelon.services.stats_cache import (
    CriticStatsCache,
    OutletStatsCache,
    TitleStatsCache,
)

logger = logging.getLogger(__name__)

_POSITIVE = func.coalesce(
    func.sum(case((Review.recommendation == Recommendation.UP, 1), else_=0)),
    0,
)


# =============================================================================
# Affected Keys
# =============================================================================


@dataclass(frozen=True)
class AffectedKeys:
    """Statistics keys touched by one ledger mutation."""

    titles: frozenset[int] = field(default_factory=frozenset)
    critics: frozenset[int] = field(default_factory=frozenset)
    outlets: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def of(cls, feature_id: int, critic_id: int, outlet_id: int) -> "AffectedKeys":
        """Keys touched by a single review."""
        return cls(frozenset({feature_id}), frozenset({critic_id}), frozenset({outlet_id}))

    def __or__(self, other: "AffectedKeys") -> "AffectedKeys":
        return AffectedKeys(
            self.titles | other.titles,
            self.critics | other.critics,
            self.outlets | other.outlets,
        )

    def __bool__(self) -> bool:
        return bool(self.titles or self.critics or self.outlets)

    def lock_keys(self) -> list[StatsKey]:
        """Keys in the form used by KeyLockManager, sorted."""
        return sorted(
            [("title", key) for key in self.titles]
            + [("critic", key) for key in self.critics]
            + [("outlet", key) for key in self.outlets]
        )


@dataclass(frozen=True)
class StatsDrift:
    """A stats row that differs from a fresh recompute."""

    kind: str
    key: int
    stored: dict[str, Any] | None
    expected: dict[str, Any] | None


# =============================================================================
# Engine
# =============================================================================


class AggregationEngine:
    """Recomputes statistics rows from the reviews table.

    Attributes:
        titles: Title statistics cache.
        critics: Critic statistics cache.
        outlets: Outlet statistics cache.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self.titles = TitleStatsCache(session)
        self.critics = CriticStatsCache(session)
        self.outlets = OutletStatsCache(session)

    # -------------------------------------------------------------------------
    # Pure recompute (read only)
    # -------------------------------------------------------------------------
    def compute_title(self, feature_id: int) -> dict[str, Any] | None:
        """Fresh title statistics for feature_id, or None without reviews."""
        stmt = select(func.count(Review.id), _POSITIVE).where(
            Review.feature_id == feature_id
        )
        total, positive = self._session.execute(stmt).one()
        if total == 0:
            return None
        sweetness = sweetness_pct(positive, total)
        return {
            "total_reviews": total,
            "positive_reviews": positive,
            "sweetness_pct": sweetness,
            "certification": certify(sweetness),
        }

    def compute_critic(self, critic_id: int) -> dict[str, Any] | None:
        """Fresh critic statistics for critic_id, or None without reviews."""
        stmt = select(func.count(Review.id), _POSITIVE).where(
            Review.critic_id == critic_id
        )
        total, positive = self._session.execute(stmt).one()
        if total == 0:
            return None
        return {"review_count": total, "sweetness_pct": sweetness_pct(positive, total)}

    def compute_outlet(self, outlet_id: int) -> dict[str, Any] | None:
        """Fresh outlet statistics over every critic currently at the outlet."""
        stmt = (
            select(func.count(Review.id), _POSITIVE)
            .join(Critic, Critic.id == Review.critic_id)
            .where(Critic.outlet_id == outlet_id)
        )
        total, positive = self._session.execute(stmt).one()
        if total == 0:
            return None
        return {"review_count": total, "sweetness_pct": sweetness_pct(positive, total)}

    # -------------------------------------------------------------------------
    # Recompute and replace
    # -------------------------------------------------------------------------
    def recompute_title(self, feature_id: int) -> TitleStats | None:
        """Recompute and replace the stats row of one title."""
        row = self.titles.replace(feature_id, self.compute_title(feature_id))
        logger.debug("Recomputed title %s: %r", feature_id, row)
        return row

    def recompute_critic(self, critic_id: int) -> CriticStats | None:
        """Recompute and replace the stats row of one critic."""
        row = self.critics.replace(critic_id, self.compute_critic(critic_id))
        logger.debug("Recomputed critic %s: %r", critic_id, row)
        return row

    def recompute_outlet(self, outlet_id: int) -> OutletStats | None:
        """Recompute and replace the stats row of one outlet."""
        row = self.outlets.replace(outlet_id, self.compute_outlet(outlet_id))
        logger.debug("Recomputed outlet %s: %r", outlet_id, row)
        return row

    def lock_rows(self, keys: AffectedKeys) -> None:
        """
        Take row locks on the catalog rows behind keys.

        SELECT ... FOR UPDATE serializes writers of the same key across
        processes on PostgreSQL. SQLite ignores it; there the whole database
        is locked by the writing transaction anyway.
        """
        for model, ids in (
            (Feature, keys.titles),
            (Critic, keys.critics),
            (Outlet, keys.outlets),
        ):
            if ids:
                stmt = (
                    select(model.id)
                    .where(model.id.in_(sorted(ids)))
                    .order_by(model.id)
                    .with_for_update()
                )
                self._session.execute(stmt).all()

    def refresh(self, keys: AffectedKeys) -> None:
        """
        Recompute every statistics row affected by a mutation.

        Must run inside the caller's unit of work. Any failure is raised as
        RecomputeError so the enclosing mutation is rolled back with it.

        Raises:
            RecomputeError: If any recompute fails
        """
        if not keys:
            return
        try:
            self._session.flush()
            self.lock_rows(keys)
            for feature_id in sorted(keys.titles):
                self.recompute_title(feature_id)
            for critic_id in sorted(keys.critics):
                self.recompute_critic(critic_id)
            for outlet_id in sorted(keys.outlets):
                self.recompute_outlet(outlet_id)
        except Exception as exc:
            logger.error("Statistics refresh failed for %s: %s", keys, exc)
            raise RecomputeError(f"Failed to refresh statistics for {keys}") from exc

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------
    def all_keys(self) -> AffectedKeys:
        """Every key that has reviews or a stored stats row."""
        session = self._session
        titles = set(session.scalars(select(Review.feature_id).distinct()))
        titles |= set(session.scalars(select(TitleStats.feature_id)))
        critics = set(session.scalars(select(Review.critic_id).distinct()))
        critics |= set(session.scalars(select(CriticStats.critic_id)))
        outlets = set(
            session.scalars(
                select(Critic.outlet_id)
                .join(Review, Review.critic_id == Critic.id)
                .distinct()
            )
        )
        outlets |= set(session.scalars(select(OutletStats.outlet_id)))
        return AffectedKeys(frozenset(titles), frozenset(critics), frozenset(outlets))

    def rebuild_all(self) -> AffectedKeys:
        """
        Recompute every statistics row from scratch.

        Useful after restoring data or repairing inconsistencies. The caller
        owns the transaction.

        Returns:
            The keys that were refreshed
        """
        keys = self.all_keys()
        self.refresh(keys)
        logger.info(
            "Rebuilt statistics for %d title(s), %d critic(s), %d outlet(s)",
            len(keys.titles),
            len(keys.critics),
            len(keys.outlets),
        )
        return keys

    def find_drift(self) -> list[StatsDrift]:
        """
        Compare every stored row with a fresh recompute without writing.

        Returns:
            One StatsDrift per mismatching key; empty when consistent
        """
        keys = self.all_keys()
        checks = (
            ("title", keys.titles, self.titles, self.compute_title, TitleStats),
            ("critic", keys.critics, self.critics, self.compute_critic, CriticStats),
            ("outlet", keys.outlets, self.outlets, self.compute_outlet, OutletStats),
        )
        drift = []
        for kind, ids, cache, compute, model in checks:
            columns = [c.key for c in model.__table__.columns if not c.primary_key]
            for key in sorted(ids):
                row = cache.find(key)
                stored = (
                    {name: getattr(row, name) for name in columns} if row is not None else None
                )
                expected = compute(key)
                if stored != expected:
                    drift.append(StatsDrift(kind, key, stored, expected))
        for item in drift:
            logger.warning("Stats drift on %s %s: stored=%s expected=%s",
                           item.kind, item.key, item.stored, item.expected)
        return drift
