"""
Review Ledger

The single entry point for review mutations.

Every mutation runs as one unit of work:
1. Validate references (scale, critic, feature) and derive affected keys
2. Lock the affected statistics keys, then the review rows being changed
3. Write the review with its recommendation freshly classified
4. Recompute every affected statistics row
5. Commit, then release the locks

If any step fails the whole unit of work is rolled back, so a review never
exists without consistent statistics, and vice versa.
"""

import logging
from collections.abc import Callable
from contextlib import ExitStack
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bittermelon.database import unit_of_work
from bittermelon.exceptions import ConflictError, NotFoundError
from bittermelon.models import Review
from bittermelon.schemas.review import ReviewCreate, ReviewUpdate
from bittermelon.services.aggregation import AffectedKeys, AggregationEngine
from bittermelon.services.catalog import get_feature, outlet_of, outlets_of
from bittermelon.services.locks import KeyLockManager, StatsKey, get_lock_manager
from bittermelon.services.normalizer import classify
from bittermelon.services.scales import get_scale, resolve_scale_id

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReviewLedger:
    """Review fact store that keeps statistics in step with every write.

    Attributes:
        engine: Aggregation engine bound to the same session.
    """

    def __init__(self, session: Session, locks: KeyLockManager | None = None) -> None:
        """Initialize the ledger.

        Args:
            session: SQLAlchemy session; the ledger commits it.
            locks: Per-key lock manager; the process-wide one by default.
        """
        self._session = session
        self._locks = locks or get_lock_manager()
        self.engine = AggregationEngine(session)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def get(self, review_id: int) -> Review:
        """Get a review by ID.

        Raises:
            NotFoundError: If the review does not exist.
        """
        review = self._session.get(Review, review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def find(self, critic_id: int, feature_id: int) -> Review | None:
        """The critic's review of a feature, if any."""
        stmt = select(Review).where(
            Review.critic_id == critic_id,
            Review.feature_id == feature_id,
        )
        return self._session.execute(stmt).scalar_one_or_none()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def add(self, data: ReviewCreate) -> Review:
        """Insert a review and refresh the statistics it affects.

        Raises:
            NotFoundError: If the scale (or fallback scale), critic or
                feature does not exist.
            ConflictError: If the critic already reviewed the feature.
            RecomputeError: If refreshing statistics failed.
            LockTimeoutError: If an affected key stayed locked too long.
        """
        db = self._session
        with unit_of_work(db) as uow:
            scale_id = resolve_scale_id(db, data.scale_id)
            get_feature(db, data.feature_id)
            keys = self._keys_of(data.feature_id, data.critic_id)
            self._lock(uow, keys.lock_keys())

            if self.find(data.critic_id, data.feature_id) is not None:
                raise ConflictError(data.critic_id, data.feature_id)

            review = Review(
                feature_id=data.feature_id,
                critic_id=data.critic_id,
                scale_id=scale_id,
                numeric_score=data.numeric_score,
                recommendation=classify(db, scale_id, data.numeric_score),
                review_date=data.review_date,
                url=data.url,
            )
            db.add(review)
            self._flush(data.critic_id, data.feature_id)
            self.engine.refresh(keys)

        logger.info(
            "Added review %s: critic %s on feature %s -> %s",
            review.id, review.critic_id, review.feature_id, review.recommendation,
        )
        return review

    def update(self, review_id: int, patch: ReviewUpdate) -> Review:
        """Revise a review and refresh old and new statistics keys.

        The recommendation is reclassified on every update.

        Raises:
            NotFoundError: If the review, or a newly referenced scale,
                critic or feature, does not exist.
            ConflictError: If the new (critic, feature) pair is taken.
            RecomputeError: If refreshing statistics failed.
            LockTimeoutError: If an affected key stayed locked too long.
        """
        db = self._session
        changes = patch.changes()
        with unit_of_work(db) as uow:
            if "scale_id" in changes:
                get_scale(db, changes["scale_id"])

            def derive() -> tuple[tuple[tuple[int, int], tuple[int, int]], AffectedKeys]:
                review = self._load(review_id)
                old_pair = (review.critic_id, review.feature_id)
                new_pair = (
                    changes.get("critic_id", review.critic_id),
                    changes.get("feature_id", review.feature_id),
                )
                keys = self._keys_of(review.feature_id, review.critic_id)
                if new_pair != old_pair:
                    new_critic, new_feature = new_pair
                    get_feature(db, new_feature)
                    keys |= self._keys_of(new_feature, new_critic)
                return (old_pair, new_pair), keys

            (old_pair, new_pair), keys = self._lock_stable(uow, derive)
            review = self._get_for_update(review_id)

            if new_pair != old_pair and self.find(*new_pair) is not None:
                raise ConflictError(*new_pair)

            for name, value in changes.items():
                setattr(review, name, value)
            review.recommendation = classify(db, review.scale_id, review.numeric_score)
            self._flush(*new_pair)
            self.engine.refresh(keys)

        logger.info(
            "Updated review %s (%s) -> %s",
            review_id, ", ".join(sorted(changes)) or "no changes", review.recommendation,
        )
        return review

    def remove(self, review_id: int) -> None:
        """Delete a review and refresh the statistics it affected.

        Raises:
            NotFoundError: If the review does not exist.
            RecomputeError: If refreshing statistics failed.
        """
        db = self._session
        with unit_of_work(db) as uow:

            def derive() -> tuple[Review, AffectedKeys]:
                review = self._load(review_id)
                return review, self._keys_of(review.feature_id, review.critic_id)

            _, keys = self._lock_stable(uow, derive)
            review = self._get_for_update(review_id)
            db.delete(review)
            db.flush()
            self.engine.refresh(keys)
        logger.info("Removed review %s", review_id)

    def remove_by_critic(self, critic_id: int) -> int:
        """Delete every review by a critic.

        Each title the critic reviewed is recomputed once; the critic's own
        stats row is removed.

        Returns:
            Number of reviews removed.

        Raises:
            NotFoundError: If the critic does not exist.
        """
        db = self._session
        with unit_of_work(db) as uow:
            outlet_id = outlet_of(db, critic_id)
            stmt = select(Review).where(Review.critic_id == critic_id)

            def derive() -> tuple[list[Review], AffectedKeys]:
                reviews = list(db.scalars(stmt))
                keys = AffectedKeys(
                    frozenset(r.feature_id for r in reviews),
                    frozenset({critic_id}),
                    frozenset({outlet_id}),
                )
                return reviews, keys

            reviews, keys = self._lock_stable(uow, derive)
            removed = self._delete_all(reviews)
            self.engine.refresh(keys)
        logger.info("Removed %d review(s) by critic %s", removed, critic_id)
        return removed

    def remove_by_feature(self, feature_id: int) -> int:
        """Delete every review of a feature.

        The feature's stats row is removed; each critic who reviewed it, and
        each of their outlets, is recomputed once.

        Returns:
            Number of reviews removed.

        Raises:
            NotFoundError: If the feature does not exist.
        """
        db = self._session
        with unit_of_work(db) as uow:
            get_feature(db, feature_id)
            stmt = select(Review).where(Review.feature_id == feature_id)

            def derive() -> tuple[list[Review], AffectedKeys]:
                reviews = list(db.scalars(stmt))
                critics = {r.critic_id for r in reviews}
                keys = AffectedKeys(
                    frozenset({feature_id}),
                    frozenset(critics),
                    frozenset(outlets_of(db, critics)),
                )
                return reviews, keys

            reviews, keys = self._lock_stable(uow, derive)
            removed = self._delete_all(reviews)
            self.engine.refresh(keys)
        logger.info("Removed %d review(s) of feature %s", removed, feature_id)
        return removed

    def resync(self, keys: AffectedKeys) -> None:
        """Lock keys and recompute them from the current reviews.

        Used by catalog deletions and maintenance; review mutations refresh
        their own keys.
        """
        with unit_of_work(self._session) as uow:
            self._lock(uow, keys.lock_keys())
            self.engine.refresh(keys)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _keys_of(self, feature_id: int, critic_id: int) -> AffectedKeys:
        return AffectedKeys.of(feature_id, critic_id, outlet_of(self._session, critic_id))

    def _lock(self, uow: ExitStack, keys: list[StatsKey]) -> None:
        """Hold keys until the unit of work ends."""
        uow.enter_context(self._locks.acquire(keys))

    def _lock_stable(
        self,
        uow: ExitStack,
        derive: Callable[[], tuple[T, AffectedKeys]],
    ) -> tuple[T, AffectedKeys]:
        """
        Lock the keys derive() reports and hold them until the unit of work ends.

        derive() runs once unlocked and again under the locks. If the second
        run reports a key that is not held, everything is released and the
        grown set is taken again in one sorted pass, so keys are never
        acquired out of order. Row locks are taken by the caller only after
        this returns.

        Returns:
            derive()'s result and keys from the run made under the locks.
        """
        _, keys = derive()
        wanted = set(keys.lock_keys())
        while True:
            with ExitStack() as attempt:
                attempt.enter_context(self._locks.acquire(wanted))
                result, keys = derive()
                missing = set(keys.lock_keys()) - wanted
                if not missing:
                    uow.enter_context(attempt.pop_all())
                    return result, keys
            logger.debug("Affected keys grew by %s, re-locking", sorted(missing))
            wanted |= missing

    def _delete_all(self, reviews: list[Review]) -> int:
        for review in reviews:
            self._session.delete(review)
        self._session.flush()
        return len(reviews)

    def _load(self, review_id: int) -> Review:
        """Read the committed state of a review without locking its row."""
        stmt = (
            select(Review)
            .where(Review.id == review_id)
            .execution_options(populate_existing=True)
        )
        review = self._session.execute(stmt).scalar_one_or_none()
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def _get_for_update(self, review_id: int) -> Review:
        stmt = select(Review).where(Review.id == review_id).with_for_update()
        review = self._session.execute(stmt).scalar_one_or_none()
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def _flush(self, critic_id: int, feature_id: int) -> None:
        """Flush pending writes, reporting a unique-key race as a conflict."""
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise ConflictError(critic_id, feature_id) from exc
