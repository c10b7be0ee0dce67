"""
Catalog Cascades

Handlers for catalog deletions that reach into the review ledger.

Deleting a critic or a feature removes their reviews through the ledger, so
the statistics they fed are recomputed in the same transaction as the
catalog delete. Deleting an outlet is refused while critics still write for
it.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bittermelon.database import unit_of_work
from bittermelon.exceptions import ConstraintViolationError
from bittermelon.models import Critic
from bittermelon.services.aggregation import AffectedKeys
from bittermelon.services.catalog import get_critic, get_feature, get_outlet
from bittermelon.services.ledger import ReviewLedger
from bittermelon.services.locks import KeyLockManager

logger = logging.getLogger(__name__)


def on_critic_deleted(db: Session, critic_id: int, locks: KeyLockManager | None = None) -> int:
    """
    Delete a critic together with their reviews.

    Every title the critic reviewed and the critic's outlet are recomputed;
    the critic's stats row is removed.

    Returns:
        Number of reviews removed

    Raises:
        NotFoundError: If the critic does not exist
    """
    with unit_of_work(db):
        critic = get_critic(db, critic_id)
        removed = ReviewLedger(db, locks).remove_by_critic(critic_id)
        db.delete(critic)
        db.flush()
    logger.info("Deleted critic %s and %d review(s)", critic_id, removed)
    return removed


def on_feature_deleted(db: Session, feature_id: int, locks: KeyLockManager | None = None) -> int:
    """
    Delete a feature together with its reviews.

    The feature's stats row is removed; every critic who reviewed it and
    their outlets are recomputed.

    Returns:
        Number of reviews removed

    Raises:
        NotFoundError: If the feature does not exist
    """
    with unit_of_work(db):
        feature = get_feature(db, feature_id)
        removed = ReviewLedger(db, locks).remove_by_feature(feature_id)
        db.delete(feature)
        db.flush()
    logger.info("Deleted feature %s and %d review(s)", feature_id, removed)
    return removed


def on_outlet_deleted(db: Session, outlet_id: int, locks: KeyLockManager | None = None) -> None:
    """
    Delete an outlet that no critic writes for.

    Raises:
        NotFoundError: If the outlet does not exist
        ConstraintViolationError: If critics still reference the outlet
    """
    with unit_of_work(db):
        outlet = get_outlet(db, outlet_id)
        critics = db.execute(
            select(func.count(Critic.id)).where(Critic.outlet_id == outlet_id)
        ).scalar_one()
        if critics:
            raise ConstraintViolationError(
                f"Outlet {outlet_id} still has {critics} critic(s) and cannot be deleted"
            )
        ledger = ReviewLedger(db, locks)
        keys = AffectedKeys(outlets=frozenset({outlet_id}))
        ledger.resync(keys)
        db.delete(outlet)
        db.flush()
    logger.info("Deleted outlet %s", outlet_id)
