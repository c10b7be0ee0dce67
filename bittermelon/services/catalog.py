"""
Catalog Service

Read-side contract the engine consumes from the catalog (critic and feature
existence, critic -> outlet mapping), plus creation helpers for reference
data used by setup scripts and tests.

The aggregation engine never writes catalog rows. Deletions that cascade
into reviews live in bittermelon.services.cascades.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from bittermelon.database import unit_of_work
from bittermelon.exceptions import ConstraintViolationError, NotFoundError
from bittermelon.models import Critic, Feature, Outlet
from bittermelon.schemas.catalog import CriticCreate, FeatureCreate, OutletCreate

logger = logging.getLogger(__name__)


# =============================================================================
# Lookups
# =============================================================================


def critic_exists(db: Session, critic_id: int) -> bool:
    """Check whether a critic exists."""
    return db.get(Critic, critic_id) is not None


def feature_exists(db: Session, feature_id: int) -> bool:
    """Check whether a feature exists in the catalog."""
    return db.get(Feature, feature_id) is not None


def outlet_exists(db: Session, outlet_id: int) -> bool:
    """Check whether an outlet exists."""
    return db.get(Outlet, outlet_id) is not None


def get_critic(db: Session, critic_id: int) -> Critic:
    """Get a critic or raise NotFoundError."""
    critic = db.get(Critic, critic_id)
    if critic is None:
        raise NotFoundError("Critic", critic_id)
    return critic


def get_feature(db: Session, feature_id: int) -> Feature:
    """Get a feature or raise NotFoundError."""
    feature = db.get(Feature, feature_id)
    if feature is None:
        raise NotFoundError("Feature", feature_id)
    return feature


def get_outlet(db: Session, outlet_id: int) -> Outlet:
    """Get an outlet or raise NotFoundError."""
    outlet = db.get(Outlet, outlet_id)
    if outlet is None:
        raise NotFoundError("Outlet", outlet_id)
    return outlet


def outlet_of(db: Session, critic_id: int) -> int:
    """
    Return the outlet a critic currently writes for.

    Raises:
        NotFoundError: If the critic does not exist
    """
    return get_critic(db, critic_id).outlet_id


def outlets_of(db: Session, critic_ids: set[int]) -> set[int]:
    """Distinct outlets of a set of critics."""
    if not critic_ids:
        return set()
    stmt = select(Critic.outlet_id).where(Critic.id.in_(critic_ids)).distinct()
    return set(db.scalars(stmt))


# =============================================================================
# Creation
# =============================================================================


def create_outlet(db: Session, data: OutletCreate) -> Outlet:
    """
    Create an outlet.

    Raises:
        ConstraintViolationError: If the name is already taken
    """
    with unit_of_work(db):
        taken = db.scalars(select(Outlet.id).where(Outlet.name == data.name)).first()
        if taken is not None:
            raise ConstraintViolationError(f"Outlet '{data.name}' already exists")
        outlet = Outlet(**data.model_dump())
        db.add(outlet)
        db.flush()
    logger.info("Created outlet %s (%s)", outlet.id, outlet.name)
    return outlet


def create_critic(db: Session, data: CriticCreate) -> Critic:
    """
    Create a critic at an existing outlet.

    Raises:
        NotFoundError: If the outlet does not exist
    """
    with unit_of_work(db):
        get_outlet(db, data.outlet_id)
        critic = Critic(**data.model_dump())
        db.add(critic)
        db.flush()
    logger.info("Created critic %s (%s) at outlet %s", critic.id, critic.display_name, critic.outlet_id)
    return critic


def create_feature(db: Session, data: FeatureCreate) -> Feature:
    """Register a catalog title."""
    with unit_of_work(db):
        feature = Feature(**data.model_dump())
        db.add(feature)
        db.flush()
    logger.info("Registered feature %s (%s)", feature.id, feature.title)
    return feature
