"""
pytest Fixtures for the Aggregation Engine Tests

Shared fixtures used across all test files.

FIXTURE LAYOUT:
- engine / db_session: a fresh SQLite in-memory database per test
- locks / ledger: a private lock manager and the ledger bound to the session
- scales, outlets, critics, features: reference data

Every test gets its own database. Ledger mutations commit (and roll back on
failure), so wrapping each test in an outer transaction would not isolate
them.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing bittermelon.
# bittermelon.database builds its engine from DATABASE_URL at import time.
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["FALLBACK_SCALE_DESCRIPTION"] = "Thumbs"

from collections.abc import Callable, Generator
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bittermelon.database import Base
from bittermelon.models import Critic, Feature, Outlet, RatingScale, Review
from bittermelon.schemas.review import ReviewCreate
from bittermelon.services.ledger import ReviewLedger
from bittermelon.services.locks import KeyLockManager
from bittermelon.services.scales import seed_rating_scales

# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory keeps the suite fast and self-contained. SELECT ... FOR
# UPDATE is silently dropped by SQLite; the in-process key locks still apply.


@pytest.fixture
def engine():
    """
    Create a SQLite in-memory database engine with all tables.

    StaticPool keeps the single connection alive; without it the in-memory
    database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """Create a database session for one test."""
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )
    session = TestSessionLocal()

    yield session

    session.close()


@pytest.fixture
def locks() -> KeyLockManager:
    """A lock manager private to the test, with a short timeout."""
    return KeyLockManager(timeout=0.5)


@pytest.fixture
def ledger(db_session: Session, locks: KeyLockManager) -> ReviewLedger:
    """Review ledger bound to the test session."""
    return ReviewLedger(db_session, locks)


# =============================================================================
# REFERENCE DATA FIXTURES
# =============================================================================


@pytest.fixture
def scales(db_session: Session) -> dict[str, RatingScale]:
    """The default rating scales, keyed by description."""
    seed_rating_scales(db_session)
    return {
        scale.description: scale
        for scale in db_session.scalars(select(RatingScale))
    }


@pytest.fixture
def outlets(db_session: Session) -> dict[int, Outlet]:
    """Two outlets: Daily Planet (1) and Gotham Gazette (2)."""
    rows = [
        Outlet(id=1, name="Daily Planet", country="US"),
        Outlet(id=2, name="Gotham Gazette", country="US"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {outlet.id: outlet for outlet in rows}


@pytest.fixture
def critics(db_session: Session, outlets: dict[int, Outlet]) -> dict[int, Critic]:
    """Critics 5 and 6 write for outlet 1, critic 7 for outlet 2."""
    rows = [
        Critic(id=5, display_name="Lois Lane", outlet_id=1,
               is_top_critic=True, joined_date=date(2010, 5, 1)),
        Critic(id=6, display_name="Clark Kent", outlet_id=1,
               joined_date=date(2012, 3, 18)),
        Critic(id=7, display_name="Vicki Vale", outlet_id=2,
               joined_date=date(2014, 11, 11)),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {critic.id: critic for critic in rows}


@pytest.fixture
def features(db_session: Session) -> dict[int, Feature]:
    """Catalog titles 10 and 11."""
    rows = [
        Feature(id=10, title="The Iron Giant", year=1999, type="movie"),
        Feature(id=11, title="Paddington 2", year=2017, type="movie"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {feature.id: feature for feature in rows}


@pytest.fixture
def catalog(scales, critics, features) -> None:
    """Everything a review needs: scales, outlets, critics and features."""
    return None


@pytest.fixture
def submit(ledger: ReviewLedger, scales: dict[str, RatingScale]) -> Callable[..., Review]:
    """
    Submit a review through the ledger.

    Usage:
        review = submit(feature_id=10, critic_id=5, score="7.0", scale="Ten-point")
    """

    def _submit(
        feature_id: int,
        critic_id: int,
        score: str | Decimal,
        scale: str | None = "Ten-point",
    ) -> Review:
        data = ReviewCreate(
            feature_id=feature_id,
            critic_id=critic_id,
            scale_id=scales[scale].id if scale is not None else None,
            numeric_score=Decimal(score),
            review_date=date(2024, 3, 1),
        )
        return ledger.add(data)

    return _submit
