"""
SQLAlchemy Models Package

Reference data:
- RatingScale: scoring schemes and their positive threshold
- Outlet, Critic: who writes reviews
- Feature: read-only mirror of the catalog's titles

Facts:
- Review: one critic's review of one feature

Caches (owned by the aggregation engine):
- TitleStats, CriticStats, OutletStats

Import all models here so Alembic discovers them for migrations.
"""

# The order matters for SQLAlchemy to resolve relationships
from bittermelon.models.rating_scale import RatingScale
from bittermelon.models.outlet import Outlet
from bittermelon.models.critic import Critic
from bittermelon.models.feature import Feature
from bittermelon.models.review import Recommendation, Review
from bittermelon.models.stats import Certification, CriticStats, OutletStats, TitleStats

__all__ = [
    "RatingScale",
    "Outlet",
    "Critic",
    "Feature",
    "Recommendation",
    "Review",
    "Certification",
    "TitleStats",
    "CriticStats",
    "OutletStats",
]
