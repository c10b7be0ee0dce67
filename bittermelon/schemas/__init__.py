"""
Pydantic Schemas Package

Validation at the engine boundary:
- review.py: review ledger input and output
- stats.py: statistic cache read models
- catalog.py: reference data creation
"""

from bittermelon.schemas.catalog import (
    CriticCreate,
    FeatureCreate,
    OutletCreate,
    RatingScaleCreate,
)
from bittermelon.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from bittermelon.schemas.stats import (
    CriticStatsResponse,
    OutletStatsResponse,
    TitleStatsResponse,
)

__all__ = [
    "CriticCreate",
    "FeatureCreate",
    "OutletCreate",
    "RatingScaleCreate",
    "ReviewCreate",
    "ReviewResponse",
    "ReviewUpdate",
    "CriticStatsResponse",
    "OutletStatsResponse",
    "TitleStatsResponse",
]
