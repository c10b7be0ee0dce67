"""
Statistics Pydantic Schemas

Read models for the three statistic caches. Built from the ORM rows with
model_validate(..., from_attributes=True).
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from bittermelon.models.stats import Certification


class TitleStatsResponse(BaseModel):
    """
    Aggregated review statistics for a title.

    sweetness_pct is the share of UP reviews, 0-100 with two decimals.
    """

    feature_id: int
    total_reviews: int = Field(..., ge=0)
    positive_reviews: int = Field(..., ge=0)
    sweetness_pct: Decimal = Field(..., ge=0, le=100)
    certification: Certification | None = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "feature_id": 10,
                "total_reviews": 2,
                "positive_reviews": 1,
                "sweetness_pct": "50.00",
                "certification": "HoneyDont",
            }
        },
    )


class CriticStatsResponse(BaseModel):
    """Aggregated review statistics for a critic."""

    critic_id: int
    review_count: int = Field(..., ge=0)
    sweetness_pct: Decimal = Field(..., ge=0, le=100)

    model_config = ConfigDict(from_attributes=True)


class OutletStatsResponse(BaseModel):
    """Aggregated review statistics for an outlet."""

    outlet_id: int
    review_count: int = Field(..., ge=0)
    sweetness_pct: Decimal = Field(..., ge=0, le=100)

    model_config = ConfigDict(from_attributes=True)
