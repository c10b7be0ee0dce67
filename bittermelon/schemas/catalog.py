"""
Catalog Pydantic Schemas

Creation schemas for reference data: rating scales, outlets, critics and the
catalog's features.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RatingScaleCreate(BaseModel):
    """A new scoring scheme and its UP cut line."""

    description: str = Field(..., min_length=1, max_length=80, examples=["Ten-point"])
    positive_threshold: Decimal = Field(
        ...,
        ge=0,
        max_digits=5,
        decimal_places=2,
        examples=[Decimal("6")],
    )

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        """Strip whitespace and reject blank descriptions."""
        v = v.strip()
        if not v:
            raise ValueError("description must not be blank")
        return v


class OutletCreate(BaseModel):
    """A new publication."""

    name: str = Field(..., min_length=1, max_length=120)
    country: str | None = Field(default=None, max_length=80)
    url: str | None = Field(default=None, max_length=255)

    model_config = ConfigDict(extra="forbid")


class CriticCreate(BaseModel):
    """A new critic at an existing outlet."""

    display_name: str = Field(..., min_length=1, max_length=120)
    outlet_id: int = Field(..., gt=0)
    is_top_critic: bool = False
    joined_date: date

    model_config = ConfigDict(extra="forbid")


class FeatureCreate(BaseModel):
    """A catalog title. Used by setup scripts and tests."""

    title: str = Field(..., min_length=1, max_length=255)
    year: int = Field(..., ge=1870, le=2100)
    type: str = Field(default="movie", max_length=255)

    model_config = ConfigDict(extra="forbid")
