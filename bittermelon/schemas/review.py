"""
Review Pydantic Schemas

Input and output shapes for the review ledger.

Schemas:
- ReviewCreate: a new review; scale_id may be omitted (fallback scale)
- ReviewUpdate: partial update of an existing review
- ReviewResponse: a stored review including its derived recommendation

Business Rules:
- recommendation is derived, so neither input schema accepts it
  (extra="forbid" turns an attempt into a ValidationError)
- numeric_score fits Numeric(5, 2) and is never negative
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bittermelon.models.review import Recommendation


def _blank_to_none(v: str | None) -> str | None:
    if v is not None:
        v = v.strip()
        if not v:
            return None
    return v


class ReviewCreate(BaseModel):
    """
    Schema for submitting a new review.

    Example:
        ReviewCreate(
            feature_id=10,
            critic_id=5,
            scale_id=3,
            numeric_score=Decimal("7.0"),
            review_date=date(2024, 3, 1),
        )
    """

    feature_id: int = Field(..., gt=0, description="Reviewed feature (catalog id)")
    critic_id: int = Field(..., gt=0, description="Reviewing critic")
    scale_id: int | None = Field(
        default=None,
        gt=0,
        description="Rating scale; the configured fallback scale when omitted",
    )
    numeric_score: Decimal = Field(
        ...,
        ge=0,
        max_digits=5,
        decimal_places=2,
        description="Raw score on the review's scale",
        examples=[Decimal("7.5"), Decimal("1")],
    )
    review_date: date = Field(..., description="Publication date of the review")
    url: str | None = Field(default=None, max_length=255)

    model_config = ConfigDict(extra="forbid")

    @field_validator("url")
    @classmethod
    def url_must_not_be_blank(cls, v: str | None) -> str | None:
        """Treat a whitespace-only URL as missing."""
        return _blank_to_none(v)


class ReviewUpdate(BaseModel):
    """
    Schema for revising a review.

    All fields are optional; only fields that were explicitly provided are
    applied. Changing feature_id or critic_id moves the review to another
    statistics key, so both the old and the new keys are recomputed.
    """

    feature_id: int | None = Field(default=None, gt=0)
    critic_id: int | None = Field(default=None, gt=0)
    scale_id: int | None = Field(default=None, gt=0)
    numeric_score: Decimal | None = Field(
        default=None,
        ge=0,
        max_digits=5,
        decimal_places=2,
    )
    review_date: date | None = None
    url: str | None = Field(default=None, max_length=255)

    model_config = ConfigDict(extra="forbid")

    @field_validator("url")
    @classmethod
    def url_must_not_be_blank(cls, v: str | None) -> str | None:
        """Treat a whitespace-only URL as a request to clear it."""
        return _blank_to_none(v)

    @model_validator(mode="after")
    def required_columns_not_cleared(self) -> "ReviewUpdate":
        """Only url may be explicitly set to null."""
        for name in ("feature_id", "critic_id", "scale_id", "numeric_score", "review_date"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields the caller actually set."""
        return self.model_dump(exclude_unset=True)


class ReviewResponse(BaseModel):
    """A stored review."""

    id: int
    feature_id: int
    critic_id: int
    scale_id: int
    numeric_score: Decimal
    recommendation: Recommendation
    review_date: date
    url: str | None = None

    model_config = ConfigDict(from_attributes=True)
