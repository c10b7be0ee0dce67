"""
Tests for the Reviews Service

The functional surface a service layer calls: add/update/delete a review and
read the three statistics caches.

These follow the HoneyDew walkthrough end to end:
1. Ten-point 7.0 by critic 5 -> UP, title 10 HoneyDew at 100%
2. Ten-point 3.0 by critic 6 -> DOWN, 50% HoneyDont
3. Review 1 revised to 2.0 -> DOWN, 0% HoneyDont
4. Critic 5 reviews title 10 again -> conflict, nothing changes
5. Critic 5 deleted -> titles 10 and 11 recomputed, critic row gone
6. No scale given -> scored on the fallback scale
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.orm import Session

from bittermelon.exceptions import ConflictError, NotFoundError
from bittermelon.models import Certification, Recommendation, Review
from bittermelon.schemas.review import ReviewResponse
from bittermelon.services import reviews
from bittermelon.services.cascades import on_critic_deleted

REVIEW_DATE = date(2024, 3, 1)


@pytest.mark.usefixtures("catalog")
class TestHoneyDewWalkthrough:
    """The six steps above, in order, on one database."""

    def test_walkthrough(self, db_session: Session, scales, locks):
        ten_point = scales["Ten-point"].id

        # Step 1
        first = reviews.add_review(
            db_session, 10, 5, Decimal("7.0"), REVIEW_DATE, scale_id=ten_point, locks=locks
        )
        assert db_session.get(Review, first).recommendation == Recommendation.UP
        stats = reviews.get_title_stats(db_session, 10)
        assert (stats.total_reviews, stats.positive_reviews) == (1, 1)
        assert stats.sweetness_pct == Decimal("100.00")
        assert stats.certification == Certification.HONEYDEW

        # Step 2
        second = reviews.add_review(
            db_session, 10, 6, Decimal("3.0"), REVIEW_DATE, scale_id=ten_point, locks=locks
        )
        assert db_session.get(Review, second).recommendation == Recommendation.DOWN
        stats = reviews.get_title_stats(db_session, 10)
        assert (stats.total_reviews, stats.positive_reviews) == (2, 1)
        assert stats.sweetness_pct == Decimal("50.00")
        assert stats.certification == Certification.HONEYDONT

        # Step 3
        reviews.update_review(db_session, first, locks=locks, numeric_score=Decimal("2.0"))
        assert db_session.get(Review, first).recommendation == Recommendation.DOWN
        stats = reviews.get_title_stats(db_session, 10)
        assert (stats.total_reviews, stats.positive_reviews) == (2, 0)
        assert stats.sweetness_pct == Decimal("0.00")
        assert stats.certification == Certification.HONEYDONT

        # Step 4
        with pytest.raises(ConflictError):
            reviews.add_review(
                db_session, 10, 5, Decimal("9.0"), REVIEW_DATE, scale_id=ten_point, locks=locks
            )
        assert reviews.get_title_stats(db_session, 10) == stats

        # Step 5
        reviews.add_review(
            db_session, 11, 5, Decimal("8.0"), REVIEW_DATE, scale_id=ten_point, locks=locks
        )
        reviews.add_review(
            db_session, 11, 7, Decimal("1.0"), REVIEW_DATE, scale_id=ten_point, locks=locks
        )
        assert on_critic_deleted(db_session, 5, locks) == 2

        stats = reviews.get_title_stats(db_session, 10)
        assert (stats.total_reviews, stats.positive_reviews) == (1, 0)
        stats = reviews.get_title_stats(db_session, 11)
        assert (stats.total_reviews, stats.positive_reviews) == (1, 0)
        with pytest.raises(NotFoundError):
            reviews.get_critic_stats(db_session, 5)

        # Step 6
        fallback = reviews.add_review(db_session, 10, 7, Decimal("1"), REVIEW_DATE, locks=locks)
        stored = db_session.get(Review, fallback)
        assert stored.scale_id == scales["Thumbs"].id
        assert stored.recommendation == Recommendation.UP


@pytest.mark.usefixtures("catalog")
class TestReviewsService:
    """Tests for the individual service functions"""

    def test_stats_reads(self, db_session: Session, scales, locks):
        reviews.add_review(
            db_session, 10, 5, Decimal("7"), REVIEW_DATE,
            scale_id=scales["Ten-point"].id, locks=locks,
        )

        assert reviews.get_critic_stats(db_session, 5).review_count == 1
        outlet = reviews.get_outlet_stats(db_session, 1)
        assert outlet.outlet_id == 1
        assert outlet.sweetness_pct == Decimal("100.00")

    def test_unrated_title(self, db_session: Session):
        """A title without reviews is unrated, not HoneyDont."""
        with pytest.raises(NotFoundError) as exc_info:
            reviews.get_title_stats(db_session, 10)

        assert exc_info.value.entity == "TitleStats"

    def test_delete_review(self, db_session: Session, locks):
        review_id = reviews.add_review(db_session, 10, 5, Decimal("1"), REVIEW_DATE, locks=locks)

        reviews.delete_review(db_session, review_id, locks=locks)

        assert db_session.get(Review, review_id) is None
        with pytest.raises(NotFoundError):
            reviews.get_outlet_stats(db_session, 1)

    def test_update_rejects_recommendation(self, db_session: Session, locks):
        review_id = reviews.add_review(db_session, 10, 5, Decimal("0"), REVIEW_DATE, locks=locks)

        with pytest.raises(ValidationError):
            reviews.update_review(db_session, review_id, locks=locks, recommendation="UP")

    def test_response_schema(self, db_session: Session, locks):
        review_id = reviews.add_review(
            db_session, 10, 5, "1", REVIEW_DATE, url="  https://dp.example.com/r/1 ", locks=locks
        )

        response = ReviewResponse.model_validate(db_session.get(Review, review_id))

        assert response.url == "https://dp.example.com/r/1"
        assert response.recommendation == Recommendation.UP
