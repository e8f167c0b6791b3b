"""Tests for review validation, rating classification and stats."""

import pytest

from src.p2p_common.enums import ReviewType
from src.p2p_common.errors import InvalidReviewError
from src.p2p_review.domain.models import Review, ReviewStats, review_type_for, validate_review


class TestReviewType:
    @pytest.mark.parametrize(
        "rating,expected",
        [
            (5, ReviewType.POSITIVE),
            (4, ReviewType.POSITIVE),
            (3, ReviewType.NEUTRAL),
            (2, ReviewType.NEGATIVE),
            (1, ReviewType.NEGATIVE),
        ],
    )
    def test_classification(self, rating: int, expected: ReviewType) -> None:
        assert review_type_for(rating) == expected

    def test_review_derives_type(self) -> None:
        review = Review(id="R1", deal_id="D1", from_actor_id="a", to_actor_id="b", rating=3)
        assert review.review_type == ReviewType.NEUTRAL


class TestValidateReview:
    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range(self, rating: int) -> None:
        with pytest.raises(InvalidReviewError):
            validate_review(rating, "ok")

    def test_low_rating_requires_comment(self) -> None:
        with pytest.raises(InvalidReviewError):
            validate_review(2, None)
        with pytest.raises(InvalidReviewError):
            validate_review(1, "   ")

    def test_high_rating_comment_optional(self) -> None:
        assert validate_review(5, None) is None

    def test_comment_trimmed(self) -> None:
        assert validate_review(2, "  slow payment ") == "slow payment"

    def test_comment_too_long(self) -> None:
        with pytest.raises(InvalidReviewError):
            validate_review(5, "x" * 501)


class TestReviewStats:
    def test_empty(self) -> None:
        stats = ReviewStats()
        assert stats.distribution == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
        assert stats.positive_percent == 0.0

    def test_positive_percent(self) -> None:
        stats = ReviewStats(total_reviews=3, distribution={1: 1, 2: 0, 3: 0, 4: 1, 5: 1})
        assert stats.positive_percent == 66.67
