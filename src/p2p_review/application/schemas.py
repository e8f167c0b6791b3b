"""Pydantic schemas for p2p_review requests and responses.

Anonymous reviews are redacted here, on the way out: `from_actor_id` is
None in every read view, while storage keeps the author.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.p2p_common.enums import ReportReason, ReviewType
from src.p2p_review.domain.models import Review, ReviewStats


class SubmitReviewRequest(BaseModel):
    deal_id: str
    rating: int
    comment: str | None = None
    is_anonymous: bool = False
    # Optional cross-check: must name the other deal party when given
    to_actor_id: str | None = None


class ReportReviewRequest(BaseModel):
    reason: ReportReason
    comment: str | None = Field(None, max_length=500)


class ReviewOut(BaseModel):
    id: str
    deal_id: str
    from_actor_id: str | None
    to_actor_id: str
    rating: int
    review_type: ReviewType
    comment: str | None = None
    is_anonymous: bool
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, review: Review, redact: bool = True) -> "ReviewOut":
        hide = redact and review.is_anonymous
        return cls(
            id=review.id,
            deal_id=review.deal_id,
            from_actor_id=None if hide else review.from_actor_id,
            to_actor_id=review.to_actor_id,
            rating=review.rating,
            review_type=review.review_type,
            comment=review.comment,
            is_anonymous=review.is_anonymous,
            created_at=review.created_at,
        )


class ReviewStatsOut(BaseModel):
    average_rating: float
    total_reviews: int
    positive_percent: float
    rating_distribution: dict[int, int]
    recent_reviews: list[ReviewOut]

    @classmethod
    def from_domain(cls, stats: ReviewStats) -> "ReviewStatsOut":
        return cls(
            average_rating=round(stats.average_rating, 2),
            total_reviews=stats.total_reviews,
            positive_percent=stats.positive_percent,
            rating_distribution=stats.distribution,
            recent_reviews=[ReviewOut.from_domain(r) for r in stats.recent],
        )
