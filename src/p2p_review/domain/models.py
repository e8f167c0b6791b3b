"""Review domain models: pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass, field
from datetime import datetime

from config.settings import settings
from src.p2p_common.enums import ReportReason, ReviewType
from src.p2p_common.errors import InvalidReviewError

MIN_RATING = 1
MAX_RATING = 5
# Ratings at or below this need a comment explaining them
COMMENT_REQUIRED_AT_OR_BELOW = 2


def review_type_for(rating: int) -> ReviewType:
    if rating >= 4:
        return ReviewType.POSITIVE
    if rating == 3:
        return ReviewType.NEUTRAL
    return ReviewType.NEGATIVE


def validate_review(rating: int, comment: str | None) -> str | None:
    """Return the normalized comment; raise InvalidReviewError on bad input."""
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidReviewError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
    comment = comment.strip() if comment else None
    if comment and len(comment) > settings.REVIEW_COMMENT_MAX_LENGTH:
        raise InvalidReviewError(
            f"comment exceeds {settings.REVIEW_COMMENT_MAX_LENGTH} characters"
        )
    if rating <= COMMENT_REQUIRED_AT_OR_BELOW and not comment:
        raise InvalidReviewError(
            f"a comment is required for ratings of {COMMENT_REQUIRED_AT_OR_BELOW} or lower"
        )
    return comment or None


@dataclass
class Review:
    id: str
    deal_id: str
    from_actor_id: str
    to_actor_id: str
    rating: int
    comment: str | None = None
    # Hides from_actor_id in reads only; storage always keeps the author
    is_anonymous: bool = False
    reported_count: int = 0
    created_at: datetime | None = None
    review_type: ReviewType = field(init=False)

    def __post_init__(self) -> None:
        self.review_type = review_type_for(self.rating)


@dataclass
class ReviewReport:
    id: str
    review_id: str
    reporter_id: str
    reason: ReportReason
    comment: str | None = None
    status: str = "pending"
    created_at: datetime | None = None


@dataclass
class ReviewStats:
    average_rating: float = 0.0
    total_reviews: int = 0
    # star -> count, always keyed 1..5
    distribution: dict[int, int] = field(
        default_factory=lambda: {star: 0 for star in range(MIN_RATING, MAX_RATING + 1)}
    )
    recent: list[Review] = field(default_factory=list)

    @property
    def positive_percent(self) -> float:
        if self.total_reviews == 0:
            return 0.0
        positive = self.distribution.get(4, 0) + self.distribution.get(5, 0)
        return round(positive / self.total_reviews * 100, 2)
