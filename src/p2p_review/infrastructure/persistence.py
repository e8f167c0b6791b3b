# src/p2p_review/infrastructure/persistence.py
"""ReviewRepository: raw SQL persistence implementation."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import ReportReason
from src.p2p_review.domain.models import Review, ReviewReport, ReviewStats

RECENT_REVIEWS_IN_STATS = 5

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

# uq_reviews_deal_author rejects a second review of the same deal by the same party
_INSERT_REVIEW_SQL = text("""
    INSERT INTO reviews (id, deal_id, from_actor_id, to_actor_id, rating,
        review_type, comment, is_anonymous, created_at)
    VALUES (:id, :deal_id, :from_actor_id, :to_actor_id, :rating,
        :review_type, :comment, :is_anonymous, :created_at)
""")

_SELECT_COLUMNS = """
    id, deal_id, from_actor_id, to_actor_id, rating, comment,
    is_anonymous, reported_count, created_at
"""

_GET_REVIEW_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM reviews WHERE id = :id
""")

_FIND_BY_DEAL_AND_AUTHOR_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM reviews WHERE deal_id = :deal_id AND from_actor_id = :from_actor_id
""")

_LIST_FOR_ACTOR_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM reviews
    WHERE to_actor_id = :actor_id
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_RATING_SUMMARY_SQL = text("""
    SELECT COALESCE(AVG(rating), 0) AS mean, COUNT(*) AS total
    FROM reviews WHERE to_actor_id = :actor_id
""")

_DISTRIBUTION_SQL = text("""
    SELECT rating, COUNT(*) AS total
    FROM reviews WHERE to_actor_id = :actor_id
    GROUP BY rating
""")

_FIND_REPORT_SQL = text("""
    SELECT id, review_id, reporter_id, reason, comment, status, created_at
    FROM review_reports
    WHERE review_id = :review_id AND reporter_id = :reporter_id
""")

_INSERT_REPORT_SQL = text("""
    INSERT INTO review_reports (id, review_id, reporter_id, reason, comment, status, created_at)
    VALUES (:id, :review_id, :reporter_id, :reason, :comment, :status, :created_at)
""")

_INCREMENT_REPORTED_SQL = text("""
    UPDATE reviews SET reported_count = reported_count + 1 WHERE id = :id
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_review(row: Any) -> Review:
    return Review(
        id=row.id,
        deal_id=row.deal_id,
        from_actor_id=row.from_actor_id,
        to_actor_id=row.to_actor_id,
        rating=row.rating,
        comment=row.comment,
        is_anonymous=row.is_anonymous,
        reported_count=row.reported_count,
        created_at=row.created_at,
    )


def _row_to_report(row: Any) -> ReviewReport:
    return ReviewReport(
        id=row.id,
        review_id=row.review_id,
        reporter_id=row.reporter_id,
        reason=ReportReason(row.reason),
        comment=row.comment,
        status=row.status,
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ReviewRepository:
    """Concrete implementation of ReviewRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, review: Review) -> None:
        await db.execute(
            _INSERT_REVIEW_SQL,
            {
                "id": review.id,
                "deal_id": review.deal_id,
                "from_actor_id": review.from_actor_id,
                "to_actor_id": review.to_actor_id,
                "rating": review.rating,
                "review_type": review.review_type.value,
                "comment": review.comment,
                "is_anonymous": review.is_anonymous,
                "created_at": review.created_at,
            },
        )

    async def get_by_id(self, db: AsyncSession, review_id: str) -> Review | None:
        result = await db.execute(_GET_REVIEW_BY_ID_SQL, {"id": review_id})
        row = result.fetchone()
        return _row_to_review(row) if row else None

    async def find_by_deal_and_author(
        self, db: AsyncSession, deal_id: str, from_actor_id: str
    ) -> Review | None:
        result = await db.execute(
            _FIND_BY_DEAL_AND_AUTHOR_SQL,
            {"deal_id": deal_id, "from_actor_id": from_actor_id},
        )
        row = result.fetchone()
        return _row_to_review(row) if row else None

    async def list_for_actor(
        self, db: AsyncSession, actor_id: str, limit: int
    ) -> list[Review]:
        result = await db.execute(_LIST_FOR_ACTOR_SQL, {"actor_id": actor_id, "limit": limit})
        return [_row_to_review(row) for row in result.fetchall()]

    async def rating_summary(self, db: AsyncSession, actor_id: str) -> tuple[float, int]:
        result = await db.execute(_RATING_SUMMARY_SQL, {"actor_id": actor_id})
        row = result.fetchone()
        return float(row.mean), int(row.total)

    async def get_stats(self, db: AsyncSession, actor_id: str) -> ReviewStats:
        mean, total = await self.rating_summary(db, actor_id)
        stats = ReviewStats(average_rating=mean, total_reviews=total)
        result = await db.execute(_DISTRIBUTION_SQL, {"actor_id": actor_id})
        for row in result.fetchall():
            stats.distribution[int(row.rating)] = int(row.total)
        stats.recent = await self.list_for_actor(db, actor_id, RECENT_REVIEWS_IN_STATS)
        return stats

    async def find_report(
        self, db: AsyncSession, review_id: str, reporter_id: str
    ) -> ReviewReport | None:
        result = await db.execute(
            _FIND_REPORT_SQL, {"review_id": review_id, "reporter_id": reporter_id}
        )
        row = result.fetchone()
        return _row_to_report(row) if row else None

    async def add_report(self, db: AsyncSession, report: ReviewReport) -> None:
        await db.execute(
            _INSERT_REPORT_SQL,
            {
                "id": report.id,
                "review_id": report.review_id,
                "reporter_id": report.reporter_id,
                "reason": report.reason.value,
                "comment": report.comment,
                "status": report.status,
                "created_at": report.created_at,
            },
        )
        await db.execute(_INCREMENT_REPORTED_SQL, {"id": report.review_id})
