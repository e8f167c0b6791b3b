"""ReviewApplicationService: review ledger.

A review is accepted only for a completed deal, once per (deal, author).
Each accepted review recomputes the recipient's rating from all reviews
addressed to them, inside the same transaction, with the recipient's actor
row locked so concurrent reviews cannot compute from stale snapshots.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.repository import ActorRepositoryProtocol
from src.p2p_actor.infrastructure.persistence import ActorRepository
from src.p2p_common.datetime_utils import utc_now
from src.p2p_common.errors import (
    DealNotCompletedError,
    DealNotFoundError,
    DuplicateReportError,
    DuplicateReviewError,
    InvalidReportError,
    InvalidReviewError,
    NotDealPartyError,
    ReviewNotFoundError,
)
from src.p2p_common.id_generator import generate_id
from src.p2p_common.locks import KeyedLocks
from src.p2p_deal.domain.repository import DealRepositoryProtocol
from src.p2p_deal.infrastructure.persistence import DealRepository
from src.p2p_review.application.schemas import (
    ReportReviewRequest,
    ReviewOut,
    ReviewStatsOut,
    SubmitReviewRequest,
)
from src.p2p_review.domain.models import Review, ReviewReport, validate_review
from src.p2p_review.domain.repository import ReviewRepositoryProtocol
from src.p2p_review.infrastructure.persistence import ReviewRepository

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 50


class ReviewApplicationService:
    def __init__(
        self,
        repo: ReviewRepositoryProtocol | None = None,
        deal_repo: DealRepositoryProtocol | None = None,
        actor_repo: ActorRepositoryProtocol | None = None,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._repo: ReviewRepositoryProtocol = repo or ReviewRepository()
        self._deals: DealRepositoryProtocol = deal_repo or DealRepository()
        self._actors: ActorRepositoryProtocol = actor_repo or ActorRepository()
        # Keyed by recipient actor id
        self._locks = locks or KeyedLocks()

    async def submit(
        self, db: AsyncSession, from_actor_id: str, req: SubmitReviewRequest
    ) -> ReviewOut:
        comment = validate_review(req.rating, req.comment)

        deal = await self._deals.get_by_id(db, req.deal_id)
        if deal is None:
            raise DealNotFoundError(req.deal_id)
        if not deal.is_party(from_actor_id):
            raise NotDealPartyError(deal.id)
        if not deal.is_completed:
            raise DealNotCompletedError(deal.id, deal.status.value)
        to_actor_id = deal.other_party(from_actor_id)
        if req.to_actor_id is not None and req.to_actor_id != to_actor_id:
            raise InvalidReviewError("to_actor_id must be the other party of the deal")
        if await self._repo.find_by_deal_and_author(db, deal.id, from_actor_id) is not None:
            raise DuplicateReviewError(deal.id)

        review = Review(
            id=generate_id(),
            deal_id=deal.id,
            from_actor_id=from_actor_id,
            to_actor_id=to_actor_id,
            rating=req.rating,
            comment=comment,
            is_anonymous=req.is_anonymous,
            created_at=utc_now(),
        )

        async with self._locks.hold(to_actor_id):
            try:
                await self._actors.lock(db, to_actor_id)
                await self._repo.save(db, review)
                mean, count = await self._repo.rating_summary(db, to_actor_id)
                await self._actors.set_rating(db, to_actor_id, mean, count)
                await db.commit()
            except IntegrityError:
                # uq_reviews_deal_author lost a race
                await db.rollback()
                raise DuplicateReviewError(deal.id) from None
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "review=%s deal=%s rating=%d; actor=%s rating now %.2f over %d reviews",
            review.id, deal.id, review.rating, to_actor_id, mean, count,
        )
        return ReviewOut.from_domain(review)

    async def list_reviews(
        self, db: AsyncSession, actor_id: str, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[ReviewOut]:
        limit = max(1, min(limit, MAX_LIST_LIMIT))
        reviews = await self._repo.list_for_actor(db, actor_id, limit)
        return [ReviewOut.from_domain(r) for r in reviews]

    async def get_stats(self, db: AsyncSession, actor_id: str) -> ReviewStatsOut:
        stats = await self._repo.get_stats(db, actor_id)
        return ReviewStatsOut.from_domain(stats)

    async def report(
        self,
        db: AsyncSession,
        reporter_id: str,
        review_id: str,
        req: ReportReviewRequest,
    ) -> None:
        review = await self._repo.get_by_id(db, review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)
        if review.from_actor_id == reporter_id:
            raise InvalidReportError("cannot report your own review")
        if await self._repo.find_report(db, review_id, reporter_id) is not None:
            raise DuplicateReportError(review_id)

        report = ReviewReport(
            id=generate_id(),
            review_id=review_id,
            reporter_id=reporter_id,
            reason=req.reason,
            comment=req.comment.strip() if req.comment else None,
            created_at=utc_now(),
        )
        try:
            await self._repo.add_report(db, report)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateReportError(review_id) from None
        except Exception:
            await db.rollback()
            raise
        logger.info("review=%s reported by actor=%s: %s", review_id, reporter_id, req.reason.value)
