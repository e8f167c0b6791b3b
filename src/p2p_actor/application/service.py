"""ActorApplicationService: profile and stats reads.

Read-only; no commit/rollback needed. Stats are aggregated from the
authoritative order, deal and review rows on every call.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.application.schemas import ActorOut, ActorStatsOut, ProfileOut
from src.p2p_actor.domain.repository import ActorRepositoryProtocol
from src.p2p_actor.infrastructure.persistence import ActorRepository
from src.p2p_common.errors import ActorNotFoundError
from src.p2p_review.domain.repository import ReviewRepositoryProtocol
from src.p2p_review.infrastructure.persistence import ReviewRepository


class ActorApplicationService:
    def __init__(
        self,
        repo: ActorRepositoryProtocol | None = None,
        review_repo: ReviewRepositoryProtocol | None = None,
    ) -> None:
        self._repo: ActorRepositoryProtocol = repo or ActorRepository()
        self._review_repo: ReviewRepositoryProtocol = review_repo or ReviewRepository()

    async def get_profile(self, db: AsyncSession, actor_id: str) -> ProfileOut:
        actor = await self._repo.get_by_id(db, actor_id)
        if actor is None:
            raise ActorNotFoundError(actor_id)
        activity = await self._repo.get_activity(db, actor_id)
        review_stats = await self._review_repo.get_stats(db, actor_id)
        return ProfileOut(
            user=ActorOut.from_domain(actor),
            stats=ActorStatsOut.from_domain(activity, review_stats),
        )
