# src/p2p_review/domain/repository.py
"""ReviewRepository Protocol: interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_review.domain.models import Review, ReviewReport, ReviewStats


class ReviewRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, review: Review) -> None: ...

    async def get_by_id(self, db: AsyncSession, review_id: str) -> Review | None: ...

    async def find_by_deal_and_author(
        self, db: AsyncSession, deal_id: str, from_actor_id: str
    ) -> Review | None: ...

    async def list_for_actor(
        self, db: AsyncSession, actor_id: str, limit: int
    ) -> list[Review]: ...

    async def rating_summary(self, db: AsyncSession, actor_id: str) -> tuple[float, int]:
        """(mean rating, count) over every review addressed to actor_id."""
        ...

    async def get_stats(self, db: AsyncSession, actor_id: str) -> ReviewStats: ...

    async def find_report(
        self, db: AsyncSession, review_id: str, reporter_id: str
    ) -> ReviewReport | None: ...

    async def add_report(self, db: AsyncSession, report: ReviewReport) -> None:
        """Insert the report and bump the review's reported_count."""
        ...
