# src/p2p_actor/domain/repository.py
"""ActorRepository Protocol: interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.models import Actor, ActorActivity


class ActorRepositoryProtocol(Protocol):
    async def ensure_exists(self, db: AsyncSession, actor_id: str) -> Actor: ...

    async def get_by_id(self, db: AsyncSession, actor_id: str) -> Actor | None: ...

    async def adjust_counters(
        self,
        db: AsyncSession,
        actor_id: str,
        total_orders: int = 0,
        active_orders: int = 0,
        completed_deals: int = 0,
    ) -> None: ...

    async def set_rating(
        self, db: AsyncSession, actor_id: str, rating: float, review_count: int
    ) -> None: ...

    async def lock(self, db: AsyncSession, actor_id: str) -> None:
        """SELECT ... FOR UPDATE on the actor row, serializing rating recomputes."""
        ...

    async def get_activity(self, db: AsyncSession, actor_id: str) -> ActorActivity: ...
