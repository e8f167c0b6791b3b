# src/p2p_deal/domain/repository.py
"""DealRepository Protocol: interface contract for persistence layer."""
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_deal.domain.models import Deal


class DealRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, deal: Deal) -> None: ...

    async def get_by_id(self, db: AsyncSession, deal_id: str) -> Deal | None: ...

    async def get_for_update(self, db: AsyncSession, deal_id: str) -> Deal | None: ...

    async def update(self, db: AsyncSession, deal: Deal) -> None: ...

    async def get_live_for_order(
        self, db: AsyncSession, order_id: str, for_update: bool = False
    ) -> Deal | None: ...

    async def latest_by_orders(
        self, db: AsyncSession, order_ids: Iterable[str]
    ) -> dict[str, Deal]:
        """Most recent deal of each order, keyed by order id."""
        ...

    async def list_for_actor(
        self, db: AsyncSession, actor_id: str, order_id: str | None
    ) -> list[Deal]: ...

    async def list_live(self, db: AsyncSession, limit: int) -> list[Deal]: ...
