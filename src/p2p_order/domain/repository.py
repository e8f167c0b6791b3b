# src/p2p_order/domain/repository.py
"""OrderRepository Protocol: interface contract for persistence layer."""
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_order.domain.models import Order, OrderFilter


class OrderRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, order: Order) -> None: ...

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def get_for_update(self, db: AsyncSession, order_id: str) -> Order | None:
        """SELECT ... FOR UPDATE; held until the caller's transaction ends."""
        ...

    async def update(self, db: AsyncSession, order: Order) -> None: ...

    async def get_many(
        self, db: AsyncSession, order_ids: Iterable[str]
    ) -> dict[str, Order]: ...

    async def list_orders(
        self,
        db: AsyncSession,
        order_filter: OrderFilter,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]: ...

    async def list_non_terminal(self, db: AsyncSession, limit: int) -> list[Order]: ...
