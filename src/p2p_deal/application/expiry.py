"""Expiry extension point.

`expired` exists on Order and Deal, but nothing in the engine decides when
something expires. A deployment that wants expiry supplies an ExpiryPolicy
and runs ExpirySweeper.sweep() from its own scheduler; the default policy
never expires anything.

A swept Deal releases its Order the same way a cancelled Deal does. An
Order bound to a live Deal is skipped until that Deal is gone.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.repository import ActorRepositoryProtocol
from src.p2p_actor.infrastructure.persistence import ActorRepository
from src.p2p_common.datetime_utils import utc_now
from src.p2p_common.enums import DealStatus, OrderStatus
from src.p2p_common.locks import KeyedLocks, get_order_locks
from src.p2p_deal.domain.models import Deal
from src.p2p_deal.domain.repository import DealRepositoryProtocol
from src.p2p_deal.infrastructure.persistence import DealRepository
from src.p2p_order.application.lifecycle import close_order, reopen_order
from src.p2p_order.domain.models import Order
from src.p2p_order.domain.repository import OrderRepositoryProtocol
from src.p2p_order.infrastructure.persistence import OrderRepository
from src.p2p_response.domain.repository import ResponseRepositoryProtocol
from src.p2p_response.infrastructure.persistence import ResponseRepository

logger = logging.getLogger(__name__)


class ExpiryPolicy(Protocol):
    def order_expired(self, order: Order, now: datetime) -> bool: ...

    def deal_expired(self, deal: Deal, now: datetime) -> bool: ...


class NoExpiryPolicy:
    def order_expired(self, order: Order, now: datetime) -> bool:
        return False

    def deal_expired(self, deal: Deal, now: datetime) -> bool:
        return False


@dataclass
class SweepResult:
    deals_expired: int = 0
    orders_expired: int = 0


class ExpirySweeper:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        deal_repo: DealRepositoryProtocol | None = None,
        response_repo: ResponseRepositoryProtocol | None = None,
        actor_repo: ActorRepositoryProtocol | None = None,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._deals: DealRepositoryProtocol = deal_repo or DealRepository()
        self._responses: ResponseRepositoryProtocol = response_repo or ResponseRepository()
        self._actors: ActorRepositoryProtocol = actor_repo or ActorRepository()
        self._locks = locks or get_order_locks()

    async def sweep(
        self,
        db: AsyncSession,
        policy: ExpiryPolicy | None = None,
        now: datetime | None = None,
        batch_size: int = 500,
    ) -> SweepResult:
        policy = policy or NoExpiryPolicy()
        now = now or utc_now()
        result = SweepResult()

        for deal in await self._deals.list_live(db, batch_size):
            if policy.deal_expired(deal, now) and await self._expire_deal(db, deal):
                result.deals_expired += 1

        for order in await self._orders.list_non_terminal(db, batch_size):
            if policy.order_expired(order, now) and await self._expire_order(db, order.id, now):
                result.orders_expired += 1

        if result.deals_expired or result.orders_expired:
            logger.info(
                "Expiry sweep: %d deals, %d orders expired",
                result.deals_expired, result.orders_expired,
            )
        return result

    async def _expire_deal(self, db: AsyncSession, candidate: Deal) -> bool:
        async with self._locks.hold(candidate.order_id):
            try:
                order = await self._orders.get_for_update(db, candidate.order_id)
                deal = await self._deals.get_for_update(db, candidate.id)
                # Re-checked under the lock: a party may have finished it meanwhile
                if deal is None or not deal.is_live:
                    await db.rollback()
                    return False
                deal.move_to(DealStatus.EXPIRED)
                await self._deals.update(db, deal)
                if order is not None and order.status == OrderStatus.IN_DEAL:
                    await reopen_order(db, order, self._responses)
                    await self._orders.update(db, order)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info("deal=%s expired", candidate.id)
        return True

    async def _expire_order(self, db: AsyncSession, order_id: str, now: datetime) -> bool:
        async with self._locks.hold(order_id):
            try:
                order = await self._orders.get_for_update(db, order_id)
                if order is None or order.is_terminal:
                    await db.rollback()
                    return False
                if order.status == OrderStatus.IN_DEAL:
                    live = await self._deals.get_live_for_order(db, order_id, for_update=True)
                    if live is not None:
                        await db.rollback()
                        return False
                await close_order(db, order, OrderStatus.EXPIRED, self._actors, now)
                await self._orders.update(db, order)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        return True
