"""DealApplicationService: dual confirmation and cancellation.

Confirm and cancel run under the order's keyed lock and take the Order row
lock before the Deal row lock. Completion updates the Deal, the Order and
both parties' counters in one transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.repository import ActorRepositoryProtocol
from src.p2p_actor.infrastructure.persistence import ActorRepository
from src.p2p_common.datetime_utils import utc_now
from src.p2p_common.enums import OrderStatus
from src.p2p_common.errors import DealNotFoundError, NotDealPartyError, OrderNotFoundError
from src.p2p_common.locks import KeyedLocks, get_order_locks
from src.p2p_deal.application.schemas import ConfirmDealOut, DealOut
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


class DealApplicationService:
    def __init__(
        self,
        repo: DealRepositoryProtocol | None = None,
        order_repo: OrderRepositoryProtocol | None = None,
        response_repo: ResponseRepositoryProtocol | None = None,
        actor_repo: ActorRepositoryProtocol | None = None,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._repo: DealRepositoryProtocol = repo or DealRepository()
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._responses: ResponseRepositoryProtocol = response_repo or ResponseRepository()
        self._actors: ActorRepositoryProtocol = actor_repo or ActorRepository()
        self._locks = locks or get_order_locks()

    async def _party_deal(self, db: AsyncSession, actor_id: str, deal_id: str) -> Deal:
        deal = await self._repo.get_by_id(db, deal_id)
        if deal is None:
            raise DealNotFoundError(deal_id)
        if not deal.is_party(actor_id):
            raise NotDealPartyError(deal_id)
        return deal

    async def _lock_pair(
        self, db: AsyncSession, order_id: str, deal_id: str
    ) -> tuple[Order, Deal]:
        order = await self._orders.get_for_update(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        deal = await self._repo.get_for_update(db, deal_id)
        if deal is None:
            raise DealNotFoundError(deal_id)
        return order, deal

    async def confirm(
        self,
        db: AsyncSession,
        actor_id: str,
        deal_id: str,
        payment_proof: str | None = None,
    ) -> ConfirmDealOut:
        """Idempotent: a repeated confirmation returns the current state unchanged."""
        unlocked = await self._party_deal(db, actor_id, deal_id)

        async with self._locks.hold(unlocked.order_id):
            try:
                order, deal = await self._lock_pair(db, unlocked.order_id, deal_id)
                previous = deal.status
                now = utc_now()
                changed = deal.confirm(actor_id, payment_proof, now)
                if changed:
                    await self._repo.update(db, deal)
                    if deal.is_completed:
                        await close_order(db, order, OrderStatus.COMPLETED, self._actors, now)
                        await self._orders.update(db, order)
                        await self._actors.adjust_counters(db, deal.author_id, completed_deals=1)
                        await self._actors.adjust_counters(
                            db, deal.counterparty_id, completed_deals=1
                        )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        if changed:
            logger.info(
                "deal=%s confirmed by actor=%s: %s→%s",
                deal.id, actor_id, previous.value, deal.status.value,
            )
        return ConfirmDealOut(deal=DealOut.from_domain(deal), deal_completed=deal.is_completed)

    async def cancel(
        self,
        db: AsyncSession,
        actor_id: str,
        deal_id: str,
        reason: str | None = None,
    ) -> DealOut:
        unlocked = await self._party_deal(db, actor_id, deal_id)

        async with self._locks.hold(unlocked.order_id):
            try:
                order, deal = await self._lock_pair(db, unlocked.order_id, deal_id)
                deal.cancel(actor_id, reason.strip() if reason else None)
                await self._repo.update(db, deal)
                if order.status == OrderStatus.IN_DEAL:
                    await reopen_order(db, order, self._responses)
                    await self._orders.update(db, order)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info("deal=%s cancelled by actor=%s", deal.id, actor_id)
        return DealOut.from_domain(deal)

    async def get_deal(self, db: AsyncSession, actor_id: str, deal_id: str) -> DealOut:
        deal = await self._party_deal(db, actor_id, deal_id)
        return DealOut.from_domain(deal)

    async def list_deals(
        self, db: AsyncSession, actor_id: str, order_id: str | None = None
    ) -> list[DealOut]:
        deals = await self._repo.list_for_actor(db, actor_id, order_id)
        return [DealOut.from_domain(d) for d in deals]
