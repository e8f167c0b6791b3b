"""OrderApplicationService: order lifecycle manager.

create / edit / cancel own their transaction (commit on success, rollback
on error). Edit and cancel run under the order's keyed lock and row lock.
list / get are read-only.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.p2p_actor.domain.repository import ActorRepositoryProtocol
from src.p2p_actor.infrastructure.persistence import ActorRepository
from src.p2p_common.datetime_utils import utc_now
from src.p2p_common.enums import OPEN_ORDER_STATUSES, OrderStatus
from src.p2p_common.errors import (
    InvalidOrderError,
    NotOrderOwnerError,
    OrderHasLiveDealError,
    OrderNotCancellableError,
    OrderNotEditableError,
    OrderNotFoundError,
    OrderNotVisibleError,
)
from src.p2p_common.id_generator import generate_id
from src.p2p_common.locks import KeyedLocks, get_order_locks
from src.p2p_deal.domain.repository import DealRepositoryProtocol
from src.p2p_deal.infrastructure.persistence import DealRepository
from src.p2p_order.application.lifecycle import close_order
from src.p2p_order.application.schemas import (
    CreateOrderRequest,
    ListOrdersQuery,
    OrderListOut,
    OrderOut,
    UpdateOrderRequest,
    cursor_decode,
    cursor_encode,
)
from src.p2p_order.domain.models import Order, OrderFilter
from src.p2p_order.domain.repository import OrderRepositoryProtocol
from src.p2p_order.domain.validation import (
    validate_amount_and_price,
    validate_description,
    validate_limits,
    validate_payment_methods,
)
from src.p2p_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderApplicationService:
    def __init__(
        self,
        repo: OrderRepositoryProtocol | None = None,
        deal_repo: DealRepositoryProtocol | None = None,
        actor_repo: ActorRepositoryProtocol | None = None,
        locks: KeyedLocks | None = None,
        allow_cancel_with_live_deal: bool | None = None,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._deals: DealRepositoryProtocol = deal_repo or DealRepository()
        self._actors: ActorRepositoryProtocol = actor_repo or ActorRepository()
        self._locks = locks or get_order_locks()
        self._allow_cancel_with_live_deal = (
            settings.ALLOW_CANCEL_ORDER_WITH_LIVE_DEAL
            if allow_cancel_with_live_deal is None
            else allow_cancel_with_live_deal
        )

    async def create_order(
        self, db: AsyncSession, owner_id: str, req: CreateOrderRequest
    ) -> OrderOut:
        validate_amount_and_price(req.amount, req.price)
        methods = validate_payment_methods(req.payment_methods)
        description = validate_description(req.description)

        now = utc_now()
        order = Order(
            id=generate_id(),
            owner_id=owner_id,
            side=req.side,
            crypto=req.cryptocurrency,
            fiat=req.fiat_currency,
            amount=req.amount,
            price=req.price,
            payment_methods=methods,
            description=description,
            min_amount=req.min_amount,
            max_amount=req.max_amount,
            created_at=now,
            updated_at=now,
        )
        validate_limits(req.min_amount, req.max_amount, order.total_amount)

        try:
            await self._repo.save(db, order)
            await self._actors.adjust_counters(db, owner_id, total_orders=1, active_orders=1)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "order=%s created by actor=%s: %s %s %s/%s @ %s",
            order.id, owner_id, order.side.value, order.amount,
            order.crypto.value, order.fiat.value, order.price,
        )
        return OrderOut.from_domain(order)

    async def edit_order(
        self, db: AsyncSession, actor_id: str, order_id: str, req: UpdateOrderRequest
    ) -> OrderOut:
        async with self._locks.hold(order_id):
            try:
                order = await self._repo.get_for_update(db, order_id)
                if order is None:
                    raise OrderNotFoundError(order_id)
                if order.owner_id != actor_id:
                    raise NotOrderOwnerError(order_id)
                if not order.is_open:
                    raise OrderNotEditableError(order_id, order.status.value)

                self._apply_edit(order, req)
                await self._repo.update(db, order)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info("order=%s edited by owner", order_id)
        return OrderOut.from_domain(order)

    @staticmethod
    def _apply_edit(order: Order, req: UpdateOrderRequest) -> None:
        fields = req.model_fields_set
        amount = req.amount if req.amount is not None else order.amount
        price = req.price if req.price is not None else order.price
        validate_amount_and_price(amount, price)

        if req.payment_methods is not None:
            order.payment_methods = validate_payment_methods(req.payment_methods)
        if "description" in fields:
            order.description = validate_description(req.description)
        if req.side is not None:
            order.side = req.side
        if req.cryptocurrency is not None:
            order.crypto = req.cryptocurrency
        if req.fiat_currency is not None:
            order.fiat = req.fiat_currency

        repriced = amount != order.amount or price != order.price
        order.amount = amount
        order.price = price
        # A repriced order without explicit limits gets limits spanning the new total
        if req.min_amount is not None:
            order.min_amount = req.min_amount
        elif repriced:
            order.min_amount = None
        if req.max_amount is not None:
            order.max_amount = req.max_amount
        elif repriced:
            order.max_amount = None
        order.recompute_totals()
        validate_limits(order.min_amount, order.max_amount, order.total_amount)

    async def cancel_order(self, db: AsyncSession, actor_id: str, order_id: str) -> None:
        async with self._locks.hold(order_id):
            try:
                order = await self._repo.get_for_update(db, order_id)
                if order is None:
                    raise OrderNotFoundError(order_id)
                if order.owner_id != actor_id:
                    raise NotOrderOwnerError(order_id)
                if order.is_terminal:
                    raise OrderNotCancellableError(order_id, order.status.value)

                if order.status == OrderStatus.IN_DEAL:
                    deal = await self._deals.get_live_for_order(db, order.id, for_update=True)
                    if deal is not None:
                        if not self._allow_cancel_with_live_deal:
                            raise OrderHasLiveDealError(order.id, deal.id)
                        deal.cancel(actor_id, "Order cancelled by owner")
                        await self._deals.update(db, deal)
                        logger.info("deal=%s cancelled with its order", deal.id)

                await close_order(db, order, OrderStatus.CANCELLED, self._actors, utc_now())
                await self._repo.update(db, order)
                await db.commit()
            except OrderHasLiveDealError:
                await db.rollback()
                logger.warning("order=%s cancel refused: live deal", order_id)
                raise
            except Exception:
                await db.rollback()
                raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_orders(
        self, db: AsyncSession, caller_id: str | None, query: ListOrdersQuery
    ) -> OrderListOut:
        statuses = frozenset(query.status) if query.status else OPEN_ORDER_STATUSES
        if not statuses <= OPEN_ORDER_STATUSES:
            raise InvalidOrderError("status filter accepts only active and has_responses")
        order_filter = OrderFilter(
            side=query.side,
            crypto=query.cryptocurrency,
            fiat=query.fiat_currency,
            payment_method=query.payment_method,
            min_price=query.min_price,
            max_price=query.max_price,
            owner_id=query.owner_id,
            statuses=statuses,
            include_all_of=caller_id if query.include_inactive else None,
        )
        cursor_ts, cursor_id = cursor_decode(query.cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        orders = await self._repo.list_orders(
            db, order_filter, cursor_ts, cursor_id, query.limit + 1
        )
        has_more = len(orders) > query.limit
        page = orders[: query.limit]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return OrderListOut(
            orders=[OrderOut.from_domain(o) for o in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def get_order(
        self, db: AsyncSession, caller_id: str | None, order_id: str
    ) -> OrderOut:
        order = await self._repo.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if order.is_open or order.owner_id == caller_id:
            return OrderOut.from_domain(order)
        if caller_id is not None:
            deals = await self._deals.list_for_actor(db, caller_id, order_id)
            if deals:
                return OrderOut.from_domain(order)
        raise OrderNotVisibleError(order_id)
