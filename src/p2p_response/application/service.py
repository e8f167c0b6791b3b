"""ResponseApplicationService: the Response registry.

The only writer that may create a Deal. Every mutation runs under the
order's keyed lock, then takes the Order row lock before any Response or
Deal row lock (lock order: Order → Response → Deal). The service owns the
transaction: commit on success, rollback on any error.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.p2p_common.datetime_utils import utc_now
from src.p2p_common.enums import OrderStatus, ResponseStatus
from src.p2p_common.errors import (
    DuplicateResponseError,
    InvalidResponseError,
    NotOrderOwnerError,
    OrderAlreadyInDealError,
    OrderNotFoundError,
    OrderNotOpenError,
    ResponseAlreadyProcessedError,
    ResponseNotFoundError,
    SelfResponseError,
)
from src.p2p_common.id_generator import generate_id
from src.p2p_common.locks import KeyedLocks, get_order_locks
from src.p2p_deal.application.schemas import DealOut
from src.p2p_deal.domain.models import Deal
from src.p2p_deal.domain.repository import DealRepositoryProtocol
from src.p2p_deal.infrastructure.persistence import DealRepository
from src.p2p_order.domain.models import Order
from src.p2p_order.domain.repository import OrderRepositoryProtocol
from src.p2p_order.infrastructure.persistence import OrderRepository
from src.p2p_response.application.schemas import ResponseOut, SubmitResponseRequest
from src.p2p_response.domain.models import Response
from src.p2p_response.domain.repository import ResponseRepositoryProtocol
from src.p2p_response.infrastructure.persistence import ResponseRepository

logger = logging.getLogger(__name__)

SIBLING_REJECT_REASON = "Another response was accepted"


class ResponseApplicationService:
    def __init__(
        self,
        repo: ResponseRepositoryProtocol | None = None,
        order_repo: OrderRepositoryProtocol | None = None,
        deal_repo: DealRepositoryProtocol | None = None,
        locks: KeyedLocks | None = None,
        auto_reject_siblings: bool | None = None,
    ) -> None:
        self._repo: ResponseRepositoryProtocol = repo or ResponseRepository()
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._deals: DealRepositoryProtocol = deal_repo or DealRepository()
        self._locks = locks or get_order_locks()
        self._auto_reject_siblings = (
            settings.AUTO_REJECT_SIBLING_RESPONSES
            if auto_reject_siblings is None
            else auto_reject_siblings
        )

    async def _locked_order(self, db: AsyncSession, order_id: str) -> Order:
        order = await self._orders.get_for_update(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def _load_response(self, db: AsyncSession, response_id: str) -> Response:
        response = await self._repo.get_by_id(db, response_id)
        if response is None:
            raise ResponseNotFoundError(response_id)
        return response

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def submit(
        self, db: AsyncSession, responder_id: str, req: SubmitResponseRequest
    ) -> ResponseOut:
        message = req.message.strip() if req.message else None
        if message and len(message) > settings.RESPONSE_MESSAGE_MAX_LENGTH:
            raise InvalidResponseError(
                f"message exceeds {settings.RESPONSE_MESSAGE_MAX_LENGTH} characters"
            )

        async with self._locks.hold(req.order_id):
            try:
                order = await self._locked_order(db, req.order_id)
                if order.owner_id == responder_id:
                    raise SelfResponseError()
                if not order.is_open:
                    raise OrderNotOpenError(order.id, order.status.value)
                if await self._repo.find_waiting(db, order.id, responder_id) is not None:
                    raise DuplicateResponseError(order.id)

                response = Response(
                    id=generate_id(),
                    order_id=order.id,
                    responder_id=responder_id,
                    message=message or None,
                    created_at=utc_now(),
                )
                await self._repo.save(db, response)

                order.response_count += 1
                if order.status == OrderStatus.ACTIVE:
                    order.move_to(OrderStatus.HAS_RESPONSES)
                    logger.info("order=%s active→has_responses", order.id)
                await self._orders.update(db, order)
                await db.commit()
            except IntegrityError:
                # uq_responses_waiting lost a cross-process race
                await db.rollback()
                raise DuplicateResponseError(req.order_id) from None
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "response=%s submitted by actor=%s on order=%s",
            response.id, responder_id, order.id,
        )
        return ResponseOut.from_domain(response)

    async def accept(
        self, db: AsyncSession, owner_id: str, response_id: str
    ) -> DealOut:
        """Response→accepted, Order→in_deal and a new Deal, in one transaction."""
        unlocked = await self._load_response(db, response_id)

        async with self._locks.hold(unlocked.order_id):
            try:
                order = await self._locked_order(db, unlocked.order_id)
                if order.owner_id != owner_id:
                    raise NotOrderOwnerError(order.id)
                response = await self._repo.get_for_update(db, response_id)
                if response is None:
                    raise ResponseNotFoundError(response_id)
                if not response.is_waiting:
                    raise ResponseAlreadyProcessedError(response.id, response.status.value)
                if not order.is_open:
                    raise OrderAlreadyInDealError(order.id, order.status.value)
                live = await self._deals.get_live_for_order(db, order.id, for_update=True)
                if live is not None:
                    raise OrderAlreadyInDealError(order.id, order.status.value)

                now = utc_now()
                response.move_to(ResponseStatus.ACCEPTED, now)
                previous = order.status
                order.move_to(OrderStatus.IN_DEAL)
                order.accepted_response_id = response.id
                deal = Deal(
                    id=generate_id(),
                    order_id=order.id,
                    response_id=response.id,
                    author_id=order.owner_id,
                    counterparty_id=response.responder_id,
                    amount=order.amount,
                    price=order.price,
                    payment_methods=list(order.payment_methods),
                    created_at=now,
                )
                await self._repo.update(db, response)
                await self._orders.update(db, order)
                await self._deals.save(db, deal)

                rejected = 0
                if self._auto_reject_siblings:
                    rejected = await self._reject_siblings(db, order.id, response.id, now)
                await db.commit()
            except IntegrityError:
                # uq_deals_live_order lost a cross-process race
                await db.rollback()
                raise OrderAlreadyInDealError(
                    unlocked.order_id, OrderStatus.IN_DEAL.value
                ) from None
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "order=%s %s→in_deal; response=%s accepted; deal=%s created (siblings rejected=%d)",
            order.id, previous.value, response.id, deal.id, rejected,
        )
        return DealOut.from_domain(deal)

    async def _reject_siblings(
        self, db: AsyncSession, order_id: str, accepted_id: str, now: datetime
    ) -> int:
        siblings = await self._repo.list_waiting_for_update(db, order_id)
        count = 0
        for sibling in siblings:
            if sibling.id == accepted_id:
                continue
            sibling.move_to(ResponseStatus.REJECTED, now)
            sibling.reject_reason = SIBLING_REJECT_REASON
            await self._repo.update(db, sibling)
            count += 1
        return count

    async def reject(
        self,
        db: AsyncSession,
        owner_id: str,
        response_id: str,
        reason: str | None = None,
    ) -> ResponseOut:
        unlocked = await self._load_response(db, response_id)

        async with self._locks.hold(unlocked.order_id):
            try:
                order = await self._locked_order(db, unlocked.order_id)
                if order.owner_id != owner_id:
                    raise NotOrderOwnerError(order.id)
                response = await self._repo.get_for_update(db, response_id)
                if response is None:
                    raise ResponseNotFoundError(response_id)
                if not response.is_waiting:
                    raise ResponseAlreadyProcessedError(response.id, response.status.value)
                if not order.is_open:
                    raise OrderNotOpenError(order.id, order.status.value)

                response.move_to(ResponseStatus.REJECTED, utc_now())
                response.reject_reason = reason.strip() if reason else None
                await self._repo.update(db, response)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info("response=%s rejected on order=%s", response.id, order.id)
        return ResponseOut.from_domain(response)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_for_order(
        self, db: AsyncSession, actor_id: str, order_id: str
    ) -> list[ResponseOut]:
        order = await self._orders.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if order.owner_id != actor_id:
            raise NotOrderOwnerError(order_id)
        responses = await self._repo.list_by_order(db, order_id)
        return [ResponseOut.from_domain(r) for r in responses]
