"""ReconciliationService: per-actor Response views.

Read-only; no commit/rollback and no row locks. Every call reloads the
responses, their orders and the latest deal of each order from the
database, then applies the pure visibility rules in p2p_reconcile.domain.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_deal.domain.models import Deal
from src.p2p_deal.domain.repository import DealRepositoryProtocol
from src.p2p_deal.infrastructure.persistence import DealRepository
from src.p2p_order.domain.models import Order
from src.p2p_order.domain.repository import OrderRepositoryProtocol
from src.p2p_order.infrastructure.persistence import OrderRepository
from src.p2p_reconcile.domain.filters import (
    reconcile_my_responses,
    reconcile_responses_to_me,
)
from src.p2p_reconcile.domain.models import ReconciledResponse
from src.p2p_response.domain.models import Response
from src.p2p_response.domain.repository import ResponseRepositoryProtocol
from src.p2p_response.infrastructure.persistence import ResponseRepository


class ReconciliationService:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        response_repo: ResponseRepositoryProtocol | None = None,
        deal_repo: DealRepositoryProtocol | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._responses: ResponseRepositoryProtocol = response_repo or ResponseRepository()
        self._deals: DealRepositoryProtocol = deal_repo or DealRepository()

    async def _snapshot(
        self, db: AsyncSession, responses: list[Response]
    ) -> tuple[dict[str, Order], dict[str, Deal]]:
        order_ids = {r.order_id for r in responses}
        orders = await self._orders.get_many(db, order_ids)
        deals = await self._deals.latest_by_orders(db, order_ids)
        return orders, deals

    async def my_responses(
        self, db: AsyncSession, actor_id: str
    ) -> list[ReconciledResponse]:
        responses = await self._responses.list_by_responder(db, actor_id)
        orders, deals = await self._snapshot(db, responses)
        return reconcile_my_responses(actor_id, responses, orders, deals)

    async def responses_to_me(
        self, db: AsyncSession, actor_id: str
    ) -> list[ReconciledResponse]:
        responses = await self._responses.list_for_owner(db, actor_id)
        orders, deals = await self._snapshot(db, responses)
        return reconcile_responses_to_me(actor_id, responses, orders, deals)
