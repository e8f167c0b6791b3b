"""Order status side effects shared by every service that moves an Order.

Callers hold the order's keyed lock and its row lock, and own the commit.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.repository import ActorRepositoryProtocol
from src.p2p_common.enums import OrderStatus
from src.p2p_order.domain.models import Order
from src.p2p_response.domain.repository import ResponseRepositoryProtocol

logger = logging.getLogger(__name__)


async def close_order(
    db: AsyncSession,
    order: Order,
    target: OrderStatus,
    actor_repo: ActorRepositoryProtocol,
    now: datetime,
) -> None:
    """Move the order to a terminal status and free the owner's active slot."""
    previous = order.status
    order.move_to(target)
    if target == OrderStatus.COMPLETED:
        order.completed_at = now
    await actor_repo.adjust_counters(db, order.owner_id, active_orders=-1)
    logger.info("order=%s %s→%s", order.id, previous.value, target.value)


async def reopen_order(
    db: AsyncSession,
    order: Order,
    response_repo: ResponseRepositoryProtocol,
) -> None:
    """Release an in_deal order after its deal was cancelled."""
    waiting = await response_repo.count_waiting(db, order.id)
    target = OrderStatus.HAS_RESPONSES if waiting else OrderStatus.ACTIVE
    previous = order.status
    order.move_to(target)
    order.accepted_response_id = None
    logger.info("order=%s %s→%s (waiting=%d)", order.id, previous.value, target.value, waiting)
