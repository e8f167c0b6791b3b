# src/p2p_deal/infrastructure/persistence.py
"""DealRepository: raw SQL persistence implementation."""
from collections.abc import Iterable
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import DealStatus, PaymentMethod
from src.p2p_deal.domain.models import Deal

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

# uq_deals_live_order (partial unique index) rejects a second live deal per order
_INSERT_DEAL_SQL = text("""
    INSERT INTO deals (id, order_id, response_id, author_id, counterparty_id,
        amount, price, total_amount, payment_methods, status,
        author_confirmed, counterparty_confirmed, created_at)
    VALUES (:id, :order_id, :response_id, :author_id, :counterparty_id,
        :amount, :price, :total_amount, :payment_methods, :status,
        FALSE, FALSE, :created_at)
""")

# Confirmation flags only ever go FALSE -> TRUE
_UPDATE_DEAL_SQL = text("""
    UPDATE deals
    SET status = :status,
        author_confirmed = author_confirmed OR :author_confirmed,
        counterparty_confirmed = counterparty_confirmed OR :counterparty_confirmed,
        author_proof = :author_proof,
        counterparty_proof = :counterparty_proof,
        cancelled_by = :cancelled_by,
        cancel_reason = :cancel_reason,
        completed_at = :completed_at
    WHERE id = :id
""")

_SELECT_COLUMNS = """
    id, order_id, response_id, author_id, counterparty_id,
    amount, price, total_amount, payment_methods, status,
    author_confirmed, counterparty_confirmed, author_proof, counterparty_proof,
    cancelled_by, cancel_reason, created_at, updated_at, completed_at
"""

_GET_DEAL_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM deals WHERE id = :id
""")

_GET_DEAL_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM deals WHERE id = :id
    FOR UPDATE
""")

_GET_LIVE_DEAL_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM deals
    WHERE order_id = :order_id AND status IN ('in_progress', 'waiting_payment')
""")

_GET_LIVE_DEAL_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM deals
    WHERE order_id = :order_id AND status IN ('in_progress', 'waiting_payment')
    FOR UPDATE
""")

_LATEST_BY_ORDERS_SQL = text(f"""
    SELECT DISTINCT ON (order_id) {_SELECT_COLUMNS}
    FROM deals
    WHERE order_id = ANY(string_to_array(CAST(:ids_csv AS TEXT), ','))
    ORDER BY order_id, created_at DESC, id DESC
""")

_LIST_FOR_ACTOR_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM deals
    WHERE (author_id = :actor_id OR counterparty_id = :actor_id)
      AND (CAST(:order_id AS TEXT) IS NULL OR order_id = CAST(:order_id AS TEXT))
    ORDER BY created_at DESC, id DESC
""")

_LIST_LIVE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM deals
    WHERE status IN ('in_progress', 'waiting_payment')
    ORDER BY created_at
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_deal(row: Any) -> Deal:
    deal = Deal(
        id=row.id,
        order_id=row.order_id,
        response_id=row.response_id,
        author_id=row.author_id,
        counterparty_id=row.counterparty_id,
        amount=row.amount,
        price=row.price,
        payment_methods=[PaymentMethod(m) for m in row.payment_methods],
        status=DealStatus(row.status),
        author_confirmed=row.author_confirmed,
        counterparty_confirmed=row.counterparty_confirmed,
        author_proof=row.author_proof,
        counterparty_proof=row.counterparty_proof,
        cancelled_by=row.cancelled_by,
        cancel_reason=row.cancel_reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
        completed_at=row.completed_at,
    )
    deal.total_amount = row.total_amount
    return deal


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class DealRepository:
    """Concrete implementation of DealRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, deal: Deal) -> None:
        await db.execute(
            _INSERT_DEAL_SQL,
            {
                "id": deal.id,
                "order_id": deal.order_id,
                "response_id": deal.response_id,
                "author_id": deal.author_id,
                "counterparty_id": deal.counterparty_id,
                "amount": deal.amount,
                "price": deal.price,
                "total_amount": deal.total_amount,
                "payment_methods": [m.value for m in deal.payment_methods],
                "status": deal.status.value,
                "created_at": deal.created_at,
            },
        )

    async def get_by_id(self, db: AsyncSession, deal_id: str) -> Deal | None:
        result = await db.execute(_GET_DEAL_BY_ID_SQL, {"id": deal_id})
        row = result.fetchone()
        return _row_to_deal(row) if row else None

    async def get_for_update(self, db: AsyncSession, deal_id: str) -> Deal | None:
        result = await db.execute(_GET_DEAL_FOR_UPDATE_SQL, {"id": deal_id})
        row = result.fetchone()
        return _row_to_deal(row) if row else None

    async def update(self, db: AsyncSession, deal: Deal) -> None:
        await db.execute(
            _UPDATE_DEAL_SQL,
            {
                "id": deal.id,
                "status": deal.status.value,
                "author_confirmed": deal.author_confirmed,
                "counterparty_confirmed": deal.counterparty_confirmed,
                "author_proof": deal.author_proof,
                "counterparty_proof": deal.counterparty_proof,
                "cancelled_by": deal.cancelled_by,
                "cancel_reason": deal.cancel_reason,
                "completed_at": deal.completed_at,
            },
        )

    async def get_live_for_order(
        self, db: AsyncSession, order_id: str, for_update: bool = False
    ) -> Deal | None:
        stmt = _GET_LIVE_DEAL_FOR_UPDATE_SQL if for_update else _GET_LIVE_DEAL_SQL
        result = await db.execute(stmt, {"order_id": order_id})
        row = result.fetchone()
        return _row_to_deal(row) if row else None

    async def latest_by_orders(
        self, db: AsyncSession, order_ids: Iterable[str]
    ) -> dict[str, Deal]:
        ids = sorted(set(order_ids))
        if not ids:
            return {}
        result = await db.execute(_LATEST_BY_ORDERS_SQL, {"ids_csv": ",".join(ids)})
        return {row.order_id: _row_to_deal(row) for row in result.fetchall()}

    async def list_for_actor(
        self, db: AsyncSession, actor_id: str, order_id: str | None
    ) -> list[Deal]:
        result = await db.execute(
            _LIST_FOR_ACTOR_SQL, {"actor_id": actor_id, "order_id": order_id}
        )
        return [_row_to_deal(row) for row in result.fetchall()]

    async def list_live(self, db: AsyncSession, limit: int) -> list[Deal]:
        result = await db.execute(_LIST_LIVE_SQL, {"limit": limit})
        return [_row_to_deal(row) for row in result.fetchall()]
