# src/p2p_order/infrastructure/persistence.py
"""OrderRepository: raw SQL persistence implementation."""
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import (
    CryptoCurrency,
    FiatCurrency,
    OrderSide,
    OrderStatus,
    PaymentMethod,
)
from src.p2p_order.domain.models import Order, OrderFilter

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, owner_id, side, crypto, fiat,
        amount, price, total_amount, min_amount, max_amount,
        payment_methods, description, status, response_count, created_at)
    VALUES (:id, :owner_id, :side, :crypto, :fiat,
        :amount, :price, :total_amount, :min_amount, :max_amount,
        :payment_methods, :description, :status, 0, :created_at)
""")

_UPDATE_ORDER_SQL = text("""
    UPDATE orders
    SET side = :side, crypto = :crypto, fiat = :fiat,
        amount = :amount, price = :price, total_amount = :total_amount,
        min_amount = :min_amount, max_amount = :max_amount,
        payment_methods = :payment_methods, description = :description,
        status = :status, response_count = :response_count,
        accepted_response_id = :accepted_response_id,
        completed_at = :completed_at
    WHERE id = :id
""")

_SELECT_COLUMNS = """
    id, owner_id, side, crypto, fiat,
    amount, price, total_amount, min_amount, max_amount,
    payment_methods, description, status, response_count, accepted_response_id,
    created_at, updated_at, completed_at
"""

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
""")

_GET_ORDER_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
    FOR UPDATE
""")

_GET_ORDERS_BY_IDS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE id = ANY(string_to_array(CAST(:ids_csv AS TEXT), ','))
""")

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE (
            status = ANY(string_to_array(CAST(:statuses_csv AS TEXT), ','))
            OR owner_id = CAST(:include_all_of AS TEXT)
        )
      AND (CAST(:side AS TEXT) IS NULL OR side = CAST(:side AS TEXT))
      AND (CAST(:crypto AS TEXT) IS NULL OR crypto = CAST(:crypto AS TEXT))
      AND (CAST(:fiat AS TEXT) IS NULL OR fiat = CAST(:fiat AS TEXT))
      AND (CAST(:owner_id AS TEXT) IS NULL OR owner_id = CAST(:owner_id AS TEXT))
      AND (CAST(:payment_method AS TEXT) IS NULL
           OR CAST(:payment_method AS TEXT) = ANY(payment_methods))
      AND (CAST(:min_price AS NUMERIC) IS NULL OR price >= CAST(:min_price AS NUMERIC))
      AND (CAST(:max_price AS NUMERIC) IS NULL OR price <= CAST(:max_price AS NUMERIC))
      AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_NON_TERMINAL_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE status IN ('active', 'has_responses', 'in_deal')
    ORDER BY created_at
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    order = Order(
        id=row.id,
        owner_id=row.owner_id,
        side=OrderSide(row.side),
        crypto=CryptoCurrency(row.crypto),
        fiat=FiatCurrency(row.fiat),
        amount=row.amount,
        price=row.price,
        payment_methods=[PaymentMethod(m) for m in row.payment_methods],
        description=row.description,
        min_amount=row.min_amount,
        max_amount=row.max_amount,
        status=OrderStatus(row.status),
        response_count=row.response_count,
        accepted_response_id=row.accepted_response_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        completed_at=row.completed_at,
    )
    # Stored total wins over the recomputed one
    order.total_amount = row.total_amount
    return order


def _order_params(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "owner_id": order.owner_id,
        "side": order.side.value,
        "crypto": order.crypto.value,
        "fiat": order.fiat.value,
        "amount": order.amount,
        "price": order.price,
        "total_amount": order.total_amount,
        "min_amount": order.min_amount,
        "max_amount": order.max_amount,
        "payment_methods": [m.value for m in order.payment_methods],
        "description": order.description,
        "status": order.status.value,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, order: Order) -> None:
        params = _order_params(order)
        params["created_at"] = order.created_at
        await db.execute(_INSERT_ORDER_SQL, params)

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def get_for_update(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_FOR_UPDATE_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def update(self, db: AsyncSession, order: Order) -> None:
        params = _order_params(order)
        params.pop("owner_id")
        params.update(
            {
                "response_count": order.response_count,
                "accepted_response_id": order.accepted_response_id,
                "completed_at": order.completed_at,
            }
        )
        await db.execute(_UPDATE_ORDER_SQL, params)

    async def get_many(
        self, db: AsyncSession, order_ids: Iterable[str]
    ) -> dict[str, Order]:
        ids = sorted(set(order_ids))
        if not ids:
            return {}
        result = await db.execute(_GET_ORDERS_BY_IDS_SQL, {"ids_csv": ",".join(ids)})
        return {row.id: _row_to_order(row) for row in result.fetchall()}

    async def list_orders(
        self,
        db: AsyncSession,
        order_filter: OrderFilter,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        f = order_filter
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {
                "statuses_csv": ",".join(sorted(s.value for s in f.statuses)),
                "include_all_of": f.include_all_of,
                "side": f.side.value if f.side else None,
                "crypto": f.crypto.value if f.crypto else None,
                "fiat": f.fiat.value if f.fiat else None,
                "owner_id": f.owner_id,
                "payment_method": f.payment_method.value if f.payment_method else None,
                "min_price": f.min_price,
                "max_price": f.max_price,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_non_terminal(self, db: AsyncSession, limit: int) -> list[Order]:
        result = await db.execute(_LIST_NON_TERMINAL_SQL, {"limit": limit})
        return [_row_to_order(row) for row in result.fetchall()]
