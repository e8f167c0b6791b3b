"""Pydantic schemas for p2p_order requests and responses.

Cursor format for orders (snowflake PK, listed newest first):
  {"ts": "<created_at ISO>", "id": "<order_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import json
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.p2p_common.enums import (
    CryptoCurrency,
    FiatCurrency,
    OrderSide,
    OrderStatus,
    PaymentMethod,
)
from src.p2p_order.domain.models import Order

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_order: Order) -> str:
    payload = {
        "ts": last_order.created_at.isoformat() if last_order.created_at else None,
        "id": last_order.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime | None, str | None]:
    """Decode composite cursor -> (created_at, order_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(data["ts"]), str(data["id"])
    except (ValueError, KeyError, TypeError):
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateOrderRequest(BaseModel):
    side: OrderSide
    cryptocurrency: CryptoCurrency
    fiat_currency: FiatCurrency
    amount: Decimal
    price: Decimal
    payment_methods: list[PaymentMethod]
    description: str | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None


class UpdateOrderRequest(BaseModel):
    """Partial edit: omitted fields keep their current value."""

    side: OrderSide | None = None
    cryptocurrency: CryptoCurrency | None = None
    fiat_currency: FiatCurrency | None = None
    amount: Decimal | None = None
    price: Decimal | None = None
    payment_methods: list[PaymentMethod] | None = None
    description: str | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class OrderOut(BaseModel):
    id: str
    owner_id: str
    side: OrderSide
    cryptocurrency: CryptoCurrency
    fiat_currency: FiatCurrency
    amount: Decimal
    price: Decimal
    total_amount: Decimal
    min_amount: Decimal
    max_amount: Decimal
    payment_methods: list[PaymentMethod]
    description: str | None = None
    status: OrderStatus
    response_count: int
    accepted_response_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderOut":
        return cls(
            id=order.id,
            owner_id=order.owner_id,
            side=order.side,
            cryptocurrency=order.crypto,
            fiat_currency=order.fiat,
            amount=order.amount,
            price=order.price,
            total_amount=order.total_amount,
            min_amount=order.min_amount,
            max_amount=order.max_amount,
            payment_methods=order.payment_methods,
            description=order.description,
            status=order.status,
            response_count=order.response_count,
            accepted_response_id=order.accepted_response_id,
            created_at=order.created_at,
            updated_at=order.updated_at,
            completed_at=order.completed_at,
        )


class OrderListOut(BaseModel):
    orders: list[OrderOut]
    next_cursor: str | None = None
    has_more: bool = False


class ListOrdersQuery(BaseModel):
    side: OrderSide | None = None
    cryptocurrency: CryptoCurrency | None = None
    fiat_currency: FiatCurrency | None = None
    payment_method: PaymentMethod | None = None
    min_price: Decimal | None = Field(None, ge=0)
    max_price: Decimal | None = Field(None, ge=0)
    owner_id: str | None = None
    # Subset of the open statuses; None means both
    status: list[OrderStatus] | None = None
    include_inactive: bool = False
    limit: int = Field(50, ge=1, le=100)
    cursor: str | None = None
