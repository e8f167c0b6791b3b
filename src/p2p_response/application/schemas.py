"""Pydantic schemas for p2p_response requests and responses."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.p2p_common.enums import (
    CryptoCurrency,
    DealStatus,
    FiatCurrency,
    OrderSide,
    OrderStatus,
    ResponseStatus,
)
from src.p2p_reconcile.domain.models import ReconciledResponse
from src.p2p_response.domain.models import Response


class SubmitResponseRequest(BaseModel):
    order_id: str
    message: str | None = None


class RejectResponseRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class ResponseOut(BaseModel):
    id: str
    order_id: str
    responder_id: str
    message: str | None = None
    status: ResponseStatus
    reject_reason: str | None = None
    created_at: datetime | None = None
    reviewed_at: datetime | None = None

    @classmethod
    def from_domain(cls, response: Response) -> "ResponseOut":
        return cls(
            id=response.id,
            order_id=response.order_id,
            responder_id=response.responder_id,
            message=response.message,
            status=response.status,
            reject_reason=response.reject_reason,
            created_at=response.created_at,
            reviewed_at=response.reviewed_at,
        )


class ReconciledResponseOut(ResponseOut):
    """A Response with the order summary and, once accepted, its deal."""

    order_owner_id: str
    order_status: OrderStatus
    side: OrderSide
    cryptocurrency: CryptoCurrency
    fiat_currency: FiatCurrency
    amount: Decimal
    price: Decimal
    total_amount: Decimal
    deal_id: str | None = None
    deal_status: DealStatus | None = None

    @classmethod
    def from_reconciled(cls, item: ReconciledResponse) -> "ReconciledResponseOut":
        base = ResponseOut.from_domain(item.response).model_dump()
        order = item.order
        return cls(
            **base,
            order_owner_id=order.owner_id,
            order_status=order.status,
            side=order.side,
            cryptocurrency=order.crypto,
            fiat_currency=order.fiat,
            amount=order.amount,
            price=order.price,
            total_amount=order.total_amount,
            deal_id=item.deal.id if item.deal else None,
            deal_status=item.deal.status if item.deal else None,
        )
