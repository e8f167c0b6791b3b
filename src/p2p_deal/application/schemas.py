"""Pydantic schemas for p2p_deal requests and responses."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.p2p_common.enums import DealStatus, PaymentMethod
from src.p2p_deal.domain.models import Deal


class ConfirmDealRequest(BaseModel):
    payment_proof: str | None = Field(None, max_length=1000)


class CancelDealRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class DealOut(BaseModel):
    id: str
    order_id: str
    response_id: str
    author_id: str
    counterparty_id: str
    amount: Decimal
    price: Decimal
    total_amount: Decimal
    payment_methods: list[PaymentMethod]
    status: DealStatus
    author_confirmed: bool
    counterparty_confirmed: bool
    author_proof: str | None = None
    counterparty_proof: str | None = None
    cancelled_by: str | None = None
    cancel_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_domain(cls, deal: Deal) -> "DealOut":
        return cls(
            id=deal.id,
            order_id=deal.order_id,
            response_id=deal.response_id,
            author_id=deal.author_id,
            counterparty_id=deal.counterparty_id,
            amount=deal.amount,
            price=deal.price,
            total_amount=deal.total_amount,
            payment_methods=deal.payment_methods,
            status=deal.status,
            author_confirmed=deal.author_confirmed,
            counterparty_confirmed=deal.counterparty_confirmed,
            author_proof=deal.author_proof,
            counterparty_proof=deal.counterparty_proof,
            cancelled_by=deal.cancelled_by,
            cancel_reason=deal.cancel_reason,
            created_at=deal.created_at,
            updated_at=deal.updated_at,
            completed_at=deal.completed_at,
        )


class ConfirmDealOut(BaseModel):
    deal: DealOut
    deal_completed: bool
