"""Deal domain model: pure dataclass, no SQLAlchemy dependency.

Dual confirmation protocol:
  in_progress ──(one party confirms)──▶ waiting_payment ──(other confirms)──▶ completed
  Confirmation flags are per party and monotonic; `completed` is reached
  only when both flags are true.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.p2p_common.enums import LIVE_DEAL_STATUSES, DealStatus, PaymentMethod
from src.p2p_common.errors import (
    DealNotCancellableError,
    DealNotConfirmableError,
    IllegalTransitionError,
    NotDealPartyError,
)
from src.p2p_common.money import total_amount
from src.p2p_common.state_machine import DEAL_TRANSITIONS, can_transition


@dataclass
class Deal:
    id: str
    order_id: str
    response_id: str
    author_id: str  # order owner
    counterparty_id: str  # responder
    # Copied from the order at acceptance; never changed afterwards
    amount: Decimal
    price: Decimal
    payment_methods: list[PaymentMethod]
    status: DealStatus = DealStatus.IN_PROGRESS
    author_confirmed: bool = False
    counterparty_confirmed: bool = False
    author_proof: str | None = None
    counterparty_proof: str | None = None
    cancelled_by: str | None = None
    cancel_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    total_amount: Decimal = field(init=False)

    def __post_init__(self) -> None:
        self.total_amount = total_amount(self.amount, self.price)

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_DEAL_STATUSES

    @property
    def is_completed(self) -> bool:
        return self.status == DealStatus.COMPLETED

    def is_party(self, actor_id: str) -> bool:
        return actor_id in (self.author_id, self.counterparty_id)

    def other_party(self, actor_id: str) -> str:
        if actor_id == self.author_id:
            return self.counterparty_id
        if actor_id == self.counterparty_id:
            return self.author_id
        raise NotDealPartyError(self.id)

    def move_to(self, target: DealStatus) -> None:
        if not can_transition(DEAL_TRANSITIONS, self.status, target):
            raise IllegalTransitionError("Deal", self.id, self.status.value, target.value)
        self.status = target

    def confirm(self, actor_id: str, proof: str | None, now: datetime) -> bool:
        """Set the caller's confirmation flag. Returns True if state changed.

        Repeating a confirmation, or confirming an already completed deal,
        changes nothing.
        """
        if not self.is_party(actor_id):
            raise NotDealPartyError(self.id)
        if self.is_completed:
            return False
        if not self.is_live:
            raise DealNotConfirmableError(self.id, self.status.value)

        if actor_id == self.author_id:
            if self.author_confirmed:
                return False
            self.author_confirmed = True
            self.author_proof = proof
        else:
            if self.counterparty_confirmed:
                return False
            self.counterparty_confirmed = True
            self.counterparty_proof = proof

        if self.author_confirmed and self.counterparty_confirmed:
            self.move_to(DealStatus.COMPLETED)
            self.completed_at = now
        elif self.status == DealStatus.IN_PROGRESS:
            self.move_to(DealStatus.WAITING_PAYMENT)
        return True

    def cancel(self, actor_id: str, reason: str | None) -> None:
        if not self.is_live:
            raise DealNotCancellableError(self.id, self.status.value)
        self.move_to(DealStatus.CANCELLED)
        self.cancelled_by = actor_id
        self.cancel_reason = reason
