"""Order domain model: pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.p2p_common.enums import (
    OPEN_ORDER_STATUSES,
    TERMINAL_ORDER_STATUSES,
    CryptoCurrency,
    FiatCurrency,
    OrderSide,
    OrderStatus,
    PaymentMethod,
)
from src.p2p_common.errors import IllegalTransitionError
from src.p2p_common.money import total_amount
from src.p2p_common.state_machine import ORDER_TRANSITIONS, can_transition


@dataclass
class Order:
    id: str
    owner_id: str
    side: OrderSide
    crypto: CryptoCurrency
    fiat: FiatCurrency
    amount: Decimal  # crypto units
    price: Decimal  # fiat per crypto unit
    payment_methods: list[PaymentMethod]
    description: str | None = None
    # Fiat trade limits; default to the whole total
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    status: OrderStatus = OrderStatus.ACTIVE
    response_count: int = 0
    accepted_response_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    total_amount: Decimal = field(init=False)

    def __post_init__(self) -> None:
        self.recompute_totals()

    def recompute_totals(self) -> None:
        self.total_amount = total_amount(self.amount, self.price)
        if self.min_amount is None:
            self.min_amount = self.total_amount
        if self.max_amount is None:
            self.max_amount = self.total_amount

    @property
    def is_open(self) -> bool:
        """Accepting new Responses and editable by the owner."""
        return self.status in OPEN_ORDER_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ORDER_STATUSES

    def move_to(self, target: OrderStatus) -> None:
        if not can_transition(ORDER_TRANSITIONS, self.status, target):
            raise IllegalTransitionError("Order", self.id, self.status.value, target.value)
        self.status = target


@dataclass
class OrderFilter:
    """Market listing filter. Statuses default to the open ones."""

    side: OrderSide | None = None
    crypto: CryptoCurrency | None = None
    fiat: FiatCurrency | None = None
    payment_method: PaymentMethod | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    owner_id: str | None = None
    statuses: frozenset[OrderStatus] = OPEN_ORDER_STATUSES
    # When set, this actor's own orders are returned regardless of status
    include_all_of: str | None = None
