"""Actor domain models: pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Actor:
    id: str
    # Mean of received Review.rating, recomputed from reviews on every new review
    rating: float = 0.0
    review_count: int = 0
    total_orders: int = 0
    active_orders: int = 0
    completed_deals: int = 0
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ActorActivity:
    """Trade counters aggregated from authoritative order and deal rows."""

    total_orders: int = 0
    active_orders: int = 0
    completed_orders: int = 0
    total_deals: int = 0
    completed_deals: int = 0
    cancelled_deals: int = 0
    total_trade_volume: Decimal = Decimal("0")
    first_deal_at: datetime | None = None
    last_activity_at: datetime | None = None

    @property
    def success_rate(self) -> float:
        if self.total_deals == 0:
            return 0.0
        return round(self.completed_deals / self.total_deals * 100, 2)
