"""Pydantic schemas for actor profile responses."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from src.p2p_actor.domain.models import Actor, ActorActivity
from src.p2p_review.domain.models import ReviewStats


class ActorOut(BaseModel):
    id: str
    rating: float
    review_count: int
    total_orders: int
    completed_deals: int
    is_active: bool
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, actor: Actor) -> "ActorOut":
        return cls(
            id=actor.id,
            rating=round(actor.rating, 2),
            review_count=actor.review_count,
            total_orders=actor.total_orders,
            completed_deals=actor.completed_deals,
            is_active=actor.is_active,
            created_at=actor.created_at,
        )


class ActorStatsOut(BaseModel):
    total_orders: int
    active_orders: int
    completed_orders: int
    total_deals: int
    completed_deals: int
    cancelled_deals: int
    total_trade_volume: Decimal
    success_rate: float
    average_rating: float
    total_reviews: int
    rating_distribution: dict[int, int]
    positive_percent: float
    first_deal_at: datetime | None = None
    last_activity_at: datetime | None = None

    @classmethod
    def from_domain(cls, activity: ActorActivity, reviews: ReviewStats) -> "ActorStatsOut":
        return cls(
            total_orders=activity.total_orders,
            active_orders=activity.active_orders,
            completed_orders=activity.completed_orders,
            total_deals=activity.total_deals,
            completed_deals=activity.completed_deals,
            cancelled_deals=activity.cancelled_deals,
            total_trade_volume=activity.total_trade_volume,
            success_rate=activity.success_rate,
            average_rating=round(reviews.average_rating, 2),
            total_reviews=reviews.total_reviews,
            rating_distribution=reviews.distribution,
            positive_percent=reviews.positive_percent,
            first_deal_at=activity.first_deal_at,
            last_activity_at=activity.last_activity_at,
        )


class ProfileOut(BaseModel):
    user: ActorOut
    stats: ActorStatsOut
