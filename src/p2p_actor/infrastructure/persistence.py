# src/p2p_actor/infrastructure/persistence.py
"""ActorRepository: raw SQL persistence implementation."""
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.models import Actor, ActorActivity

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, rating, review_count, total_orders, active_orders, completed_deals,
    is_active, created_at, updated_at
"""

# Concurrent first requests of the same actor race on the insert; the loser is a no-op
_ENSURE_ACTOR_SQL = text("""
    INSERT INTO actors (id) VALUES (:id)
    ON CONFLICT (id) DO NOTHING
""")

_GET_ACTOR_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM actors WHERE id = :id
""")

_LOCK_ACTOR_SQL = text("""
    SELECT id FROM actors WHERE id = :id FOR UPDATE
""")

_ADJUST_COUNTERS_SQL = text("""
    UPDATE actors
    SET total_orders    = total_orders + :total_orders,
        active_orders   = GREATEST(active_orders + :active_orders, 0),
        completed_deals = completed_deals + :completed_deals
    WHERE id = :id
""")

_SET_RATING_SQL = text("""
    UPDATE actors
    SET rating = :rating, review_count = :review_count
    WHERE id = :id
""")

_ACTIVITY_SQL = text("""
    SELECT
        (SELECT COUNT(*) FROM orders WHERE owner_id = :id) AS total_orders,
        (SELECT COUNT(*) FROM orders
          WHERE owner_id = :id
            AND status IN ('active', 'has_responses', 'in_deal')) AS active_orders,
        (SELECT COUNT(*) FROM orders
          WHERE owner_id = :id AND status = 'completed') AS completed_orders,
        (SELECT COUNT(*) FROM deals
          WHERE author_id = :id OR counterparty_id = :id) AS total_deals,
        (SELECT COUNT(*) FROM deals
          WHERE (author_id = :id OR counterparty_id = :id)
            AND status = 'completed') AS completed_deals,
        (SELECT COUNT(*) FROM deals
          WHERE (author_id = :id OR counterparty_id = :id)
            AND status = 'cancelled') AS cancelled_deals,
        (SELECT COALESCE(SUM(total_amount), 0) FROM deals
          WHERE (author_id = :id OR counterparty_id = :id)
            AND status = 'completed') AS total_trade_volume,
        (SELECT MIN(created_at) FROM deals
          WHERE author_id = :id OR counterparty_id = :id) AS first_deal_at,
        GREATEST(
            (SELECT MAX(updated_at) FROM orders WHERE owner_id = :id),
            (SELECT MAX(updated_at) FROM deals
              WHERE author_id = :id OR counterparty_id = :id)
        ) AS last_activity_at
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_actor(row: Any) -> Actor:
    return Actor(
        id=row.id,
        rating=float(row.rating),
        review_count=row.review_count,
        total_orders=row.total_orders,
        active_orders=row.active_orders,
        completed_deals=row.completed_deals,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ActorRepository:
    """Concrete implementation of ActorRepositoryProtocol using raw SQL."""

    async def ensure_exists(self, db: AsyncSession, actor_id: str) -> Actor:
        await db.execute(_ENSURE_ACTOR_SQL, {"id": actor_id})
        result = await db.execute(_GET_ACTOR_SQL, {"id": actor_id})
        return _row_to_actor(result.fetchone())

    async def get_by_id(self, db: AsyncSession, actor_id: str) -> Actor | None:
        result = await db.execute(_GET_ACTOR_SQL, {"id": actor_id})
        row = result.fetchone()
        return _row_to_actor(row) if row else None

    async def lock(self, db: AsyncSession, actor_id: str) -> None:
        await db.execute(_LOCK_ACTOR_SQL, {"id": actor_id})

    async def adjust_counters(
        self,
        db: AsyncSession,
        actor_id: str,
        total_orders: int = 0,
        active_orders: int = 0,
        completed_deals: int = 0,
    ) -> None:
        await db.execute(
            _ADJUST_COUNTERS_SQL,
            {
                "id": actor_id,
                "total_orders": total_orders,
                "active_orders": active_orders,
                "completed_deals": completed_deals,
            },
        )

    async def set_rating(
        self, db: AsyncSession, actor_id: str, rating: float, review_count: int
    ) -> None:
        await db.execute(
            _SET_RATING_SQL,
            {"id": actor_id, "rating": rating, "review_count": review_count},
        )

    async def get_activity(self, db: AsyncSession, actor_id: str) -> ActorActivity:
        result = await db.execute(_ACTIVITY_SQL, {"id": actor_id})
        row = result.fetchone()
        return ActorActivity(
            total_orders=row.total_orders,
            active_orders=row.active_orders,
            completed_orders=row.completed_orders,
            total_deals=row.total_deals,
            completed_deals=row.completed_deals,
            cancelled_deals=row.cancelled_deals,
            total_trade_volume=Decimal(row.total_trade_volume),
            first_deal_at=row.first_deal_at,
            last_activity_at=row.last_activity_at,
        )
