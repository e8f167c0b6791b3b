# src/p2p_response/infrastructure/persistence.py
"""ResponseRepository: raw SQL persistence implementation."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import ResponseStatus
from src.p2p_response.domain.models import Response

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

# uq_responses_waiting (partial unique index) rejects a second waiting
# response from the same responder on the same order
_INSERT_RESPONSE_SQL = text("""
    INSERT INTO responses (id, order_id, responder_id, message, status, created_at)
    VALUES (:id, :order_id, :responder_id, :message, :status, :created_at)
""")

_UPDATE_RESPONSE_SQL = text("""
    UPDATE responses
    SET status = :status, reject_reason = :reject_reason, reviewed_at = :reviewed_at
    WHERE id = :id
""")

_SELECT_COLUMNS = """
    r.id, r.order_id, r.responder_id, r.message, r.status, r.reject_reason,
    r.created_at, r.updated_at, r.reviewed_at
"""

_GET_RESPONSE_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM responses r WHERE r.id = :id
""")

_GET_RESPONSE_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM responses r WHERE r.id = :id
    FOR UPDATE
""")

_FIND_WAITING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM responses r
    WHERE r.order_id = :order_id AND r.responder_id = :responder_id
      AND r.status = 'waiting'
""")

_COUNT_WAITING_SQL = text("""
    SELECT COUNT(*) FROM responses
    WHERE order_id = :order_id AND status = 'waiting'
""")

_LIST_WAITING_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM responses r
    WHERE r.order_id = :order_id AND r.status = 'waiting'
    ORDER BY r.id
    FOR UPDATE
""")

_LIST_BY_ORDER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM responses r
    WHERE r.order_id = :order_id
    ORDER BY r.created_at DESC, r.id DESC
""")

_LIST_BY_RESPONDER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM responses r
    WHERE r.responder_id = :responder_id
    ORDER BY r.created_at DESC, r.id DESC
""")

_LIST_FOR_OWNER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM responses r
    JOIN orders o ON o.id = r.order_id
    WHERE o.owner_id = :owner_id
    ORDER BY r.created_at DESC, r.id DESC
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_response(row: Any) -> Response:
    return Response(
        id=row.id,
        order_id=row.order_id,
        responder_id=row.responder_id,
        message=row.message,
        status=ResponseStatus(row.status),
        reject_reason=row.reject_reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
        reviewed_at=row.reviewed_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ResponseRepository:
    """Concrete implementation of ResponseRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, response: Response) -> None:
        await db.execute(
            _INSERT_RESPONSE_SQL,
            {
                "id": response.id,
                "order_id": response.order_id,
                "responder_id": response.responder_id,
                "message": response.message,
                "status": response.status.value,
                "created_at": response.created_at,
            },
        )

    async def get_by_id(self, db: AsyncSession, response_id: str) -> Response | None:
        result = await db.execute(_GET_RESPONSE_BY_ID_SQL, {"id": response_id})
        row = result.fetchone()
        return _row_to_response(row) if row else None

    async def get_for_update(
        self, db: AsyncSession, response_id: str
    ) -> Response | None:
        result = await db.execute(_GET_RESPONSE_FOR_UPDATE_SQL, {"id": response_id})
        row = result.fetchone()
        return _row_to_response(row) if row else None

    async def update(self, db: AsyncSession, response: Response) -> None:
        await db.execute(
            _UPDATE_RESPONSE_SQL,
            {
                "id": response.id,
                "status": response.status.value,
                "reject_reason": response.reject_reason,
                "reviewed_at": response.reviewed_at,
            },
        )

    async def find_waiting(
        self, db: AsyncSession, order_id: str, responder_id: str
    ) -> Response | None:
        result = await db.execute(
            _FIND_WAITING_SQL, {"order_id": order_id, "responder_id": responder_id}
        )
        row = result.fetchone()
        return _row_to_response(row) if row else None

    async def count_waiting(self, db: AsyncSession, order_id: str) -> int:
        result = await db.execute(_COUNT_WAITING_SQL, {"order_id": order_id})
        return int(result.scalar_one())

    async def list_waiting_for_update(
        self, db: AsyncSession, order_id: str
    ) -> list[Response]:
        result = await db.execute(_LIST_WAITING_FOR_UPDATE_SQL, {"order_id": order_id})
        return [_row_to_response(row) for row in result.fetchall()]

    async def list_by_order(self, db: AsyncSession, order_id: str) -> list[Response]:
        result = await db.execute(_LIST_BY_ORDER_SQL, {"order_id": order_id})
        return [_row_to_response(row) for row in result.fetchall()]

    async def list_by_responder(
        self, db: AsyncSession, responder_id: str
    ) -> list[Response]:
        result = await db.execute(_LIST_BY_RESPONDER_SQL, {"responder_id": responder_id})
        return [_row_to_response(row) for row in result.fetchall()]

    async def list_for_owner(self, db: AsyncSession, owner_id: str) -> list[Response]:
        result = await db.execute(_LIST_FOR_OWNER_SQL, {"owner_id": owner_id})
        return [_row_to_response(row) for row in result.fetchall()]
