# src/p2p_response/domain/repository.py
"""ResponseRepository Protocol: interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_response.domain.models import Response


class ResponseRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, response: Response) -> None: ...

    async def get_by_id(self, db: AsyncSession, response_id: str) -> Response | None: ...

    async def get_for_update(
        self, db: AsyncSession, response_id: str
    ) -> Response | None: ...

    async def update(self, db: AsyncSession, response: Response) -> None: ...

    async def find_waiting(
        self, db: AsyncSession, order_id: str, responder_id: str
    ) -> Response | None: ...

    async def count_waiting(self, db: AsyncSession, order_id: str) -> int: ...

    async def list_waiting_for_update(
        self, db: AsyncSession, order_id: str
    ) -> list[Response]: ...

    async def list_by_order(self, db: AsyncSession, order_id: str) -> list[Response]: ...

    async def list_by_responder(
        self, db: AsyncSession, responder_id: str
    ) -> list[Response]: ...

    async def list_for_owner(self, db: AsyncSession, owner_id: str) -> list[Response]:
        """Responses submitted to any order owned by owner_id, newest first."""
        ...
