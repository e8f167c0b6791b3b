"""Integration-test fixtures.

The API runs in-process against the PostgreSQL and Redis named in .env
(migrated with `alembic upgrade head`). One event loop and one client
serve the whole session: the engine pool is created at import time and
must not outlive its loop.
"""

import uuid
from collections.abc import Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.p2p_gateway.auth.jwt_handler import create_access_token


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def new_actor() -> Callable[[], tuple[str, dict[str, str]]]:
    """Mint a fresh actor id plus its Authorization header.

    Fresh ids keep repeated runs against the same database independent.
    """

    def _mint() -> tuple[str, dict[str, str]]:
        actor_id = f"it_{uuid.uuid4().hex[:10]}"
        return actor_id, {"Authorization": f"Bearer {create_access_token(actor_id)}"}

    return _mint
