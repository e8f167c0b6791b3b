"""HTTP surface tests: routing, auth, envelope and error mapping.

Services are replaced with mocks and the DB session with a MagicMock, so
these run without PostgreSQL or Redis.
"""
from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import AsyncClient

from src.main import app
from src.p2p_actor.domain.models import Actor
from src.p2p_common.database import get_db_session
from src.p2p_common.errors import DealNotConfirmableError, OrderNotFoundError
from src.p2p_deal.application.schemas import ConfirmDealOut, DealOut
from src.p2p_gateway.auth.dependencies import get_current_actor, get_optional_actor
from src.p2p_order.application.schemas import OrderOut
from tests.unit.fakes import ALICE, make_deal, make_order

_ORDER_BODY = {
    "side": "sell",
    "cryptocurrency": "BTC",
    "fiat_currency": "RUB",
    "amount": "0.5",
    "price": "6000000",
    "payment_methods": ["sberbank"],
}


async def _fake_session():
    yield MagicMock()


@pytest.fixture
def db_override() -> Iterator[None]:
    app.dependency_overrides[get_db_session] = _fake_session
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def as_alice(db_override) -> None:
    async def _alice() -> Actor:
        return Actor(id=ALICE)

    app.dependency_overrides[get_current_actor] = _alice
    app.dependency_overrides[get_optional_actor] = _alice


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0"}
    assert resp.headers["X-Request-ID"].startswith("req_")


@pytest.mark.asyncio
async def test_missing_token_is_401(client: AsyncClient, db_override) -> None:
    resp = await client.post("/api/v1/orders", json=_ORDER_BODY)

    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == 1003
    assert body["kind"] == "permission"


@pytest.mark.asyncio
async def test_create_order_envelope(client: AsyncClient, as_alice) -> None:
    service = MagicMock()
    service.create_order = AsyncMock(return_value=OrderOut.from_domain(make_order()))
    with patch("src.p2p_order.api.router._service", service):
        resp = await client.post("/api/v1/orders", json=_ORDER_BODY)

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["code"] == 0
    assert body["order"]["id"] == "ORD-1"
    assert body["order"]["status"] == "active"
    # Router echoes the middleware request id
    assert body["request_id"] == resp.headers["X-Request-ID"]
    owner_id = service.create_order.call_args.args[1]
    assert owner_id == ALICE


@pytest.mark.asyncio
async def test_body_validation_maps_to_9004(client: AsyncClient, as_alice) -> None:
    resp = await client.post("/api/v1/orders", json={**_ORDER_BODY, "side": "hold"})

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == 9004
    assert body["kind"] == "validation"
    assert "side" in body["message"]


@pytest.mark.asyncio
async def test_not_found_maps_to_404(client: AsyncClient, as_alice) -> None:
    service = MagicMock()
    service.get_order = AsyncMock(side_effect=OrderNotFoundError("nope"))
    with patch("src.p2p_order.api.router._service", service):
        resp = await client.get("/api/v1/orders/nope")

    assert resp.status_code == 404
    assert resp.json()["kind"] == "not_found"
    assert resp.json()["code"] == 2001


@pytest.mark.asyncio
async def test_confirm_reports_completion(client: AsyncClient, as_alice) -> None:
    service = MagicMock()
    service.confirm = AsyncMock(
        return_value=ConfirmDealOut(deal=DealOut.from_domain(make_deal()), deal_completed=False)
    )
    with patch("src.p2p_deal.api.router._service", service):
        resp = await client.post("/api/v1/deals/DEAL-1/confirm", json={"payment_proof": "tx"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["deal_completed"] is False
    assert body["deal"]["id"] == "DEAL-1"
    service.confirm.assert_awaited_once()
    assert service.confirm.call_args.args[1:] == (ALICE, "DEAL-1", "tx")


@pytest.mark.asyncio
async def test_state_error_maps_to_409(client: AsyncClient, as_alice) -> None:
    service = MagicMock()
    service.confirm = AsyncMock(side_effect=DealNotConfirmableError("DEAL-1", "cancelled"))
    with patch("src.p2p_deal.api.router._service", service):
        resp = await client.post("/api/v1/deals/DEAL-1/confirm")

    assert resp.status_code == 409
    assert resp.json()["kind"] == "state"
    assert resp.json()["code"] == 4003
