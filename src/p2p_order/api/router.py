"""p2p_order REST endpoints.

POST   /orders                     — create (auth)
GET    /orders                     — market listing, cursor pagination
GET    /orders/{order_id}          — one order
PUT    /orders/{order_id}          — edit (owner)
DELETE /orders/{order_id}          — cancel (owner)
GET    /orders/{order_id}/responses — all responses to the order (owner)
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.models import Actor
from src.p2p_common.database import get_db_session
from src.p2p_common.enums import (
    CryptoCurrency,
    FiatCurrency,
    OrderSide,
    OrderStatus,
    PaymentMethod,
)
from src.p2p_common.response import ApiResponse, success_response
from src.p2p_gateway.auth.dependencies import get_current_actor, get_optional_actor
from src.p2p_order.application.schemas import (
    CreateOrderRequest,
    ListOrdersQuery,
    UpdateOrderRequest,
)
from src.p2p_order.application.service import OrderApplicationService
from src.p2p_response.application.service import ResponseApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()
_responses = ResponseApplicationService()


@router.post("", status_code=201)
async def create_order(
    req: CreateOrderRequest,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.create_order(db, actor.id, req)
    resp = success_response(order=order.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_orders(
    request: Request,
    actor: Annotated[Actor | None, Depends(get_optional_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    side: OrderSide | None = Query(None),
    cryptocurrency: CryptoCurrency | None = Query(None),
    fiat_currency: FiatCurrency | None = Query(None),
    payment_method: PaymentMethod | None = Query(None),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    owner_id: str | None = Query(None),
    status: list[OrderStatus] | None = Query(None, description="active and/or has_responses"),
    include_inactive: bool = Query(False, description="Also return all of your own orders"),
    limit: int = Query(50, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    query = ListOrdersQuery(
        side=side,
        cryptocurrency=cryptocurrency,
        fiat_currency=fiat_currency,
        payment_method=payment_method,
        min_price=min_price,
        max_price=max_price,
        owner_id=owner_id,
        status=status,
        include_inactive=include_inactive,
        limit=limit,
        cursor=cursor,
    )
    result = await _service.list_orders(db, actor.id if actor else None, query)
    resp = success_response(**result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    actor: Annotated[Actor | None, Depends(get_optional_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.get_order(db, actor.id if actor else None, order_id)
    resp = success_response(order=order.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/{order_id}")
async def edit_order(
    order_id: str,
    req: UpdateOrderRequest,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.edit_order(db, actor.id, order_id, req)
    resp = success_response(order=order.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{order_id}")
async def cancel_order(
    order_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.cancel_order(db, actor.id, order_id)
    resp = success_response()
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{order_id}/responses")
async def list_order_responses(
    order_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    responses = await _responses.list_for_order(db, actor.id, order_id)
    resp = success_response(responses=[r.model_dump(mode="json") for r in responses])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
