"""p2p_deal REST endpoints (deal parties only).

GET  /deals[?order_id=]         — my deals
GET  /deals/{deal_id}           — one deal
POST /deals/{deal_id}/confirm   — confirm my side; idempotent
POST /deals/{deal_id}/cancel    — cancel before completion
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.models import Actor
from src.p2p_common.database import get_db_session
from src.p2p_common.response import ApiResponse, success_response
from src.p2p_deal.application.schemas import CancelDealRequest, ConfirmDealRequest
from src.p2p_deal.application.service import DealApplicationService
from src.p2p_gateway.auth.dependencies import get_current_actor

router = APIRouter(prefix="/deals", tags=["deals"])

_service = DealApplicationService()


@router.get("")
async def list_deals(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    order_id: str | None = Query(None),
) -> ApiResponse:
    deals = await _service.list_deals(db, actor.id, order_id)
    resp = success_response(deals=[d.model_dump(mode="json") for d in deals])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{deal_id}")
async def get_deal(
    deal_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    deal = await _service.get_deal(db, actor.id, deal_id)
    resp = success_response(deal=deal.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{deal_id}/confirm")
async def confirm_deal(
    deal_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    req: ConfirmDealRequest | None = None,
) -> ApiResponse:
    result = await _service.confirm(
        db, actor.id, deal_id, req.payment_proof if req else None
    )
    resp = success_response(
        deal=result.deal.model_dump(mode="json"), deal_completed=result.deal_completed
    )
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{deal_id}/cancel")
async def cancel_deal(
    deal_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    req: CancelDealRequest | None = None,
) -> ApiResponse:
    deal = await _service.cancel(db, actor.id, deal_id, req.reason if req else None)
    resp = success_response(deal=deal.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
