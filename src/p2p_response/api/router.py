"""p2p_response REST endpoints.

POST /responses                    — respond to an order (auth)
GET  /responses/my                 — reconciled view of my responses
GET  /responses/to-my              — reconciled view of responses to my orders
POST /responses/{response_id}/accept — owner accepts; creates the deal
POST /responses/{response_id}/reject — owner rejects
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.models import Actor
from src.p2p_common.database import get_db_session
from src.p2p_common.response import ApiResponse, success_response
from src.p2p_gateway.auth.dependencies import get_current_actor
from src.p2p_reconcile.application.service import ReconciliationService
from src.p2p_response.application.schemas import (
    ReconciledResponseOut,
    RejectResponseRequest,
    SubmitResponseRequest,
)
from src.p2p_response.application.service import ResponseApplicationService

router = APIRouter(prefix="/responses", tags=["responses"])

_service = ResponseApplicationService()
_reconcile = ReconciliationService()


@router.post("", status_code=201)
async def submit_response(
    req: SubmitResponseRequest,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    response = await _service.submit(db, actor.id, req)
    resp = success_response(response=response.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/my")
async def my_responses(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _reconcile.my_responses(db, actor.id)
    resp = success_response(
        responses=[ReconciledResponseOut.from_reconciled(i).model_dump(mode="json") for i in items]
    )
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/to-my")
async def responses_to_my_orders(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _reconcile.responses_to_me(db, actor.id)
    resp = success_response(
        responses=[ReconciledResponseOut.from_reconciled(i).model_dump(mode="json") for i in items]
    )
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{response_id}/accept")
async def accept_response(
    response_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    deal = await _service.accept(db, actor.id, response_id)
    resp = success_response(deal_id=deal.id)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{response_id}/reject")
async def reject_response(
    response_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    req: RejectResponseRequest | None = None,
) -> ApiResponse:
    await _service.reject(db, actor.id, response_id, req.reason if req else None)
    resp = success_response()
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
