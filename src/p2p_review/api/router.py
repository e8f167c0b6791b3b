"""p2p_review REST endpoints.

POST /reviews                      — review the other party of a completed deal (auth)
GET  /reviews?user_id=&limit=      — reviews received by an actor, newest first
GET  /reviews/stats?user_id=       — rating aggregate and distribution
POST /reviews/{review_id}/report   — flag a review (auth)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.models import Actor
from src.p2p_common.database import get_db_session
from src.p2p_common.response import ApiResponse, success_response
from src.p2p_gateway.auth.dependencies import get_current_actor
from src.p2p_review.application.schemas import ReportReviewRequest, SubmitReviewRequest
from src.p2p_review.application.service import (
    DEFAULT_LIST_LIMIT,
    MAX_LIST_LIMIT,
    ReviewApplicationService,
)

router = APIRouter(prefix="/reviews", tags=["reviews"])

_service = ReviewApplicationService()


@router.post("", status_code=201)
async def submit_review(
    req: SubmitReviewRequest,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    review = await _service.submit(db, actor.id, req)
    resp = success_response(review=review.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_reviews(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    user_id: str = Query(..., description="Actor whose received reviews to list"),
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
) -> ApiResponse:
    reviews = await _service.list_reviews(db, user_id, limit)
    resp = success_response(reviews=[r.model_dump(mode="json") for r in reviews])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/stats")
async def review_stats(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    user_id: str = Query(...),
) -> ApiResponse:
    stats = await _service.get_stats(db, user_id)
    resp = success_response(stats=stats.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{review_id}/report")
async def report_review(
    review_id: str,
    req: ReportReviewRequest,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.report(db, actor.id, review_id, req)
    resp = success_response()
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
