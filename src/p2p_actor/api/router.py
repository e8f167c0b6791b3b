"""p2p_actor REST endpoints.

GET /users/{actor_id}/profile — public profile with trade and review stats
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.application.service import ActorApplicationService
from src.p2p_common.database import get_db_session
from src.p2p_common.response import ApiResponse, success_response

router = APIRouter(prefix="/users", tags=["users"])

_service = ActorApplicationService()


@router.get("/{actor_id}/profile")
async def get_profile(
    actor_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    profile = await _service.get_profile(db, actor_id)
    resp = success_response(profile=profile.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
