"""FastAPI dependencies resolving the authenticated actor.

Usage in any protected router:
    from src.p2p_gateway.auth.dependencies import get_current_actor

    @router.post("/protected")
    async def protected(actor: Annotated[Actor, Depends(get_current_actor)]):
        ...

The actor row is created on its first authenticated request.
"""

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_actor.domain.models import Actor
from src.p2p_actor.infrastructure.persistence import ActorRepository
from src.p2p_common.database import get_db_session
from src.p2p_common.errors import ActorDeactivatedError, InvalidCredentialsError
from src.p2p_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is reported through InvalidCredentialsError (401)
bearer_scheme = HTTPBearer(auto_error=False)

_actor_repo = ActorRepository()


async def _resolve_actor(token: str, db: AsyncSession) -> Actor:
    actor_id = decode_token(token)
    try:
        actor = await _actor_repo.ensure_exists(db, actor_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    if not actor.is_active:
        logger.warning("Rejected request from deactivated actor=%s", actor_id)
        raise ActorDeactivatedError()
    return actor


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Actor:
    """Raise 401 when the Bearer token is missing or invalid, 403 when deactivated."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidCredentialsError()
    return await _resolve_actor(credentials.credentials, db)


async def get_optional_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Actor | None:
    """Like get_current_actor for public reads: anonymous callers get None."""
    if credentials is None:
        return None
    return await _resolve_actor(credentials.credentials, db)
