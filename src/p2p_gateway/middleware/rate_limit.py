"""Rate limiting middleware: Redis fixed-window counters.

Rules:
  - Write endpoints (POST/PUT/PATCH/DELETE): RATE_LIMIT_WRITE_PER_MINUTE per actor
  - Read endpoints (GET/HEAD/OPTIONS):       RATE_LIMIT_READ_PER_MINUTE per actor

The actor is taken from a valid Bearer token; anonymous callers are keyed
by client IP (X-Forwarded-For aware). Key pattern:
    ratelimit:{actor_id_or_ip}:{read|write}

Redis being unreachable does not block trading: the request passes and a
warning is logged.
"""

import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.p2p_common.errors import InvalidCredentialsError, RateLimitError
from src.p2p_common.redis_client import get_redis
from src.p2p_common.response import error_response
from src.p2p_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
_READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json"})


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limit_identity(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            return f"actor:{decode_token(token)}"
        except InvalidCredentialsError:
            pass  # invalid tokens are rejected later by the auth dependency
    return f"ip:{_client_ip(request)}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
    ) -> None:
        super().__init__(app)
        self._redis_factory = redis_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        group = "read" if request.method in _READ_METHODS else "write"
        limit = (
            settings.RATE_LIMIT_READ_PER_MINUTE
            if group == "read"
            else settings.RATE_LIMIT_WRITE_PER_MINUTE
        )
        key = f"ratelimit:{rate_limit_identity(request)}:{group}"

        try:
            redis = await self._redis_factory()
            count = await redis.incr(key)
            ttl = await redis.ttl(key)
            if ttl < 0:
                # First hit of the window, or an earlier EXPIRE was lost
                await redis.expire(key, WINDOW_SECONDS)
                ttl = WINDOW_SECONDS
        except RedisError as exc:
            logger.warning("Rate limiter unavailable, passing request: %s", exc)
            return await call_next(request)

        if count > limit:
            err = RateLimitError()
            body = error_response(err.code, err.message, err.kind)
            body.request_id = getattr(request.state, "request_id", body.request_id)
            logger.warning("Rate limit exceeded key=%s count=%d limit=%d", key, count, limit)
            return JSONResponse(
                status_code=err.http_status,
                content=body.model_dump(),
                headers={"Retry-After": str(ttl)},
            )
        return await call_next(request)
