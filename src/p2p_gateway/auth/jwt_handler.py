"""JWT access token creation and verification.

The engine never authenticates anyone itself: an external identity bootstrap
issues an HS256 access token whose `sub` is the opaque actor id, and every
request presents it as a Bearer token.

MVP NOTE: No token revocation. Deactivating the actor is the way to lock
someone out before the token expires.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.p2p_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(actor_id: str, expires_in: timedelta | None = None) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": actor_id,
        "type": "access",
        "iat": now,
        "exp": now + (expires_in if expires_in is not None else _ACCESS_EXPIRE),
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> str:
    """Decode and validate an access token, return the actor id (`sub`).

    Raises:
        InvalidCredentialsError: token malformed, expired, wrong type or without subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()

    actor_id = payload.get("sub")
    if not actor_id or not isinstance(actor_id, str):
        raise InvalidCredentialsError()
    return actor_id
