"""Unit tests for JWT handler."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from config.settings import settings
from src.p2p_common.errors import InvalidCredentialsError
from src.p2p_gateway.auth.jwt_handler import create_access_token, decode_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("actor-123")
    # Decode without verification to inspect claims
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "actor-123"
    assert payload["type"] == "access"
    assert payload["exp"] > payload["iat"]


def test_decode_returns_actor_id() -> None:
    token = create_access_token("actor-abc")
    assert decode_token(token) == "actor-abc"


def test_expired_access_token_raises_credentials_error() -> None:
    with patch(
        "src.p2p_gateway.auth.jwt_handler._ACCESS_EXPIRE",
        timedelta(seconds=-1),
    ):
        token = create_access_token("actor-abc")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_explicit_expiry_overrides_default() -> None:
    token = create_access_token("actor-abc", expires_in=timedelta(seconds=-5))
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_tampered_token_raises_error() -> None:
    token = create_access_token("actor-abc")
    tampered = token[:-4] + "xxxx"
    with pytest.raises(InvalidCredentialsError):
        decode_token(tampered)


def test_garbage_token_raises_error() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not-a-jwt")


def _sign(payload: dict) -> str:
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def test_wrong_token_type_rejected() -> None:
    exp = datetime.now(UTC) + timedelta(minutes=5)
    token = _sign({"sub": "actor-abc", "type": "refresh", "exp": exp})
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_missing_subject_rejected() -> None:
    exp = datetime.now(UTC) + timedelta(minutes=5)
    token = _sign({"type": "access", "exp": exp})
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_token_signed_with_other_secret_rejected() -> None:
    exp = datetime.now(UTC) + timedelta(minutes=5)
    token = jwt.encode(
        {"sub": "actor-abc", "type": "access", "exp": exp},
        "some-other-secret",
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)
