"""Unit tests for access token verification."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from config.settings import settings
from src.zp_common.errors import InvalidCredentialsError
from src.zp_gateway.auth.jwt_handler import decode_access_token, user_from_claims


def _encode(claims: dict[str, object], secret: str | None = None) -> str:
    return str(jwt.encode(claims, secret or settings.SUPABASE_JWT_SECRET, algorithm="HS256"))


def _claims(**overrides: object) -> dict[str, object]:
    claims: dict[str, object] = {
        "sub": "user-abc",
        "email": "alice@example.com",
        "aud": "authenticated",
        "exp": datetime.now(UTC) + timedelta(minutes=5),
        "user_metadata": {"username": "alice", "full_name": "Alice", "avatar": None},
    }
    claims.update(overrides)
    return claims


def test_decode_valid_token(make_token) -> None:
    payload = decode_access_token(make_token("user-abc"))
    assert payload["sub"] == "user-abc"
    assert payload["aud"] == "authenticated"


def test_wrong_secret_rejected() -> None:
    token = _encode(_claims(), secret="some-other-secret-entirely-wrong!!")
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(token)


def test_wrong_audience_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(_encode(_claims(aud="anon")))


def test_expired_token_rejected(make_token) -> None:
    token = make_token(expires_in=timedelta(seconds=-1))
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(token)


def test_token_without_subject_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(_encode(_claims(sub="")))


def test_garbage_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_access_token("not-a-jwt")


def test_user_from_claims_drops_null_metadata() -> None:
    user = user_from_claims(_claims())
    assert user.id == "user-abc"
    assert user.email == "alice@example.com"
    assert user.metadata == {"username": "alice", "full_name": "Alice"}


def test_user_from_claims_without_metadata() -> None:
    user = user_from_claims({"sub": "user-abc"})
    assert user.email == ""
    assert user.metadata == {}
