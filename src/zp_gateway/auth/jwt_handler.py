"""Verification of backend-issued access tokens.

The hosted auth service signs access tokens with the project's JWT secret
(HS256, audience "authenticated"). Tokens are only verified here, never
issued: sign-in happens against the backend, which returns the token pair.
"""

from jose import JWTError, jwt

from config.settings import settings
from src.zp_backend.domain.models import AuthUser
from src.zp_common.errors import InvalidCredentialsError


def decode_access_token(token: str) -> dict[str, object]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: signature, expiry or audience check failed,
                                 or the token has no subject.
    """
    try:
        payload: dict[str, object] = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload


def user_from_claims(payload: dict[str, object]) -> AuthUser:
    metadata = payload.get("user_metadata")
    return AuthUser(
        id=str(payload["sub"]),
        email=str(payload.get("email") or ""),
        metadata={
            str(k): str(v)
            for k, v in (metadata.items() if isinstance(metadata, dict) else [])
            if v is not None
        },
    )
