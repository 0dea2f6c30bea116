"""FastAPI dependencies: current user and per-user backend.

Usage in any protected router:
    from src.zp_gateway.auth.dependencies import get_current_user, get_user_backend

    @router.get("/protected")
    async def protected(
        user: Annotated[AuthUser, Depends(get_current_user)],
        backend: Annotated[BackendProtocol, Depends(get_user_backend)],
    ):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.zp_backend.domain.models import AuthUser
from src.zp_backend.domain.repository import BackendProtocol
from src.zp_backend.infrastructure.provider import get_backend
from src.zp_backend.infrastructure.supabase_client import SupabaseBackend
from src.zp_common.errors import InvalidCredentialsError
from src.zp_gateway.auth.jwt_handler import decode_access_token, user_from_claims

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(token: Annotated[str, Depends(oauth2_scheme)]) -> AuthUser:
    """Validate the Bearer token and return the signed-in user.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    try:
        payload = decode_access_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
    return user_from_claims(payload)


async def get_user_backend(
    token: Annotated[str, Depends(oauth2_scheme)],
    backend: Annotated[SupabaseBackend, Depends(get_backend)],
) -> BackendProtocol:
    """Backend client authorized as the caller, so row-level security applies."""
    return backend.for_user(token)
