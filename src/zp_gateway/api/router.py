"""Auth API router: signup, login, logout.

All endpoints return ApiResponse. Sign-up and sign-in go straight to the
hosted auth API through the shared anonymous backend client.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from src.zp_backend.infrastructure.provider import get_backend
from src.zp_backend.infrastructure.supabase_client import SupabaseBackend
from src.zp_common.response import ApiResponse, success_response
from src.zp_gateway.auth.dependencies import oauth2_scheme
from src.zp_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    SignUpRequest,
    SignUpResponse,
    UserInfo,
)
from src.zp_gateway.user.service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(
    backend: Annotated[SupabaseBackend, Depends(get_backend)],
) -> AuthService:
    return AuthService(backend)


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Create an account",
)
async def sign_up(
    request: Request,
    body: SignUpRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    user = await service.sign_up(
        body.email, body.password, body.full_name, body.username, body.phone_number
    )
    data = SignUpResponse(
        user_id=user.id,
        email=user.email,
        username=user.metadata.get("username", body.username),
        phone_number=user.metadata.get("phone_number", ""),
    )
    return success_response(
        data.model_dump(), message="Check your email to confirm your account", request=request
    )


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Sign in with email and password",
)
async def login(
    request: Request,
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    session = await service.sign_in(body.email, body.password)
    data = LoginResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user=UserInfo(user_id=session.user.id, email=session.user.email),
    )
    return success_response(data.model_dump(), message="Login successful", request=request)


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Sign out",
)
async def logout(
    request: Request,
    token: Annotated[str, Depends(oauth2_scheme)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    await service.sign_out(token)
    return success_response(None, message="Signed out", request=request)
