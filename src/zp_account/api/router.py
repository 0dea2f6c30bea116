"""zp_account REST API: all endpoints require a Bearer token."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.zp_account.application.schemas import ProfileResponse
from src.zp_account.application.service import AccountApplicationService
from src.zp_backend.domain.models import AuthUser
from src.zp_backend.domain.repository import BackendProtocol
from src.zp_common.response import ApiResponse, success_response
from src.zp_gateway.auth.dependencies import get_current_user, get_user_backend

router = APIRouter(prefix="/account", tags=["account"])


def get_account_service(
    backend: Annotated[BackendProtocol, Depends(get_user_backend)],
) -> AccountApplicationService:
    return AccountApplicationService(backend)


@router.get("/profile")
async def get_profile(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    service: Annotated[AccountApplicationService, Depends(get_account_service)],
    request: Request,
) -> ApiResponse:
    profile = await service.load_profile(current_user)
    return success_response(
        ProfileResponse.from_profile(profile).model_dump(mode="json"), request=request
    )


@router.get("/balance")
async def get_balance(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    service: Annotated[AccountApplicationService, Depends(get_account_service)],
    request: Request,
) -> ApiResponse:
    data = await service.get_balance(current_user)
    return success_response(data.model_dump(mode="json"), request=request)


@router.get("/transactions")
async def list_transactions(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    service: Annotated[AccountApplicationService, Depends(get_account_service)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Most recent N transactions"),
) -> ApiResponse:
    data = await service.list_transactions(current_user, limit)
    return success_response(data.model_dump(mode="json"), request=request)
