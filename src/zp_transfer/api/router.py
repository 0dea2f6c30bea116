"""Send-money REST API: drives the caller's transfer workflow.

Every endpoint answers with a TransferStateResponse snapshot. When an action
fails, the error envelope still carries the snapshot in `data` so the client
can render the inline error on the step it stayed on. Those routes return either
envelope, hence `response_model=None`.
"""

import inspect
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.zp_backend.domain.models import AuthUser
from src.zp_backend.domain.repository import BackendProtocol
from src.zp_common.errors import AppError
from src.zp_common.response import ApiResponse, error_json, success_response
from src.zp_gateway.auth.dependencies import get_current_user, get_user_backend
from src.zp_transfer.application.registry import WorkflowRegistry, get_registry
from src.zp_transfer.application.schemas import (
    DetailsRequest,
    RecipientQueryRequest,
    SearchRequest,
    TransferStateResponse,
)
from src.zp_transfer.application.service import TransferApplicationService
from src.zp_transfer.domain.workflow import TransferWorkflow

router = APIRouter(prefix="/transfer", tags=["transfer"])

CurrentUser = Annotated[AuthUser, Depends(get_current_user)]


def get_transfer_service(
    registry: Annotated[WorkflowRegistry, Depends(get_registry)],
    backend: Annotated[BackendProtocol, Depends(get_user_backend)],
) -> TransferApplicationService:
    return TransferApplicationService(registry, backend)


Service = Annotated[TransferApplicationService, Depends(get_transfer_service)]


def _state(workflow: TransferWorkflow) -> dict[str, Any]:
    return TransferStateResponse.from_workflow(workflow).model_dump(mode="json")


def _snapshot(request: Request, workflow: TransferWorkflow, message: str = "success") -> ApiResponse:
    return success_response(_state(workflow), message=message, request=request)


async def _act(
    request: Request,
    workflow: TransferWorkflow,
    action: Callable[[], Any],
    message: str = "success",
) -> ApiResponse | JSONResponse:
    """Run a workflow action; on AppError reply with the error plus the snapshot."""
    try:
        result = action()
        if inspect.isawaitable(result):
            await result
    except AppError as exc:
        return error_json(exc, request, _state(workflow))
    return _snapshot(request, workflow, message)


@router.post("", status_code=status.HTTP_201_CREATED)
async def open_transfer(user: CurrentUser, service: Service, request: Request) -> ApiResponse:
    workflow = await service.open(user)
    return _snapshot(request, workflow, message="Transfer started")


@router.get("")
async def get_transfer(user: CurrentUser, service: Service, request: Request) -> ApiResponse:
    return _snapshot(request, service.current(user))


@router.put("/recipient", response_model=None)
async def update_recipient(
    body: RecipientQueryRequest, user: CurrentUser, service: Service, request: Request
) -> ApiResponse | JSONResponse:
    """Typing: schedules a debounced search. Poll GET /transfer for the result."""
    workflow = service.current(user)
    return await _act(request, workflow, lambda: workflow.update_recipient_query(body.text))


@router.post("/search", response_model=None)
async def search_recipient(
    body: SearchRequest, user: CurrentUser, service: Service, request: Request
) -> ApiResponse | JSONResponse:
    workflow = service.current(user)
    return await _act(request, workflow, lambda: workflow.search(body.text))


@router.put("/details", response_model=None)
async def update_details(
    body: DetailsRequest, user: CurrentUser, service: Service, request: Request
) -> ApiResponse | JSONResponse:
    workflow = service.current(user)
    return await _act(
        request, workflow, lambda: workflow.update_details(amount=body.amount, note=body.note)
    )


@router.post("/continue", response_model=None)
async def continue_transfer(
    user: CurrentUser, service: Service, request: Request
) -> ApiResponse | JSONResponse:
    workflow = service.current(user)
    return await _act(request, workflow, workflow.proceed)


@router.post("/back", response_model=None)
async def back(user: CurrentUser, service: Service, request: Request) -> ApiResponse | JSONResponse:
    workflow = service.current(user)
    return await _act(request, workflow, workflow.back)


@router.post("/confirm", response_model=None)
async def confirm(
    user: CurrentUser, service: Service, request: Request
) -> ApiResponse | JSONResponse:
    workflow = service.current(user)
    return await _act(request, workflow, workflow.confirm, message="Transfer successful")


@router.post("/done")
async def done(user: CurrentUser, service: Service, request: Request) -> ApiResponse:
    workflow = await service.done(user)
    return _snapshot(request, workflow, message="Transfer closed")


@router.delete("")
async def close_transfer(user: CurrentUser, service: Service, request: Request) -> ApiResponse:
    service.close(user)
    return success_response(None, message="Transfer closed", request=request)
