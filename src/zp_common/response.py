"""Unified API response envelope.

All API endpoints return this format:
{
    "code": 0,           // 0=success, non-0=AppError code
    "message": "success",
    "data": { ... },     // null on error, except transfer actions (state snapshot)
    "timestamp": "...",
    "request_id": "..."
}

Pass the incoming Request so `request_id` matches the X-Request-ID header
set by RequestLogMiddleware; without one a fresh id is generated.
"""

import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.zp_common.datetime_utils import utc_now
from src.zp_common.errors import AppError


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=new_request_id)


def _request_id(request: Request | None) -> str:
    if request is None:
        return new_request_id()
    return getattr(request.state, "request_id", None) or new_request_id()


def success_response(
    data: Any = None,
    message: str = "success",
    request: Request | None = None,
) -> ApiResponse:
    return ApiResponse(code=0, message=message, data=data, request_id=_request_id(request))


def error_response(
    code: int,
    message: str,
    data: Any = None,
    request: Request | None = None,
) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=data, request_id=_request_id(request))


def error_json(exc: AppError, request: Request | None = None, data: Any = None) -> JSONResponse:
    """Render an AppError as the envelope with the error's HTTP status."""
    resp = error_response(exc.code, exc.message, data, request)
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())
