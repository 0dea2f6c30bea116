"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.zp_account.api.router import router as account_router
from src.zp_backend.infrastructure.provider import close_backend, get_backend
from src.zp_common.errors import AppError
from src.zp_common.response import error_json
from src.zp_gateway.api.router import router as auth_router
from src.zp_gateway.middleware.request_log import RequestLogMiddleware
from src.zp_phone.api.router import router as phone_router
from src.zp_transfer.api.router import router as transfer_router
from src.zp_transfer.application.registry import get_registry

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create the backend connection pool. Shutdown: drop workflows, close pool."""
    get_backend()
    yield
    get_registry().close_all()
    await close_backend()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_json(exc, request)


app.include_router(auth_router, prefix="/api/v1")
app.include_router(account_router, prefix="/api/v1")
app.include_router(transfer_router, prefix="/api/v1")
app.include_router(phone_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
