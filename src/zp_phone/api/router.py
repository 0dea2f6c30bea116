"""Phone helper endpoint for the sign-up and profile forms (no auth required)."""

from fastapi import APIRouter, Query, Request

from src.zp_common.response import ApiResponse, success_response
from src.zp_phone.normalizer import format_for_display, is_valid, normalize

router = APIRouter(prefix="/phone", tags=["phone"])


@router.get("/normalize")
async def normalize_phone(
    request: Request,
    number: str = Query(..., min_length=1, max_length=32),
) -> ApiResponse:
    return success_response({
        "input": number,
        "canonical": normalize(number),
        "display": format_for_display(number),
        "is_valid": is_valid(number),
    }, request=request)
