"""Public read of the platform's payment instructions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.database import get_db_session
from src.em_common.response import ApiResponse, success_response
from src.em_pricing.application.schemas import PaymentInstructionsResponse
from src.em_pricing.application.service import PlatformSettingsService

router = APIRouter(prefix="/settings", tags=["settings"])
_service = PlatformSettingsService()


@router.get("/payment-instructions", response_model=ApiResponse)
async def get_payment_instructions(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    instructions = await _service.resolve_payment_instructions(db)
    resp = success_response(PaymentInstructionsResponse.with_defaults(instructions).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
