# src/em_admin/api/router.py
"""Admin REST API: payment decisions, oversight, users, settings, sync."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_admin.application.service import AdminService
from src.em_common.database import get_db_session
from src.em_common.enums import OrderStatus, Role
from src.em_common.response import ApiResponse, success_response
from src.em_gateway.auth.dependencies import get_current_principal
from src.em_listing.application.service import ListingService
from src.em_order.application.schemas import (
    AdminDecisionRequest,
    OrderListResponse,
    OrderResponse,
)
from src.em_order.application.service import OrderLedgerService
from src.em_policy.domain.principal import Principal
from src.em_pricing.application.schemas import (
    PaymentInstructionsResponse,
    UpdatePlatformSettingsRequest,
)
from src.em_pricing.application.service import PlatformSettingsService

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()
_ledger = OrderLedgerService()
_settings = PlatformSettingsService()
_listings = ListingService()

PrincipalDep = Annotated[Principal, Depends(get_current_principal)]
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


class GrantRoleRequest(BaseModel):
    role: Role


def _respond(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


async def _order_view(db: AsyncSession, principal: Principal, order_id: str) -> dict:
    view = await _ledger.get_order_view(db, principal, order_id)
    return OrderResponse.from_view(view).model_dump()


@router.post("/orders/{order_id}/confirm-payment", response_model=ApiResponse)
async def confirm_payment(
    request: Request,
    order_id: str,
    principal: PrincipalDep,
    db: SessionDep,
    body: AdminDecisionRequest | None = None,
) -> ApiResponse:
    await _ledger.confirm_payment(db, principal, order_id, body.notes if body else None)
    return _respond(request, await _order_view(db, principal, order_id), "Payment confirmed")


@router.post("/orders/{order_id}/refund", response_model=ApiResponse)
async def refund_order(
    request: Request,
    order_id: str,
    principal: PrincipalDep,
    db: SessionDep,
    body: AdminDecisionRequest | None = None,
) -> ApiResponse:
    await _ledger.refund_order(db, principal, order_id, body.notes if body else None)
    return _respond(request, await _order_view(db, principal, order_id), "Order refunded")


@router.get("/orders", response_model=ApiResponse)
async def list_orders(
    request: Request,
    principal: PrincipalDep,
    db: SessionDep,
    status: OrderStatus | None = Query(None, description="Filter by order status"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    views, next_cursor, has_more = await _ledger.list_all_orders(
        db, principal, status, cursor, limit
    )
    page = OrderListResponse(
        items=[OrderResponse.from_view(v) for v in views],
        next_cursor=next_cursor,
        has_more=has_more,
    )
    return _respond(request, page.model_dump())


@router.get("/stats", response_model=ApiResponse)
async def stats(request: Request, principal: PrincipalDep, db: SessionDep) -> ApiResponse:
    return _respond(request, await _service.get_stats(db, principal))


@router.get("/users", response_model=ApiResponse)
async def list_users(
    request: Request,
    principal: PrincipalDep,
    db: SessionDep,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    return _respond(request, await _service.list_users(db, principal, limit, offset))


@router.post("/users/{user_id}/roles", response_model=ApiResponse)
async def grant_role(
    request: Request,
    user_id: str,
    body: GrantRoleRequest,
    principal: PrincipalDep,
    db: SessionDep,
) -> ApiResponse:
    roles = await _service.grant_role(db, principal, user_id, body.role)
    return _respond(request, {"user_id": user_id, "roles": roles})


@router.get("/settings", response_model=ApiResponse)
async def list_settings(
    request: Request, principal: PrincipalDep, db: SessionDep
) -> ApiResponse:
    rows = await _settings.list_settings(db, principal)
    return _respond(request, [r.model_dump() for r in rows])


@router.put("/settings", response_model=ApiResponse)
async def update_settings(
    request: Request,
    body: UpdatePlatformSettingsRequest,
    principal: PrincipalDep,
    db: SessionDep,
) -> ApiResponse:
    changes = {k: getattr(body, k) for k in body.model_fields_set}
    instructions = await _settings.update_platform_settings(db, principal, changes)
    data = PaymentInstructionsResponse.with_defaults(instructions).model_dump()
    return _respond(request, data, "Settings updated")


@router.post("/listings/sync", response_model=ApiResponse)
async def sync_all_listings(
    request: Request, principal: PrincipalDep, db: SessionDep
) -> ApiResponse:
    summary = await _listings.sync_all(db, principal)
    return _respond(request, summary.model_dump())
