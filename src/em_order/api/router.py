# src/em_order/api/router.py
"""Buyer/seller order endpoints. Admin decisions live under /admin."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.database import get_db_session
from src.em_common.response import ApiResponse, success_response
from src.em_gateway.auth.dependencies import get_current_principal
from src.em_order.application.schemas import (
    CreateOrderRequest,
    DeclarePaymentRequest,
    OrderListResponse,
    OrderResponse,
)
from src.em_order.application.service import OrderLedgerService
from src.em_order.domain.models import OrderView
from src.em_policy.domain.principal import Principal

router = APIRouter(prefix="/orders", tags=["orders"])
_service = OrderLedgerService()

PrincipalDep = Annotated[Principal, Depends(get_current_principal)]
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


def _page(views: list[OrderView], next_cursor: str | None, has_more: bool) -> dict:
    return OrderListResponse(
        items=[OrderResponse.from_view(v) for v in views],
        next_cursor=next_cursor,
        has_more=has_more,
    ).model_dump()


async def _view(db: AsyncSession, principal: Principal, order_id: str) -> dict:
    view = await _service.get_order_view(db, principal, order_id)
    return OrderResponse.from_view(view).model_dump()


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: Request,
    body: CreateOrderRequest,
    principal: PrincipalDep,
    db: SessionDep,
) -> ApiResponse:
    order = await _service.create_order(
        db, principal, body.listing_id, body.buyer_phone, str(body.buyer_email)
    )
    return _respond(request, await _view(db, principal, order.id))


@router.get("", response_model=ApiResponse)
async def list_my_orders(
    request: Request,
    principal: PrincipalDep,
    db: SessionDep,
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None, description="Pagination cursor (order ID)"),
) -> ApiResponse:
    page = await _service.list_my_orders(db, principal, cursor, limit)
    return _respond(request, _page(*page))


@router.get("/selling", response_model=ApiResponse)
async def list_seller_orders(
    request: Request,
    principal: PrincipalDep,
    db: SessionDep,
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    page = await _service.list_seller_orders(db, principal, cursor, limit)
    return _respond(request, _page(*page))


@router.get("/{order_id}", response_model=ApiResponse)
async def get_order(
    request: Request, order_id: str, principal: PrincipalDep, db: SessionDep
) -> ApiResponse:
    return _respond(request, await _view(db, principal, order_id))


@router.post("/{order_id}/declare-payment", response_model=ApiResponse)
async def declare_payment(
    request: Request,
    order_id: str,
    principal: PrincipalDep,
    db: SessionDep,
    body: DeclarePaymentRequest | None = None,
) -> ApiResponse:
    screenshot = body.payment_screenshot_url if body else None
    await _service.declare_payment_made(db, principal, order_id, screenshot)
    return _respond(request, await _view(db, principal, order_id))


@router.post("/{order_id}/complete", response_model=ApiResponse)
async def confirm_completion(
    request: Request, order_id: str, principal: PrincipalDep, db: SessionDep
) -> ApiResponse:
    await _service.confirm_completion(db, principal, order_id)
    return _respond(request, await _view(db, principal, order_id))
