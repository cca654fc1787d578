# src/em_order/application/schemas.py
"""Request/response schemas for the order ledger API.

Money leaves the API as a decimal string plus a display string; withheld
contact fields are present with a null value so the response shape never
depends on who is asking.
"""
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.em_common.datetime_utils import iso_or_none
from src.em_common.enums import OrderStatus
from src.em_common.money import money_to_display
from src.em_order.domain.models import Order, OrderView
from src.em_order.domain.state_machine import allowed_events


class CreateOrderRequest(BaseModel):
    listing_id: str = Field(..., min_length=1, max_length=32)
    buyer_phone: str = Field(..., min_length=6, max_length=32)
    buyer_email: EmailStr

    @field_validator("buyer_phone")
    @classmethod
    def strip_phone(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("buyer_phone must not be blank")
        return v


class DeclarePaymentRequest(BaseModel):
    payment_screenshot_url: str | None = Field(None, max_length=2048)


class AdminDecisionRequest(BaseModel):
    notes: str | None = Field(None, max_length=2000)


def _money(amount: Decimal) -> str:
    return f"{amount:.2f}"


class OrderResponse(BaseModel):
    id: str
    listing_id: str
    listing_username: str | None
    listing_avatar_url: str | None
    buyer_id: str
    seller_id: str
    status: OrderStatus
    listing_price: str
    listing_price_display: str
    platform_fee: str
    platform_fee_display: str
    seller_payout: str
    seller_payout_display: str
    buyer_phone: str | None
    buyer_email: str | None
    seller_contact_phone: str | None
    seller_contact_email: str | None
    seller_payment_details: str | None
    seller_contact_disclosed: bool
    payout_due: bool
    admin_notes: str | None
    payment_screenshot_url: str | None
    next_events: list[str]
    created_at: str | None
    confirmed_at: str | None
    completed_at: str | None
    refunded_at: str | None

    @classmethod
    def from_view(cls, view: OrderView) -> "OrderResponse":
        order: Order = view.order
        return cls(
            id=order.id,
            listing_id=order.listing_id,
            listing_username=view.listing_username,
            listing_avatar_url=view.listing_avatar_url,
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            status=order.status,
            listing_price=_money(order.listing_price),
            listing_price_display=money_to_display(order.listing_price),
            platform_fee=_money(order.platform_fee),
            platform_fee_display=money_to_display(order.platform_fee),
            seller_payout=_money(order.seller_payout),
            seller_payout_display=money_to_display(order.seller_payout),
            buyer_phone=view.buyer_phone,
            buyer_email=view.buyer_email,
            seller_contact_phone=view.seller_contact_phone,
            seller_contact_email=view.seller_contact_email,
            seller_payment_details=view.seller_payment_details,
            seller_contact_disclosed=view.seller_contact_disclosed,
            payout_due=order.payout_due,
            admin_notes=order.admin_notes,
            payment_screenshot_url=order.payment_screenshot_url,
            next_events=[e.value for e in allowed_events(order.status)],
            created_at=iso_or_none(order.created_at),
            confirmed_at=iso_or_none(order.confirmed_at),
            completed_at=iso_or_none(order.completed_at),
            refunded_at=iso_or_none(order.refunded_at),
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
