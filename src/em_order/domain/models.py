"""Order domain model: pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.em_common.enums import OrderStatus


@dataclass(frozen=True)
class FeeSplit:
    listing_price: Decimal
    platform_fee: Decimal
    seller_payout: Decimal


@dataclass
class Order:
    id: str
    listing_id: str
    buyer_id: str
    seller_id: str  # snapshot of listing.seller_id at creation
    # Financial snapshot, never recomputed
    listing_price: Decimal
    platform_fee: Decimal
    seller_payout: Decimal
    status: OrderStatus
    # Buyer contact snapshot at purchase time
    buyer_phone: str
    buyer_email: str
    admin_notes: str | None = None
    payment_screenshot_url: str | None = None
    # Audit trail only; status is the single source of truth
    created_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    refunded_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def payout_due(self) -> bool:
        """Seller payout is finalized once the buyer confirms completion."""
        return self.status == OrderStatus.COMPLETED


@dataclass
class OrderView:
    """Order projection for one requester. Withheld fields are None, never absent."""

    order: Order
    listing_username: str | None
    listing_avatar_url: str | None
    buyer_phone: str | None
    buyer_email: str | None
    seller_contact_phone: str | None
    seller_contact_email: str | None
    seller_payment_details: str | None
    seller_contact_disclosed: bool
