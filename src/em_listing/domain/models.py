"""Domain models for em_listing: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.em_common.enums import PricingStrategy


@dataclass
class Listing:
    id: str
    seller_id: str
    username: str  # account handle, immutable once listed
    follower_count: int
    avatar_url: str | None
    pricing_strategy: PricingStrategy
    fixed_price: Decimal | None  # set iff pricing_strategy == FIXED
    percentage_rate: Decimal | None  # 0-100, set iff PERCENTAGE_OF_FOLLOWERS
    contact_phone: str | None
    contact_email: str | None
    payment_details: str | None  # seller's own bank/FPS/PayMe info
    is_published: bool
    last_synced_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ProfileSnapshot:
    """Last values reported by the enrichment collaborator."""

    follower_count: int
    avatar_url: str | None


def normalize_username(raw: str) -> str:
    """'@ some_handle ' -> 'some_handle'."""
    return raw.strip().removeprefix("@").strip()
