"""Pydantic schemas for em_listing API."""

from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field

from src.em_common.datetime_utils import iso_or_none
from src.em_common.enums import PricingStrategy
from src.em_common.money import money_to_display
from src.em_listing.domain.models import Listing
from src.em_policy.domain.masking import mask_email
from src.em_pricing.domain.resolver import resolve_price


class CreateListingRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    pricing_strategy: PricingStrategy
    fixed_price: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    percentage_rate: Decimal | None = Field(None, max_digits=5, decimal_places=2)
    contact_phone: str | None = Field(None, max_length=32)
    contact_email: EmailStr | None = None
    payment_details: str | None = Field(None, max_length=2000)
    is_published: bool = False


class UpdateListingRequest(BaseModel):
    """Partial update; the account handle cannot be changed."""

    pricing_strategy: PricingStrategy | None = None
    fixed_price: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    percentage_rate: Decimal | None = Field(None, max_digits=5, decimal_places=2)
    contact_phone: str | None = Field(None, max_length=32)
    contact_email: EmailStr | None = None
    payment_details: str | None = Field(None, max_length=2000)


class PublishRequest(BaseModel):
    is_published: bool


class MarketplaceListing(BaseModel):
    """Public card: resolved price, masked email, no phone or payment details."""

    id: str
    username: str
    follower_count: int
    avatar_url: str | None
    pricing_strategy: PricingStrategy
    price: str
    price_display: str
    contact_email_masked: str
    last_synced_at: str | None

    @classmethod
    def from_listing(cls, listing: Listing) -> "MarketplaceListing":
        price = resolve_price(listing)
        return cls(
            id=listing.id,
            username=listing.username,
            follower_count=listing.follower_count,
            avatar_url=listing.avatar_url,
            pricing_strategy=listing.pricing_strategy,
            price=f"{price:.2f}",
            price_display=money_to_display(price),
            contact_email_masked=mask_email(listing.contact_email),
            last_synced_at=iso_or_none(listing.last_synced_at),
        )


class OwnerListing(MarketplaceListing):
    """Seller's own view of a listing, including private fields."""

    seller_id: str
    fixed_price: str | None
    percentage_rate: str | None
    contact_phone: str | None
    contact_email: str | None
    payment_details: str | None
    is_published: bool

    @classmethod
    def from_listing(cls, listing: Listing) -> "OwnerListing":
        public = MarketplaceListing.from_listing(listing)
        return cls(
            **public.model_dump(),
            seller_id=listing.seller_id,
            fixed_price=f"{listing.fixed_price:.2f}" if listing.fixed_price is not None else None,
            percentage_rate=(
                str(listing.percentage_rate) if listing.percentage_rate is not None else None
            ),
            contact_phone=listing.contact_phone,
            contact_email=listing.contact_email,
            payment_details=listing.payment_details,
            is_published=listing.is_published,
        )


class MarketplacePage(BaseModel):
    items: list[MarketplaceListing]
    next_cursor: str | None
    has_more: bool


class SyncSummary(BaseModel):
    total: int
    synced: int
    failed: int
