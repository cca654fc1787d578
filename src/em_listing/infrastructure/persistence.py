# src/em_listing/infrastructure/persistence.py
"""ListingRepository: raw SQL persistence implementation.

asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.enums import PricingStrategy
from src.em_listing.domain.models import Listing, ProfileSnapshot

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, seller_id, username, follower_count, avatar_url,
    pricing_strategy, fixed_price, percentage_rate,
    contact_phone, contact_email, payment_details,
    is_published, last_synced_at, created_at, updated_at
"""

_INSERT_LISTING_SQL = text("""
    INSERT INTO listings (id, seller_id, username, follower_count, avatar_url,
        pricing_strategy, fixed_price, percentage_rate,
        contact_phone, contact_email, payment_details,
        is_published, last_synced_at)
    VALUES (:id, :seller_id, :username, :follower_count, :avatar_url,
        :pricing_strategy, :fixed_price, :percentage_rate,
        :contact_phone, :contact_email, :payment_details,
        :is_published, :last_synced_at)
""")

# username is deliberately absent: handles are immutable once listed
_UPDATE_LISTING_SQL = text(f"""
    UPDATE listings
    SET pricing_strategy = :pricing_strategy,
        fixed_price = :fixed_price,
        percentage_rate = :percentage_rate,
        contact_phone = :contact_phone,
        contact_email = :contact_email,
        payment_details = :payment_details,
        is_published = :is_published,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_UPDATE_PROFILE_SQL = text(f"""
    UPDATE listings
    SET follower_count = :follower_count,
        avatar_url = :avatar_url,
        last_synced_at = :synced_at,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_DELETE_LISTING_SQL = text("DELETE FROM listings WHERE id = :id RETURNING id")

_GET_LISTING_SQL = text(f"SELECT {_COLUMNS} FROM listings WHERE id = :id")

_LIST_PUBLISHED_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM listings
    WHERE is_published = TRUE
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < CAST(:cursor_id AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_BY_SELLER_SQL = text(f"""
    SELECT {_COLUMNS} FROM listings WHERE seller_id = :seller_id ORDER BY id DESC
""")

_LIST_ALL_SQL = text(f"SELECT {_COLUMNS} FROM listings ORDER BY id DESC")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_listing(row: Any) -> Listing:
    return Listing(
        id=row.id,
        seller_id=row.seller_id,
        username=row.username,
        follower_count=row.follower_count,
        avatar_url=row.avatar_url,
        pricing_strategy=PricingStrategy(row.pricing_strategy),
        fixed_price=row.fixed_price,
        percentage_rate=row.percentage_rate,
        contact_phone=row.contact_phone,
        contact_email=row.contact_email,
        payment_details=row.payment_details,
        is_published=row.is_published,
        last_synced_at=row.last_synced_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _listing_params(listing: Listing) -> dict[str, Any]:
    return {
        "id": listing.id,
        "pricing_strategy": listing.pricing_strategy.value,
        "fixed_price": listing.fixed_price,
        "percentage_rate": listing.percentage_rate,
        "contact_phone": listing.contact_phone,
        "contact_email": listing.contact_email,
        "payment_details": listing.payment_details,
        "is_published": listing.is_published,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    """Concrete implementation of ListingRepositoryProtocol using raw SQL."""

    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None:
        result = await db.execute(_GET_LISTING_SQL, {"id": listing_id})
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def save(self, db: AsyncSession, listing: Listing) -> None:
        params = _listing_params(listing)
        params.update(
            seller_id=listing.seller_id,
            username=listing.username,
            follower_count=listing.follower_count,
            avatar_url=listing.avatar_url,
            last_synced_at=listing.last_synced_at,
        )
        await db.execute(_INSERT_LISTING_SQL, params)

    async def update(self, db: AsyncSession, listing: Listing) -> Listing | None:
        result = await db.execute(_UPDATE_LISTING_SQL, _listing_params(listing))
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def update_profile(
        self,
        db: AsyncSession,
        listing_id: str,
        snapshot: ProfileSnapshot,
        synced_at: datetime,
    ) -> Listing | None:
        result = await db.execute(
            _UPDATE_PROFILE_SQL,
            {
                "id": listing_id,
                "follower_count": snapshot.follower_count,
                "avatar_url": snapshot.avatar_url,
                "synced_at": synced_at,
            },
        )
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def delete(self, db: AsyncSession, listing_id: str) -> bool:
        result = await db.execute(_DELETE_LISTING_SQL, {"id": listing_id})
        return result.fetchone() is not None

    async def list_published(
        self, db: AsyncSession, cursor_id: str | None, limit: int
    ) -> list[Listing]:
        result = await db.execute(
            _LIST_PUBLISHED_SQL, {"cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_listing(row) for row in result.fetchall()]

    async def list_by_seller(self, db: AsyncSession, seller_id: str) -> list[Listing]:
        result = await db.execute(_LIST_BY_SELLER_SQL, {"seller_id": seller_id})
        return [_row_to_listing(row) for row in result.fetchall()]

    async def list_all(self, db: AsyncSession) -> list[Listing]:
        result = await db.execute(_LIST_ALL_SQL)
        return [_row_to_listing(row) for row in result.fetchall()]
