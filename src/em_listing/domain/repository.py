# src/em_listing/domain/repository.py
"""ListingRepository Protocol: the order ledger only ever calls get_by_id."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.em_listing.domain.models import Listing, ProfileSnapshot


class ListingRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None: ...

    async def save(self, db: AsyncSession, listing: Listing) -> None: ...

    async def update(self, db: AsyncSession, listing: Listing) -> Listing | None: ...

    async def update_profile(
        self,
        db: AsyncSession,
        listing_id: str,
        snapshot: ProfileSnapshot,
        synced_at: datetime,
    ) -> Listing | None: ...

    async def delete(self, db: AsyncSession, listing_id: str) -> bool: ...

    async def list_published(
        self, db: AsyncSession, cursor_id: str | None, limit: int
    ) -> list[Listing]: ...

    async def list_by_seller(self, db: AsyncSession, seller_id: str) -> list[Listing]: ...

    async def list_all(self, db: AsyncSession) -> list[Listing]: ...
