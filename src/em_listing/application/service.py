"""ListingService: seller listing CRUD, publication and follower sync.

Follower counts come from the enrichment collaborator. On create an outage
degrades to follower_count = 0 with a warning; an explicit sync surfaces
the outage to the caller and leaves the row untouched.
"""

import dataclasses
import logging
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.audit_log import AuditLogProtocol, SystemLogRepository
from src.em_common.datetime_utils import utc_now
from src.em_common.enums import PricingStrategy
from src.em_common.errors import (
    CollaboratorUnavailableError,
    DomainValidationError,
    ListingNotFoundError,
    UnauthorizedError,
)
from src.em_common.id_generator import generate_id
from src.em_listing.application.schemas import SyncSummary
from src.em_listing.domain.models import Listing, ProfileSnapshot, normalize_username
from src.em_listing.domain.repository import ListingRepositoryProtocol
from src.em_listing.infrastructure.enrichment_client import (
    EnrichmentClient,
    EnrichmentClientProtocol,
)
from src.em_listing.infrastructure.persistence import ListingRepository
from src.em_policy.domain.guard import AccessPolicyGuard
from src.em_policy.domain.principal import Capability, Principal
from src.em_pricing.domain.resolver import validate_pricing

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "pricing_strategy",
    "fixed_price",
    "percentage_rate",
    "contact_phone",
    "contact_email",
    "payment_details",
)


class ListingService:
    def __init__(
        self,
        repo: ListingRepositoryProtocol | None = None,
        enrichment: EnrichmentClientProtocol | None = None,
        guard: AccessPolicyGuard | None = None,
        audit: AuditLogProtocol | None = None,
    ) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()
        self._enrichment: EnrichmentClientProtocol = enrichment or EnrichmentClient()
        self._guard = guard or AccessPolicyGuard()
        self._audit: AuditLogProtocol = audit or SystemLogRepository()

    async def create_listing(
        self,
        db: AsyncSession,
        principal: Principal,
        username: str,
        pricing_strategy: PricingStrategy,
        fixed_price: Decimal | None = None,
        percentage_rate: Decimal | None = None,
        contact_phone: str | None = None,
        contact_email: str | None = None,
        payment_details: str | None = None,
        is_published: bool = False,
    ) -> Listing:
        self._guard.require(principal, Capability.MANAGE_LISTINGS)
        handle = normalize_username(username)
        if not handle:
            raise DomainValidationError("username", "must not be empty")
        validate_pricing(pricing_strategy, fixed_price, percentage_rate)

        synced_at = utc_now()
        try:
            snapshot = await self._enrichment.fetch_profile(handle)
        except CollaboratorUnavailableError as e:
            logger.warning("Creating @%s without follower data: %s", handle, e.message)
            snapshot = ProfileSnapshot(follower_count=0, avatar_url=None)
            synced_at = None

        listing = Listing(
            id=generate_id(),
            seller_id=principal.id,
            username=handle,
            follower_count=snapshot.follower_count,
            avatar_url=snapshot.avatar_url,
            pricing_strategy=pricing_strategy,
            fixed_price=fixed_price,
            percentage_rate=percentage_rate,
            contact_phone=contact_phone or None,
            contact_email=contact_email or None,
            payment_details=payment_details or None,
            is_published=is_published,
            last_synced_at=synced_at,
        )
        try:
            await self._repo.save(db, listing)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Listing %s created for @%s by %s", listing.id, handle, principal.id)
        return listing

    async def update_listing(
        self,
        db: AsyncSession,
        principal: Principal,
        listing_id: str,
        changes: dict[str, Any],
    ) -> Listing:
        listing = await self._get_owned(db, principal, listing_id)
        updates = {k: v for k, v in changes.items() if k in _EDITABLE_FIELDS}

        # Switching strategy drops the other strategy's parameter unless given
        strategy = updates.get("pricing_strategy")
        if strategy == PricingStrategy.FIXED:
            updates.setdefault("percentage_rate", None)
        elif strategy == PricingStrategy.PERCENTAGE_OF_FOLLOWERS:
            updates.setdefault("fixed_price", None)

        candidate = dataclasses.replace(listing, **updates)
        validate_pricing(
            candidate.pricing_strategy, candidate.fixed_price, candidate.percentage_rate
        )
        return await self._persist(db, candidate)

    async def set_published(
        self, db: AsyncSession, principal: Principal, listing_id: str, published: bool
    ) -> Listing:
        listing = await self._get_owned(db, principal, listing_id)
        listing.is_published = published
        updated = await self._persist(db, listing)
        logger.info("Listing %s published=%s by %s", listing_id, published, principal.id)
        return updated

    async def delete_listing(
        self, db: AsyncSession, principal: Principal, listing_id: str
    ) -> None:
        await self._get_owned(db, principal, listing_id)
        try:
            if not await self._repo.delete(db, listing_id):
                raise ListingNotFoundError(listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Listing %s deleted by %s", listing_id, principal.id)

    async def sync_listing(
        self, db: AsyncSession, principal: Principal, listing_id: str
    ) -> Listing:
        """Refresh follower data for one listing. Enrichment errors propagate."""
        listing = await self._get_owned(db, principal, listing_id)
        snapshot = await self._enrichment.fetch_profile(listing.username)
        try:
            updated = await self._repo.update_profile(db, listing_id, snapshot, utc_now())
            if updated is None:
                raise ListingNotFoundError(listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated

    async def sync_all(self, db: AsyncSession, principal: Principal) -> SyncSummary:
        """Admin-triggered refresh of every listing; individual failures are counted."""
        self._guard.require(principal, Capability.MANAGE_PLATFORM)
        listings = await self._repo.list_all(db)
        synced = failed = 0
        try:
            for listing in listings:
                try:
                    snapshot = await self._enrichment.fetch_profile(listing.username)
                except CollaboratorUnavailableError as e:
                    logger.warning("Sync failed for @%s: %s", listing.username, e.message)
                    failed += 1
                    continue
                await self._repo.update_profile(db, listing.id, snapshot, utc_now())
                synced += 1
            await self._audit.record(
                db,
                action="listing_bulk_sync",
                actor_id=principal.id,
                target_type="listing",
                target_id=None,
                metadata={"total": len(listings), "synced": synced, "failed": failed},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Bulk sync done: %d synced, %d failed", synced, failed)
        return SyncSummary(total=len(listings), synced=synced, failed=failed)

    async def get_published(self, db: AsyncSession, listing_id: str) -> Listing:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None or not listing.is_published:
            raise ListingNotFoundError(listing_id)
        return listing

    async def list_published(
        self, db: AsyncSession, cursor_id: str | None = None, limit: int = 20
    ) -> tuple[list[Listing], str | None, bool]:
        limit = max(1, min(limit, 100))
        rows = await self._repo.list_published(db, cursor_id, limit + 1)
        has_more = len(rows) > limit
        rows = rows[:limit]
        next_cursor = rows[-1].id if has_more and rows else None
        return rows, next_cursor, has_more

    async def list_mine(self, db: AsyncSession, principal: Principal) -> list[Listing]:
        self._guard.require(principal, Capability.MANAGE_LISTINGS)
        return await self._repo.list_by_seller(db, principal.id)

    async def _get_owned(
        self, db: AsyncSession, principal: Principal, listing_id: str
    ) -> Listing:
        self._guard.require(principal, Capability.MANAGE_LISTINGS)
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        if listing.seller_id != principal.id and not principal.is_admin:
            raise UnauthorizedError("manage listing", principal.id, listing_id=listing_id)
        return listing

    async def _persist(self, db: AsyncSession, listing: Listing) -> Listing:
        try:
            updated = await self._repo.update(db, listing)
            if updated is None:
                raise ListingNotFoundError(listing.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated
