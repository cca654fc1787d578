"""In-memory collaborators for service-level tests.

The order fake honours compare-and-swap: a transition only applies while the
stored status still equals the expected one.
"""

import dataclasses
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.em_common.datetime_utils import utc_now
from src.em_common.enums import OrderStatus, PricingStrategy, Role
from src.em_listing.domain.models import Listing, ProfileSnapshot
from src.em_order.application.service import OrderLedgerService
from src.em_order.domain.events import OrderOutcomeEvent
from src.em_order.domain.models import Order
from src.em_policy.domain.guard import AccessPolicyGuard
from src.em_policy.domain.principal import Principal

BUYER_ID = "buyer-1"
OTHER_BUYER_ID = "buyer-2"
SELLER_ID = "seller-1"
ADMIN_ID = "admin-1"


def make_listing(**kwargs: Any) -> Listing:
    defaults: dict[str, Any] = dict(
        id="listing-1",
        seller_id=SELLER_ID,
        username="coffee_hk",
        follower_count=50_000,
        avatar_url="https://cdn.example.com/a.jpg",
        pricing_strategy=PricingStrategy.FIXED,
        fixed_price=Decimal("10000.00"),
        percentage_rate=None,
        contact_phone="+852 9123 4567",
        contact_email="seller@example.com",
        payment_details="FPS 1234567",
        is_published=True,
    )
    defaults.update(kwargs)
    return Listing(**defaults)


def make_order(**kwargs: Any) -> Order:
    defaults: dict[str, Any] = dict(
        id="order-1",
        listing_id="listing-1",
        buyer_id=BUYER_ID,
        seller_id=SELLER_ID,
        listing_price=Decimal("10000.00"),
        platform_fee=Decimal("1000.00"),
        seller_payout=Decimal("9000.00"),
        status=OrderStatus.PENDING_PAYMENT,
        buyer_phone="+852 6000 0000",
        buyer_email="buyer@example.com",
    )
    defaults.update(kwargs)
    return Order(**defaults)


class InMemoryOrderRepository:
    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}

    async def save(self, db: Any, order: Order) -> None:
        self.orders[order.id] = dataclasses.replace(order)

    async def get_by_id(self, db: Any, order_id: str) -> Order | None:
        order = self.orders.get(order_id)
        return dataclasses.replace(order) if order else None

    async def transition(
        self,
        db: Any,
        order_id: str,
        expected: OrderStatus,
        target: OrderStatus,
        stamp: str | None = None,
        admin_notes: str | None = None,
        payment_screenshot_url: str | None = None,
    ) -> Order | None:
        current = self.orders.get(order_id)
        if current is None or current.status != expected:
            return None
        now = utc_now()
        changes: dict[str, Any] = {"status": target, "updated_at": now}
        if stamp:
            changes[stamp] = now
        if admin_notes is not None:
            changes["admin_notes"] = admin_notes
        if payment_screenshot_url is not None:
            changes["payment_screenshot_url"] = payment_screenshot_url
        self.orders[order_id] = dataclasses.replace(current, **changes)
        return dataclasses.replace(self.orders[order_id])

    def _page(self, orders: list[Order], cursor_id: str | None, limit: int) -> list[Order]:
        ordered = sorted(orders, key=lambda o: o.id, reverse=True)
        if cursor_id is not None:
            ordered = [o for o in ordered if o.id < cursor_id]
        return [dataclasses.replace(o) for o in ordered[:limit]]

    async def list_by_buyer(
        self, db: Any, buyer_id: str, cursor_id: str | None, limit: int
    ) -> list[Order]:
        return self._page(
            [o for o in self.orders.values() if o.buyer_id == buyer_id], cursor_id, limit
        )

    async def list_by_seller(
        self, db: Any, seller_id: str, cursor_id: str | None, limit: int
    ) -> list[Order]:
        return self._page(
            [o for o in self.orders.values() if o.seller_id == seller_id], cursor_id, limit
        )

    async def list_all(
        self, db: Any, status: OrderStatus | None, cursor_id: str | None, limit: int
    ) -> list[Order]:
        return self._page(
            [o for o in self.orders.values() if status is None or o.status == status],
            cursor_id,
            limit,
        )


class InMemoryListingRepository:
    def __init__(self, *listings: Listing) -> None:
        self.listings: dict[str, Listing] = {l.id: l for l in listings}

    async def get_by_id(self, db: Any, listing_id: str) -> Listing | None:
        listing = self.listings.get(listing_id)
        return dataclasses.replace(listing) if listing else None

    async def save(self, db: Any, listing: Listing) -> None:
        self.listings[listing.id] = dataclasses.replace(listing)

    async def update(self, db: Any, listing: Listing) -> Listing | None:
        current = self.listings.get(listing.id)
        if current is None:
            return None
        # handle and follower data are not writable through update
        self.listings[listing.id] = dataclasses.replace(
            listing,
            username=current.username,
            follower_count=current.follower_count,
            avatar_url=current.avatar_url,
            last_synced_at=current.last_synced_at,
        )
        return dataclasses.replace(self.listings[listing.id])

    async def update_profile(
        self, db: Any, listing_id: str, snapshot: ProfileSnapshot, synced_at: Any
    ) -> Listing | None:
        current = self.listings.get(listing_id)
        if current is None:
            return None
        self.listings[listing_id] = dataclasses.replace(
            current,
            follower_count=snapshot.follower_count,
            avatar_url=snapshot.avatar_url,
            last_synced_at=synced_at,
        )
        return dataclasses.replace(self.listings[listing_id])

    async def delete(self, db: Any, listing_id: str) -> bool:
        return self.listings.pop(listing_id, None) is not None

    async def list_published(
        self, db: Any, cursor_id: str | None, limit: int
    ) -> list[Listing]:
        rows = sorted(
            (l for l in self.listings.values() if l.is_published),
            key=lambda l: l.id,
            reverse=True,
        )
        if cursor_id is not None:
            rows = [l for l in rows if l.id < cursor_id]
        return rows[:limit]

    async def list_by_seller(self, db: Any, seller_id: str) -> list[Listing]:
        return [l for l in self.listings.values() if l.seller_id == seller_id]

    async def list_all(self, db: Any) -> list[Listing]:
        return list(self.listings.values())


class RecordingAuditLog:
    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []

    async def record(
        self,
        db: Any,
        action: str,
        actor_id: str | None,
        target_type: str | None,
        target_id: str | None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.records.append(
            {
                "action": action,
                "actor_id": actor_id,
                "target_type": target_type,
                "target_id": target_id,
                "metadata": metadata or {},
            }
        )

    @property
    def actions(self) -> list[str]:
        return [r["action"] for r in self.records]


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[OrderOutcomeEvent] = []

    async def emit(self, event: OrderOutcomeEvent) -> None:
        self.events.append(event)


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def buyer() -> Principal:
    return Principal(id=BUYER_ID, roles=frozenset({Role.BUYER}))


@pytest.fixture
def other_buyer() -> Principal:
    return Principal(id=OTHER_BUYER_ID, roles=frozenset({Role.BUYER}))


@pytest.fixture
def seller() -> Principal:
    # sellers register as buyers first, then pick the seller role
    return Principal(id=SELLER_ID, roles=frozenset({Role.BUYER, Role.SELLER}))


@pytest.fixture
def admin() -> Principal:
    return Principal(id=ADMIN_ID, roles=frozenset({Role.BUYER, Role.ADMIN}))


@pytest.fixture
def order_repo() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def listing_repo() -> InMemoryListingRepository:
    return InMemoryListingRepository(make_listing())


@pytest.fixture
def audit() -> RecordingAuditLog:
    return RecordingAuditLog()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def ledger(
    order_repo: InMemoryOrderRepository,
    listing_repo: InMemoryListingRepository,
    audit: RecordingAuditLog,
    sink: RecordingSink,
) -> OrderLedgerService:
    return OrderLedgerService(
        repo=order_repo,
        listing_repo=listing_repo,
        guard=AccessPolicyGuard(),
        audit=audit,
        sink=sink,
        fee_bps=1000,
    )


@pytest.fixture
def listing_factory() -> Any:
    return make_listing


@pytest.fixture
def order_factory() -> Any:
    return make_order
