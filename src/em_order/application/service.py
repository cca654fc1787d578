# src/em_order/application/service.py
"""OrderLedgerService: order creation, lifecycle transitions and views.

Every mutating call runs as one unit of work on the request session:
read -> authorize -> resolve edge -> CAS update -> invariants -> audit row
-> commit. Any failure rolls the whole unit back. Outcome events are
emitted only after a successful commit.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.em_common.audit_log import AuditLogProtocol, SystemLogRepository
from src.em_common.datetime_utils import utc_now
from src.em_common.enums import (
    DisclosureField,
    OrderEvent,
    OrderStatus,
    OutcomeEventType,
)
from src.em_common.errors import (
    DomainValidationError,
    InvalidTransitionError,
    ListingUnavailableError,
    OrderNotFoundError,
    SelfPurchaseError,
)
from src.em_common.id_generator import generate_id
from src.em_listing.domain.models import Listing
from src.em_listing.domain.repository import ListingRepositoryProtocol
from src.em_listing.infrastructure.persistence import ListingRepository
from src.em_order.domain.events import (
    LoggingOrderEventSink,
    OrderEventSink,
    OrderOutcomeEvent,
)
from src.em_order.domain.fee import compute_fee_split
from src.em_order.domain.invariants import verify_order_invariants
from src.em_order.domain.models import Order, OrderView
from src.em_order.domain.repository import OrderRepositoryProtocol
from src.em_order.domain.state_machine import resolve_transition
from src.em_order.infrastructure.persistence import OrderRepository
from src.em_policy.domain.guard import AccessPolicyGuard
from src.em_policy.domain.principal import Capability, Principal
from src.em_pricing.domain.resolver import resolve_price

logger = logging.getLogger(__name__)

_OUTCOME_BY_EVENT: dict[OrderEvent, OutcomeEventType] = {
    OrderEvent.CREATE_ORDER: OutcomeEventType.ORDER_CREATED,
    OrderEvent.DECLARE_PAYMENT_MADE: OutcomeEventType.PAYMENT_DECLARED,
    OrderEvent.CONFIRM_PAYMENT: OutcomeEventType.PAYMENT_CONFIRMED,
    OrderEvent.REFUND: OutcomeEventType.ORDER_REFUNDED,
    OrderEvent.CONFIRM_COMPLETION: OutcomeEventType.ORDER_COMPLETED,
}

MAX_PAGE_SIZE = 100


class OrderLedgerService:
    def __init__(
        self,
        repo: OrderRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        guard: AccessPolicyGuard | None = None,
        audit: AuditLogProtocol | None = None,
        sink: OrderEventSink | None = None,
        fee_bps: int | None = None,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._guard = guard or AccessPolicyGuard()
        self._audit: AuditLogProtocol = audit or SystemLogRepository()
        self._sink: OrderEventSink = sink or LoggingOrderEventSink()
        self._fee_bps = settings.PLATFORM_FEE_BPS if fee_bps is None else fee_bps

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_order(
        self,
        db: AsyncSession,
        principal: Principal,
        listing_id: str,
        buyer_phone: str,
        buyer_email: str,
    ) -> Order:
        self._guard.authorize_create(principal)

        phone = (buyer_phone or "").strip()
        email = (buyer_email or "").strip()
        if not phone:
            raise DomainValidationError("buyer_phone", "contact phone is required")
        if "@" not in email:
            raise DomainValidationError("buyer_email", "a valid contact email is required")

        # Publication is re-checked here, not trusted from the marketplace page
        listing = await self._listings.get_by_id(db, listing_id)
        if listing is None or not listing.is_published:
            raise ListingUnavailableError(listing_id)
        if listing.seller_id == principal.id:
            raise SelfPurchaseError(listing_id)

        split = compute_fee_split(resolve_price(listing), self._fee_bps)
        now = utc_now()
        order = Order(
            id=generate_id(),
            listing_id=listing.id,
            buyer_id=principal.id,
            seller_id=listing.seller_id,
            listing_price=split.listing_price,
            platform_fee=split.platform_fee,
            seller_payout=split.seller_payout,
            status=OrderStatus.PENDING_PAYMENT,
            buyer_phone=phone,
            buyer_email=email,
            created_at=now,
            updated_at=now,
        )
        verify_order_invariants(order)

        try:
            await self._repo.save(db, order)
            await self._audit.record(
                db,
                action="order_created",
                actor_id=principal.id,
                target_type="order",
                target_id=order.id,
                metadata={
                    "listing_id": listing.id,
                    "listing_price": order.listing_price,
                    "platform_fee": order.platform_fee,
                },
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s created: listing=%s buyer=%s price=%s fee=%s",
            order.id,
            listing.id,
            principal.id,
            order.listing_price,
            order.platform_fee,
        )
        await self._emit(OrderEvent.CREATE_ORDER, order, principal)
        return order

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def declare_payment_made(
        self,
        db: AsyncSession,
        principal: Principal,
        order_id: str,
        payment_screenshot_url: str | None = None,
    ) -> Order:
        return await self._apply(
            db,
            principal,
            order_id,
            OrderEvent.DECLARE_PAYMENT_MADE,
            payment_screenshot_url=payment_screenshot_url,
        )

    async def confirm_payment(
        self, db: AsyncSession, principal: Principal, order_id: str, notes: str | None = None
    ) -> Order:
        return await self._apply(
            db, principal, order_id, OrderEvent.CONFIRM_PAYMENT, admin_notes=notes
        )

    async def refund_order(
        self, db: AsyncSession, principal: Principal, order_id: str, notes: str | None = None
    ) -> Order:
        return await self._apply(db, principal, order_id, OrderEvent.REFUND, admin_notes=notes)

    async def confirm_completion(
        self, db: AsyncSession, principal: Principal, order_id: str
    ) -> Order:
        return await self._apply(db, principal, order_id, OrderEvent.CONFIRM_COMPLETION)

    async def _apply(
        self,
        db: AsyncSession,
        principal: Principal,
        order_id: str,
        event: OrderEvent,
        admin_notes: str | None = None,
        payment_screenshot_url: str | None = None,
    ) -> Order:
        order = await self._repo.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        # Authorization first: a seller is refused regardless of the order's state
        self._guard.authorize_transition(event, order, principal)
        transition = resolve_transition(order.id, order.status, event)

        try:
            updated = await self._repo.transition(
                db,
                order.id,
                expected=transition.source,
                target=transition.target,
                stamp=transition.stamps,
                admin_notes=admin_notes,
                payment_screenshot_url=payment_screenshot_url,
            )
            if updated is None:
                # Lost the race: someone moved the order after our read
                current = await self._repo.get_by_id(db, order_id)
                if current is None:
                    raise OrderNotFoundError(order_id)
                raise InvalidTransitionError(order_id, current.status.value, event.value)

            verify_order_invariants(updated)
            await self._audit.record(
                db,
                action=f"order_{event.value.lower()}",
                actor_id=principal.id,
                target_type="order",
                target_id=order.id,
                metadata={
                    "from": transition.source.value,
                    "to": transition.target.value,
                    "notes": admin_notes,
                },
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s: %s -> %s by %s (%s)",
            order.id,
            transition.source.value,
            transition.target.value,
            principal.id,
            event.value,
        )
        await self._emit(event, updated, principal)
        return updated

    async def _emit(self, event: OrderEvent, order: Order, principal: Principal) -> None:
        outcome = OrderOutcomeEvent(
            type=_OUTCOME_BY_EVENT[event],
            order_id=order.id,
            actor_id=principal.id,
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            status=order.status.value,
        )
        try:
            await self._sink.emit(outcome)
        except Exception:
            # The change is already committed; a broken sink must not turn it into a 500
            logger.exception("Outcome event %s for order %s not delivered", outcome.type, order.id)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    async def get_order_view(
        self, db: AsyncSession, principal: Principal, order_id: str
    ) -> OrderView:
        order = await self._repo.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        self._guard.authorize_order_read(order, principal)
        listing = await self._listings.get_by_id(db, order.listing_id)
        return self._build_view(order, listing, principal)

    async def list_my_orders(
        self,
        db: AsyncSession,
        principal: Principal,
        cursor_id: str | None = None,
        limit: int = 20,
    ) -> tuple[list[OrderView], str | None, bool]:
        limit = _clamp(limit)
        orders = await self._repo.list_by_buyer(db, principal.id, cursor_id, limit + 1)
        return await self._page(db, principal, orders, limit)

    async def list_seller_orders(
        self,
        db: AsyncSession,
        principal: Principal,
        cursor_id: str | None = None,
        limit: int = 20,
    ) -> tuple[list[OrderView], str | None, bool]:
        """Orders placed on the caller's listings. Read-only for the seller."""
        self._guard.require(principal, Capability.MANAGE_LISTINGS)
        limit = _clamp(limit)
        orders = await self._repo.list_by_seller(db, principal.id, cursor_id, limit + 1)
        return await self._page(db, principal, orders, limit)

    async def list_all_orders(
        self,
        db: AsyncSession,
        principal: Principal,
        status: OrderStatus | None = None,
        cursor_id: str | None = None,
        limit: int = 20,
    ) -> tuple[list[OrderView], str | None, bool]:
        self._guard.require(principal, Capability.VIEW_ALL_ORDERS)
        limit = _clamp(limit)
        orders = await self._repo.list_all(db, status, cursor_id, limit + 1)
        return await self._page(db, principal, orders, limit)

    async def _page(
        self,
        db: AsyncSession,
        principal: Principal,
        orders: list[Order],
        limit: int,
    ) -> tuple[list[OrderView], str | None, bool]:
        has_more = len(orders) > limit
        orders = orders[:limit]
        listings: dict[str, Listing | None] = {}
        views = []
        for order in orders:
            if order.listing_id not in listings:
                listings[order.listing_id] = await self._listings.get_by_id(
                    db, order.listing_id
                )
            views.append(self._build_view(order, listings[order.listing_id], principal))
        next_cursor = orders[-1].id if has_more and orders else None
        return views, next_cursor, has_more

    def _build_view(
        self, order: Order, listing: Listing | None, principal: Principal
    ) -> OrderView:
        show_buyer = self._guard.can_disclose(order, principal, DisclosureField.BUYER_CONTACT)
        show_contact = self._guard.can_disclose(
            order, principal, DisclosureField.SELLER_CONTACT
        )
        show_payment = self._guard.can_disclose(
            order, principal, DisclosureField.PAYMENT_DETAILS
        )
        return OrderView(
            order=order,
            listing_username=listing.username if listing else None,
            listing_avatar_url=listing.avatar_url if listing else None,
            buyer_phone=order.buyer_phone if show_buyer else None,
            buyer_email=order.buyer_email if show_buyer else None,
            seller_contact_phone=listing.contact_phone if listing and show_contact else None,
            seller_contact_email=listing.contact_email if listing and show_contact else None,
            seller_payment_details=(
                listing.payment_details if listing and show_payment else None
            ),
            seller_contact_disclosed=show_contact,
        )


def _clamp(limit: int) -> int:
    return max(1, min(limit, MAX_PAGE_SIZE))
