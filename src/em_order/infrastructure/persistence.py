# src/em_order/infrastructure/persistence.py
"""OrderRepository: raw SQL persistence implementation.

Status changes are single-statement compare-and-swaps: the UPDATE only matches
while the row still holds the expected status, so two racing admins cannot both
confirm the same order. No in-process locks are taken.
"""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.enums import OrderStatus
from src.em_order.domain.models import Order

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, listing_id, buyer_id, seller_id,
    listing_price, platform_fee, seller_payout, status,
    buyer_phone, buyer_email, admin_notes, payment_screenshot_url,
    created_at, confirmed_at, completed_at, refunded_at, updated_at
"""

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, listing_id, buyer_id, seller_id,
        listing_price, platform_fee, seller_payout, status,
        buyer_phone, buyer_email, created_at, updated_at)
    VALUES (:id, :listing_id, :buyer_id, :seller_id,
        :listing_price, :platform_fee, :seller_payout, :status,
        :buyer_phone, :buyer_email,
        COALESCE(CAST(:created_at AS TIMESTAMPTZ), NOW()),
        COALESCE(CAST(:updated_at AS TIMESTAMPTZ), NOW()))
""")

# :stamp names the one timestamp column this edge sets (or NULL for none)
_TRANSITION_SQL = text(f"""
    UPDATE orders
    SET status = :target,
        confirmed_at = CASE WHEN CAST(:stamp AS TEXT) = 'confirmed_at'
                            THEN NOW() ELSE confirmed_at END,
        completed_at = CASE WHEN CAST(:stamp AS TEXT) = 'completed_at'
                            THEN NOW() ELSE completed_at END,
        refunded_at = CASE WHEN CAST(:stamp AS TEXT) = 'refunded_at'
                           THEN NOW() ELSE refunded_at END,
        admin_notes = COALESCE(CAST(:admin_notes AS TEXT), admin_notes),
        payment_screenshot_url = COALESCE(
            CAST(:payment_screenshot_url AS TEXT), payment_screenshot_url),
        updated_at = NOW()
    WHERE id = :id AND status = :expected
    RETURNING {_COLUMNS}
""")

_GET_ORDER_BY_ID_SQL = text(f"SELECT {_COLUMNS} FROM orders WHERE id = :id")

_LIST_BY_BUYER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders
    WHERE buyer_id = :party_id
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < CAST(:cursor_id AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_BY_SELLER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders
    WHERE seller_id = :party_id
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < CAST(:cursor_id AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders
    WHERE (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < CAST(:cursor_id AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    return Order(
        id=row.id,
        listing_id=row.listing_id,
        buyer_id=row.buyer_id,
        seller_id=row.seller_id,
        listing_price=row.listing_price,
        platform_fee=row.platform_fee,
        seller_payout=row.seller_payout,
        status=OrderStatus(row.status),
        buyer_phone=row.buyer_phone,
        buyer_email=row.buyer_email,
        admin_notes=row.admin_notes,
        payment_screenshot_url=row.payment_screenshot_url,
        created_at=row.created_at,
        confirmed_at=row.confirmed_at,
        completed_at=row.completed_at,
        refunded_at=row.refunded_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, order: Order) -> None:
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "listing_id": order.listing_id,
                "buyer_id": order.buyer_id,
                "seller_id": order.seller_id,
                "listing_price": order.listing_price,
                "platform_fee": order.platform_fee,
                "seller_payout": order.seller_payout,
                "status": order.status.value,
                "buyer_phone": order.buyer_phone,
                "buyer_email": order.buyer_email,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
            },
        )

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def transition(
        self,
        db: AsyncSession,
        order_id: str,
        expected: OrderStatus,
        target: OrderStatus,
        stamp: str | None = None,
        admin_notes: str | None = None,
        payment_screenshot_url: str | None = None,
    ) -> Order | None:
        result = await db.execute(
            _TRANSITION_SQL,
            {
                "id": order_id,
                "expected": expected.value,
                "target": target.value,
                "stamp": stamp,
                "admin_notes": admin_notes,
                "payment_screenshot_url": payment_screenshot_url,
            },
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def list_by_buyer(
        self, db: AsyncSession, buyer_id: str, cursor_id: str | None, limit: int
    ) -> list[Order]:
        result = await db.execute(
            _LIST_BY_BUYER_SQL,
            {"party_id": buyer_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_by_seller(
        self, db: AsyncSession, seller_id: str, cursor_id: str | None, limit: int
    ) -> list[Order]:
        result = await db.execute(
            _LIST_BY_SELLER_SQL,
            {"party_id": seller_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_all(
        self,
        db: AsyncSession,
        status: OrderStatus | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ALL_SQL,
            {
                "status": status.value if status else None,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_order(row) for row in result.fetchall()]
