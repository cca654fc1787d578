# tests/unit/test_order_persistence.py
"""Unit tests for OrderRepository using a mocked AsyncSession."""
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from src.em_common.enums import OrderStatus
from src.em_order.infrastructure.persistence import OrderRepository


def _make_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "order-1")
    row.listing_id = kwargs.get("listing_id", "listing-1")
    row.buyer_id = kwargs.get("buyer_id", "buyer-1")
    row.seller_id = kwargs.get("seller_id", "seller-1")
    row.listing_price = kwargs.get("listing_price", Decimal("10000.00"))
    row.platform_fee = kwargs.get("platform_fee", Decimal("1000.00"))
    row.seller_payout = kwargs.get("seller_payout", Decimal("9000.00"))
    row.status = kwargs.get("status", "PENDING_PAYMENT")
    row.buyer_phone = kwargs.get("buyer_phone", "+852 6000 0000")
    row.buyer_email = kwargs.get("buyer_email", "buyer@example.com")
    row.admin_notes = kwargs.get("admin_notes")
    row.payment_screenshot_url = kwargs.get("payment_screenshot_url")
    row.created_at = kwargs.get("created_at", datetime.now(UTC))
    row.confirmed_at = kwargs.get("confirmed_at")
    row.completed_at = kwargs.get("completed_at")
    row.refunded_at = kwargs.get("refunded_at")
    row.updated_at = kwargs.get("updated_at", datetime.now(UTC))
    return row


def _db_returning(row: Any = None, rows: list[Any] | None = None) -> AsyncMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = rows or []
    db = AsyncMock()
    db.execute = AsyncMock(return_value=result)
    return db


class TestOrderRepository:
    async def test_save_executes_insert_with_snapshot(self, order_factory: Any) -> None:
        db = AsyncMock()
        await OrderRepository().save(db, order_factory())
        db.execute.assert_awaited_once()
        params = db.execute.call_args[0][1]
        assert params["status"] == "PENDING_PAYMENT"
        assert params["platform_fee"] == Decimal("1000.00")
        assert params["seller_id"] == "seller-1"

    async def test_save_writes_service_timestamps(self, order_factory: Any) -> None:
        created = datetime(2026, 5, 1, 9, 30, tzinfo=UTC)
        db = AsyncMock()
        await OrderRepository().save(db, order_factory(created_at=created, updated_at=created))
        stmt, params = db.execute.call_args[0]
        assert "created_at, updated_at" in str(stmt)
        assert params["created_at"] == created
        assert params["updated_at"] == created

    async def test_get_by_id_maps_row(self) -> None:
        db = _db_returning(_make_row(status="AWAITING_CONFIRMATION"))
        order = await OrderRepository().get_by_id(db, "order-1")
        assert order is not None
        assert order.status == OrderStatus.AWAITING_CONFIRMATION
        assert order.listing_price == Decimal("10000.00")

    async def test_get_by_id_missing(self) -> None:
        assert await OrderRepository().get_by_id(_db_returning(None), "x") is None

    async def test_transition_is_compare_and_swap(self) -> None:
        now = datetime.now(UTC)
        db = _db_returning(_make_row(status="PAYMENT_CONFIRMED", confirmed_at=now))
        order = await OrderRepository().transition(
            db,
            "order-1",
            expected=OrderStatus.AWAITING_CONFIRMATION,
            target=OrderStatus.PAYMENT_CONFIRMED,
            stamp="confirmed_at",
            admin_notes="ok",
        )
        stmt, params = db.execute.call_args[0]
        sql = str(stmt)
        assert "WHERE id = :id AND status = :expected" in sql
        assert "RETURNING" in sql
        assert params["expected"] == "AWAITING_CONFIRMATION"
        assert params["target"] == "PAYMENT_CONFIRMED"
        assert params["stamp"] == "confirmed_at"
        assert order is not None and order.confirmed_at == now

    async def test_transition_lost_race_returns_none(self) -> None:
        result = await OrderRepository().transition(
            _db_returning(None),
            "order-1",
            expected=OrderStatus.PENDING_PAYMENT,
            target=OrderStatus.AWAITING_CONFIRMATION,
        )
        assert result is None

    async def test_list_all_passes_status_filter(self) -> None:
        db = _db_returning(rows=[_make_row(id="2"), _make_row(id="1")])
        orders = await OrderRepository().list_all(db, OrderStatus.COMPLETED, None, 10)
        assert [o.id for o in orders] == ["2", "1"]
        assert db.execute.call_args[0][1]["status"] == "COMPLETED"

    async def test_list_all_without_filter(self) -> None:
        db = _db_returning(rows=[])
        await OrderRepository().list_all(db, None, "99", 5)
        params = db.execute.call_args[0][1]
        assert params == {"status": None, "cursor_id": "99", "limit": 5}

    async def test_list_by_buyer_and_seller(self) -> None:
        db = _db_returning(rows=[_make_row()])
        repo = OrderRepository()
        assert len(await repo.list_by_buyer(db, "buyer-1", None, 20)) == 1
        assert db.execute.call_args[0][1]["party_id"] == "buyer-1"
        assert len(await repo.list_by_seller(db, "seller-1", None, 20)) == 1
        assert db.execute.call_args[0][1]["party_id"] == "seller-1"
