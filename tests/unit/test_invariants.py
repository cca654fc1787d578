"""Tests for em_order.domain.invariants."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest

from src.em_common.enums import OrderStatus
from src.em_common.errors import InvariantViolationError
from src.em_order.domain.invariants import verify_order_invariants

NOW = datetime(2026, 10, 1, tzinfo=UTC)


def test_fresh_order_passes(order_factory: Any) -> None:
    verify_order_invariants(order_factory())


def test_fee_identity_violation(order_factory: Any) -> None:
    order = order_factory(platform_fee=Decimal("999.00"))
    with pytest.raises(InvariantViolationError, match="fee"):
        verify_order_invariants(order)


def test_negative_money_rejected(order_factory: Any) -> None:
    order = order_factory(
        listing_price=Decimal("0.00"),
        platform_fee=Decimal("-1.00"),
        seller_payout=Decimal("1.00"),
    )
    with pytest.raises(InvariantViolationError):
        verify_order_invariants(order)


@pytest.mark.parametrize(
    ("status", "stamps"),
    [
        (OrderStatus.PAYMENT_CONFIRMED, {"confirmed_at": NOW}),
        (OrderStatus.COMPLETED, {"confirmed_at": NOW, "completed_at": NOW}),
        (OrderStatus.REFUNDED, {"refunded_at": NOW}),
        (OrderStatus.AWAITING_CONFIRMATION, {}),
    ],
)
def test_consistent_timestamps_pass(
    order_factory: Any, status: OrderStatus, stamps: dict[str, datetime]
) -> None:
    verify_order_invariants(order_factory(status=status, **stamps))


@pytest.mark.parametrize(
    ("status", "stamps"),
    [
        (OrderStatus.PAYMENT_CONFIRMED, {}),
        (OrderStatus.COMPLETED, {"confirmed_at": NOW}),
        (OrderStatus.REFUNDED, {"refunded_at": NOW, "confirmed_at": NOW}),
        (OrderStatus.PENDING_PAYMENT, {"completed_at": NOW}),
    ],
)
def test_inconsistent_timestamps_fail(
    order_factory: Any, status: OrderStatus, stamps: dict[str, datetime]
) -> None:
    with pytest.raises(InvariantViolationError):
        verify_order_invariants(order_factory(status=status, **stamps))
