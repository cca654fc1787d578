"""Order invariant verification, run before every commit that touches an order."""

import logging

from src.em_common.enums import OrderStatus
from src.em_common.errors import InvariantViolationError
from src.em_order.domain.models import Order

logger = logging.getLogger(__name__)

_CONFIRMED_STATES = (OrderStatus.PAYMENT_CONFIRMED, OrderStatus.COMPLETED)


def verify_order_invariants(order: Order) -> None:
    """Raise InvariantViolationError if the order's snapshot or audit trail is inconsistent.

    INV-FEE:  platform_fee + seller_payout == listing_price
    INV-NEG:  no negative monetary field
    INV-TS:   confirmed_at set iff status in (PAYMENT_CONFIRMED, COMPLETED),
              completed_at set iff COMPLETED, refunded_at set iff REFUNDED
    """
    if order.platform_fee + order.seller_payout != order.listing_price:
        raise InvariantViolationError(
            f"fee({order.platform_fee}) + payout({order.seller_payout}) "
            f"!= price({order.listing_price})",
            order_id=order.id,
        )
    if min(order.listing_price, order.platform_fee, order.seller_payout) < 0:
        raise InvariantViolationError("negative monetary field", order_id=order.id)

    status = OrderStatus(order.status)
    checks = (
        ("confirmed_at", order.confirmed_at, status in _CONFIRMED_STATES),
        ("completed_at", order.completed_at, status == OrderStatus.COMPLETED),
        ("refunded_at", order.refunded_at, status == OrderStatus.REFUNDED),
    )
    for name, value, expected in checks:
        if (value is not None) != expected:
            raise InvariantViolationError(
                f"{name} inconsistent with status {status.value}", order_id=order.id
            )

    logger.debug("Invariants OK: order=%s status=%s", order.id, status.value)
