"""Order lifecycle state machine.

    PENDING_PAYMENT ──DECLARE_PAYMENT_MADE──▶ AWAITING_CONFIRMATION
    AWAITING_CONFIRMATION ──CONFIRM_PAYMENT──▶ PAYMENT_CONFIRMED
    AWAITING_CONFIRMATION ──REFUND──────────▶ REFUNDED
    PAYMENT_CONFIRMED ──CONFIRM_COMPLETION──▶ COMPLETED

COMPLETED, REFUNDED and CANCELLED are absorbing. CREATE_ORDER has no source
state; it is handled by the ledger when the row is inserted.
"""

from dataclasses import dataclass

from src.em_common.enums import OrderEvent, OrderStatus
from src.em_common.errors import InvalidTransitionError


@dataclass(frozen=True)
class Transition:
    source: OrderStatus
    event: OrderEvent
    target: OrderStatus
    stamps: str | None  # timestamp column set exactly once by this edge


TRANSITIONS: dict[tuple[OrderStatus, OrderEvent], Transition] = {
    (t.source, t.event): t
    for t in (
        Transition(
            OrderStatus.PENDING_PAYMENT,
            OrderEvent.DECLARE_PAYMENT_MADE,
            OrderStatus.AWAITING_CONFIRMATION,
            None,
        ),
        Transition(
            OrderStatus.AWAITING_CONFIRMATION,
            OrderEvent.CONFIRM_PAYMENT,
            OrderStatus.PAYMENT_CONFIRMED,
            "confirmed_at",
        ),
        Transition(
            OrderStatus.AWAITING_CONFIRMATION,
            OrderEvent.REFUND,
            OrderStatus.REFUNDED,
            "refunded_at",
        ),
        Transition(
            OrderStatus.PAYMENT_CONFIRMED,
            OrderEvent.CONFIRM_COMPLETION,
            OrderStatus.COMPLETED,
            "completed_at",
        ),
    )
}

TERMINAL_STATUSES = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.REFUNDED, OrderStatus.CANCELLED}
)

# States whose buyer may see seller contact / payment details
DISCLOSURE_STATUSES = frozenset({OrderStatus.PAYMENT_CONFIRMED, OrderStatus.COMPLETED})


def resolve_transition(order_id: str, current: OrderStatus, event: OrderEvent) -> Transition:
    """Return the edge for (current, event) or raise InvalidTransitionError."""
    transition = TRANSITIONS.get((OrderStatus(current), event))
    if transition is None:
        raise InvalidTransitionError(order_id, OrderStatus(current).value, event.value)
    return transition


def allowed_events(current: OrderStatus) -> list[OrderEvent]:
    return [event for (source, event) in TRANSITIONS if source == current]
