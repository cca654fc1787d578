"""Outcome events emitted after a committed order change.

The presentation layer subscribes through an OrderEventSink and decides how to
render them (toast, email, websocket). Emission happens after commit, so a sink
never observes a change that was rolled back.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from src.em_common.datetime_utils import utc_now
from src.em_common.enums import OutcomeEventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderOutcomeEvent:
    type: OutcomeEventType
    order_id: str
    actor_id: str
    buyer_id: str
    seller_id: str
    status: str
    occurred_at: datetime = field(default_factory=utc_now)


class OrderEventSink(Protocol):
    async def emit(self, event: OrderOutcomeEvent) -> None: ...


class LoggingOrderEventSink:
    """Default sink: writes the event to the application log."""

    async def emit(self, event: OrderOutcomeEvent) -> None:
        logger.info(
            "order event %s order=%s actor=%s status=%s",
            event.type.value,
            event.order_id,
            event.actor_id,
            event.status,
        )
