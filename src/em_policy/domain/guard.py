"""Access Policy Guard: who may fire which order event and see which field.

Rules:
  - buyer events (DECLARE_PAYMENT_MADE, CONFIRM_COMPLETION) need the buyer
    capability AND ownership of the order
  - admin events (CONFIRM_PAYMENT, REFUND) need the admin capability
  - sellers never mutate orders, not even orders on their own listings
  - SELLER_CONTACT / PAYMENT_DETAILS: the buyer once status is
    PAYMENT_CONFIRMED or COMPLETED, the admin, or the order's seller
  - BUYER_CONTACT: the admin, the order's seller, or the order's buyer

Denials raise UnauthorizedError; the guard never drops data silently.
"""

from src.em_common.enums import DisclosureField, OrderEvent
from src.em_common.errors import UnauthorizedError
from src.em_order.domain.models import Order
from src.em_order.domain.state_machine import DISCLOSURE_STATUSES
from src.em_policy.domain.principal import Capability, Principal

_EVENT_CAPABILITY: dict[OrderEvent, Capability] = {
    OrderEvent.CREATE_ORDER: Capability.PLACE_ORDER,
    OrderEvent.DECLARE_PAYMENT_MADE: Capability.DECLARE_PAYMENT,
    OrderEvent.CONFIRM_COMPLETION: Capability.CONFIRM_COMPLETION,
    OrderEvent.CONFIRM_PAYMENT: Capability.CONFIRM_PAYMENT,
    OrderEvent.REFUND: Capability.REFUND_ORDER,
}

_OWNER_ONLY_EVENTS = frozenset(
    {OrderEvent.DECLARE_PAYMENT_MADE, OrderEvent.CONFIRM_COMPLETION}
)


class AccessPolicyGuard:
    """Stateless: instantiate once, reuse across requests."""

    def authorize_create(self, principal: Principal) -> None:
        if not principal.can(Capability.PLACE_ORDER):
            raise UnauthorizedError(OrderEvent.CREATE_ORDER.value, principal.id)

    def authorize_transition(
        self, event: OrderEvent, order: Order, principal: Principal
    ) -> None:
        capability = _EVENT_CAPABILITY[event]
        if not principal.can(capability):
            raise UnauthorizedError(event.value, principal.id, order_id=order.id)
        if event in _OWNER_ONLY_EVENTS and principal.id != order.buyer_id:
            raise UnauthorizedError(event.value, principal.id, order_id=order.id)

    def authorize_order_read(self, order: Order, principal: Principal) -> None:
        if principal.id in (order.buyer_id, order.seller_id):
            return
        if principal.can(Capability.VIEW_ALL_ORDERS):
            return
        raise UnauthorizedError("view order", principal.id, order_id=order.id)

    def can_disclose(
        self, order: Order, principal: Principal, field: DisclosureField
    ) -> bool:
        if principal.is_admin or principal.id == order.seller_id:
            return True
        if principal.id != order.buyer_id:
            return False
        if field == DisclosureField.BUYER_CONTACT:
            return True
        return order.status in DISCLOSURE_STATUSES

    def require(self, principal: Principal, capability: Capability) -> None:
        if not principal.can(capability):
            raise UnauthorizedError(capability.value, principal.id)
