"""Tests for em_policy: principals, transition authorization, disclosure."""

from typing import Any

import pytest

from src.em_common.enums import DisclosureField, OrderEvent, OrderStatus, Role
from src.em_common.errors import UnauthorizedError
from src.em_policy.domain.guard import AccessPolicyGuard
from src.em_policy.domain.principal import Capability, Principal

guard = AccessPolicyGuard()


class TestPrincipal:
    def test_from_role_names_ignores_unknown(self) -> None:
        p = Principal.from_role_names("u-1", ["buyer", "superuser"])
        assert p.roles == frozenset({Role.BUYER})

    def test_capabilities_union(self) -> None:
        p = Principal.from_role_names("u-1", ["buyer", "seller"])
        assert p.can(Capability.PLACE_ORDER)
        assert p.can(Capability.MANAGE_LISTINGS)
        assert not p.can(Capability.CONFIRM_PAYMENT)

    def test_no_roles_no_capabilities(self) -> None:
        assert Principal.from_role_names("u-1", None).capabilities == frozenset()


class TestAuthorizeTransition:
    def test_buyer_owner_may_declare(self, order_factory: Any, buyer: Principal) -> None:
        guard.authorize_transition(OrderEvent.DECLARE_PAYMENT_MADE, order_factory(), buyer)

    def test_other_buyer_may_not_declare(
        self, order_factory: Any, other_buyer: Principal
    ) -> None:
        with pytest.raises(UnauthorizedError):
            guard.authorize_transition(
                OrderEvent.DECLARE_PAYMENT_MADE, order_factory(), other_buyer
            )

    @pytest.mark.parametrize(
        "event",
        [
            OrderEvent.CONFIRM_PAYMENT,
            OrderEvent.REFUND,
            OrderEvent.DECLARE_PAYMENT_MADE,
            OrderEvent.CONFIRM_COMPLETION,
        ],
    )
    def test_seller_never_mutates(
        self, order_factory: Any, seller: Principal, event: OrderEvent
    ) -> None:
        with pytest.raises(UnauthorizedError):
            guard.authorize_transition(event, order_factory(), seller)

    @pytest.mark.parametrize("event", [OrderEvent.CONFIRM_PAYMENT, OrderEvent.REFUND])
    def test_admin_decisions(
        self, order_factory: Any, admin: Principal, buyer: Principal, event: OrderEvent
    ) -> None:
        guard.authorize_transition(event, order_factory(), admin)
        with pytest.raises(UnauthorizedError):
            guard.authorize_transition(event, order_factory(), buyer)

    def test_admin_cannot_complete_someone_elses_order(
        self, order_factory: Any, admin: Principal
    ) -> None:
        with pytest.raises(UnauthorizedError):
            guard.authorize_transition(OrderEvent.CONFIRM_COMPLETION, order_factory(), admin)

    def test_create_requires_buyer_role(self) -> None:
        with pytest.raises(UnauthorizedError):
            guard.authorize_create(Principal(id="s", roles=frozenset({Role.SELLER})))


class TestOrderRead:
    def test_parties_and_admin_may_read(
        self, order_factory: Any, buyer: Principal, seller: Principal, admin: Principal
    ) -> None:
        order = order_factory()
        for principal in (buyer, seller, admin):
            guard.authorize_order_read(order, principal)

    def test_stranger_may_not_read(self, order_factory: Any, other_buyer: Principal) -> None:
        with pytest.raises(UnauthorizedError):
            guard.authorize_order_read(order_factory(), other_buyer)


class TestDisclosure:
    @pytest.mark.parametrize(
        ("status", "visible"),
        [
            (OrderStatus.PENDING_PAYMENT, False),
            (OrderStatus.AWAITING_CONFIRMATION, False),
            (OrderStatus.PAYMENT_CONFIRMED, True),
            (OrderStatus.COMPLETED, True),
            (OrderStatus.REFUNDED, False),
            (OrderStatus.CANCELLED, False),
        ],
    )
    def test_buyer_seller_contact_gated_by_status(
        self, order_factory: Any, buyer: Principal, status: OrderStatus, visible: bool
    ) -> None:
        order = order_factory(status=status)
        for field in (DisclosureField.SELLER_CONTACT, DisclosureField.PAYMENT_DETAILS):
            assert guard.can_disclose(order, buyer, field) is visible

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_admin_and_seller_always_see_everything(
        self,
        order_factory: Any,
        admin: Principal,
        seller: Principal,
        status: OrderStatus,
    ) -> None:
        order = order_factory(status=status)
        for principal in (admin, seller):
            for field in DisclosureField:
                assert guard.can_disclose(order, principal, field)

    def test_buyer_sees_own_contact(self, order_factory: Any, buyer: Principal) -> None:
        assert guard.can_disclose(order_factory(), buyer, DisclosureField.BUYER_CONTACT)

    def test_stranger_sees_nothing(self, order_factory: Any, other_buyer: Principal) -> None:
        order = order_factory(status=OrderStatus.COMPLETED)
        for field in DisclosureField:
            assert not guard.can_disclose(order, other_buyer, field)
