"""Principal and capability model.

A principal may hold several roles at once (an admin can also buy or sell);
authorization asks "does any held role grant this capability", never
"which single role is this user".
"""

from dataclasses import dataclass, field
from enum import Enum

from src.em_common.enums import Role


class Capability(str, Enum):
    PLACE_ORDER = "PLACE_ORDER"
    DECLARE_PAYMENT = "DECLARE_PAYMENT"
    CONFIRM_COMPLETION = "CONFIRM_COMPLETION"
    CONFIRM_PAYMENT = "CONFIRM_PAYMENT"
    REFUND_ORDER = "REFUND_ORDER"
    MANAGE_LISTINGS = "MANAGE_LISTINGS"
    MANAGE_PLATFORM = "MANAGE_PLATFORM"
    VIEW_ALL_ORDERS = "VIEW_ALL_ORDERS"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.BUYER: frozenset({
        Capability.PLACE_ORDER,
        Capability.DECLARE_PAYMENT,
        Capability.CONFIRM_COMPLETION,
    }),
    Role.SELLER: frozenset({Capability.MANAGE_LISTINGS}),
    Role.ADMIN: frozenset({
        Capability.CONFIRM_PAYMENT,
        Capability.REFUND_ORDER,
        Capability.MANAGE_LISTINGS,
        Capability.MANAGE_PLATFORM,
        Capability.VIEW_ALL_ORDERS,
    }),
}


@dataclass(frozen=True)
class Principal:
    id: str
    roles: frozenset[Role] = field(default_factory=frozenset)

    @classmethod
    def from_role_names(cls, user_id: str, role_names: list[str] | None) -> "Principal":
        """Build from DB role strings, ignoring anything unknown."""
        valid = {r.value for r in Role}
        return cls(
            id=user_id,
            roles=frozenset(Role(name) for name in (role_names or []) if name in valid),
        )

    @property
    def capabilities(self) -> frozenset[Capability]:
        caps: set[Capability] = set()
        for role in self.roles:
            caps |= ROLE_CAPABILITIES[role]
        return frozenset(caps)

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles
