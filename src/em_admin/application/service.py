# src/em_admin/application/service.py
"""Admin application service: dashboard stats, user directory, role grants."""
import logging
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.audit_log import AuditLogProtocol, SystemLogRepository
from src.em_common.datetime_utils import iso_or_none
from src.em_common.enums import Role
from src.em_common.errors import UserNotFoundError
from src.em_common.money import money_to_display
from src.em_policy.domain.guard import AccessPolicyGuard
from src.em_policy.domain.principal import Capability, Principal

logger = logging.getLogger(__name__)

_ORDER_STATS_SQL = text("""
    SELECT
        COUNT(*) AS total_orders,
        COUNT(*) FILTER (WHERE status = 'PENDING_PAYMENT') AS pending_payment,
        COUNT(*) FILTER (WHERE status = 'AWAITING_CONFIRMATION') AS awaiting_confirmation,
        COUNT(*) FILTER (WHERE status = 'PAYMENT_CONFIRMED') AS payment_confirmed,
        COUNT(*) FILTER (WHERE status = 'COMPLETED') AS completed,
        COUNT(*) FILTER (WHERE status = 'REFUNDED') AS refunded,
        COALESCE(SUM(platform_fee) FILTER (WHERE status = 'COMPLETED'), 0) AS total_revenue,
        COALESCE(SUM(seller_payout) FILTER (WHERE status = 'COMPLETED'), 0) AS payouts_due
    FROM orders
""")
_LISTING_STATS_SQL = text("""
    SELECT COUNT(*) AS total_listings,
           COUNT(*) FILTER (WHERE is_published) AS published_listings
    FROM listings
""")
_USER_COUNT_SQL = text("SELECT COUNT(*) AS total_users FROM users")
_LIST_USERS_SQL = text("""
    SELECT id, username, email, phone, roles, is_active, created_at
    FROM users
    ORDER BY created_at DESC
    LIMIT :limit OFFSET :offset
""")
_GET_USER_ROLES_SQL = text("SELECT roles FROM users WHERE id = CAST(:user_id AS UUID)")
_APPEND_ROLE_SQL = text("""
    UPDATE users
    SET roles = array_append(roles, CAST(:role AS VARCHAR(16))), updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID)
    RETURNING roles
""")


def _money_pair(amount: Decimal) -> dict[str, str]:
    return {"amount": f"{amount:.2f}", "display": money_to_display(amount)}


class AdminService:
    def __init__(
        self,
        guard: AccessPolicyGuard | None = None,
        audit: AuditLogProtocol | None = None,
    ) -> None:
        self._guard = guard or AccessPolicyGuard()
        self._audit: AuditLogProtocol = audit or SystemLogRepository()

    async def get_stats(self, db: AsyncSession, principal: Principal) -> dict[str, Any]:
        self._guard.require(principal, Capability.VIEW_ALL_ORDERS)
        orders = (await db.execute(_ORDER_STATS_SQL)).fetchone()
        listings = (await db.execute(_LISTING_STATS_SQL)).fetchone()
        users = (await db.execute(_USER_COUNT_SQL)).fetchone()
        return {
            "total_orders": orders.total_orders,
            "orders_by_status": {
                "PENDING_PAYMENT": orders.pending_payment,
                "AWAITING_CONFIRMATION": orders.awaiting_confirmation,
                "PAYMENT_CONFIRMED": orders.payment_confirmed,
                "COMPLETED": orders.completed,
                "REFUNDED": orders.refunded,
            },
            "total_revenue": _money_pair(Decimal(orders.total_revenue)),
            "payouts_due": _money_pair(Decimal(orders.payouts_due)),
            "total_listings": listings.total_listings,
            "published_listings": listings.published_listings,
            "total_users": users.total_users,
        }

    async def list_users(
        self, db: AsyncSession, principal: Principal, limit: int = 50, offset: int = 0
    ) -> list[dict[str, Any]]:
        self._guard.require(principal, Capability.MANAGE_PLATFORM)
        rows = (
            await db.execute(_LIST_USERS_SQL, {"limit": limit, "offset": offset})
        ).fetchall()
        return [
            {
                "user_id": str(r.id),
                "username": r.username,
                "email": r.email,
                "phone": r.phone,
                "roles": list(r.roles or []),
                "is_active": r.is_active,
                "created_at": iso_or_none(r.created_at),
            }
            for r in rows
        ]

    async def grant_role(
        self, db: AsyncSession, principal: Principal, user_id: str, role: Role
    ) -> list[str]:
        """Add ``role`` to a user's role set. Granting a held role is a no-op."""
        self._guard.require(principal, Capability.MANAGE_PLATFORM)
        try:
            uuid.UUID(user_id)
        except ValueError:
            raise UserNotFoundError(user_id) from None

        row = (await db.execute(_GET_USER_ROLES_SQL, {"user_id": user_id})).fetchone()
        if row is None:
            raise UserNotFoundError(user_id)
        roles = list(row.roles or [])
        if role.value in roles:
            return roles

        try:
            updated = (
                await db.execute(_APPEND_ROLE_SQL, {"user_id": user_id, "role": role.value})
            ).fetchone()
            await self._audit.record(
                db,
                action="role_granted",
                actor_id=principal.id,
                target_type="user",
                target_id=user_id,
                metadata={"role": role.value},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Admin %s granted %s to %s", principal.id, role.value, user_id)
        return list(updated.roles)
