"""PlatformSettingsService: payment instructions read path and admin write path.

Reads go through the cache; writes run in one transaction (upserts + audit
log) and invalidate the cache only after commit.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.audit_log import AuditLogProtocol, SystemLogRepository
from src.em_common.datetime_utils import iso_or_none
from src.em_common.enums import PlatformSettingKey
from src.em_policy.domain.guard import AccessPolicyGuard
from src.em_policy.domain.principal import Capability, Principal
from src.em_pricing.application.schemas import PlatformSettingOut
from src.em_pricing.domain.models import PaymentInstructions, PlatformSetting
from src.em_pricing.domain.repository import (
    PaymentInstructionsCacheProtocol,
    PlatformSettingsRepositoryProtocol,
)
from src.em_pricing.infrastructure.cache import RedisPaymentInstructionsCache
from src.em_pricing.infrastructure.persistence import PlatformSettingsRepository

logger = logging.getLogger(__name__)


def _to_instructions(rows: list[PlatformSetting]) -> PaymentInstructions:
    values = {row.key: row.value for row in rows}
    return PaymentInstructions(
        fps_number=values.get(PlatformSettingKey.FPS_NUMBER.value),
        payment_email=values.get(PlatformSettingKey.PAYMENT_EMAIL.value),
        payment_methods=values.get(PlatformSettingKey.PAYMENT_METHODS.value),
    )


class PlatformSettingsService:
    def __init__(
        self,
        repo: PlatformSettingsRepositoryProtocol | None = None,
        cache: PaymentInstructionsCacheProtocol | None = None,
        audit: AuditLogProtocol | None = None,
        guard: AccessPolicyGuard | None = None,
    ) -> None:
        self._repo: PlatformSettingsRepositoryProtocol = repo or PlatformSettingsRepository()
        self._cache: PaymentInstructionsCacheProtocol = cache or RedisPaymentInstructionsCache()
        self._audit: AuditLogProtocol = audit or SystemLogRepository()
        self._guard = guard or AccessPolicyGuard()

    async def resolve_payment_instructions(self, db: AsyncSession) -> PaymentInstructions:
        cached = await self._cache.get()
        if cached is not None:
            return cached
        instructions = _to_instructions(await self._repo.get_all(db))
        await self._cache.set(instructions)
        return instructions

    async def list_settings(
        self, db: AsyncSession, principal: Principal
    ) -> list[PlatformSettingOut]:
        self._guard.require(principal, Capability.MANAGE_PLATFORM)
        rows = await self._repo.get_all(db)
        return [
            PlatformSettingOut(
                key=r.key,
                value=r.value,
                version=r.version,
                updated_by=r.updated_by,
                updated_at=iso_or_none(r.updated_at),
            )
            for r in rows
        ]

    async def update_platform_settings(
        self, db: AsyncSession, principal: Principal, changes: dict[str, Any]
    ) -> PaymentInstructions:
        self._guard.require(principal, Capability.MANAGE_PLATFORM)
        valid_keys = {k.value for k in PlatformSettingKey}
        try:
            written: dict[str, int] = {}
            for key, value in changes.items():
                if key not in valid_keys:
                    continue
                row = await self._repo.upsert(
                    db, key, str(value) if value is not None else None, principal.id
                )
                written[key] = row.version
            await self._audit.record(
                db,
                action="platform_settings_updated",
                actor_id=principal.id,
                target_type="platform_settings",
                target_id=None,
                metadata={"versions": written},
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await self._cache.invalidate()
        logger.info("Platform settings updated by %s: %s", principal.id, sorted(written))
        return _to_instructions(await self._repo.get_all(db))
