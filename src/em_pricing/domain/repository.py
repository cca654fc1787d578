# src/em_pricing/domain/repository.py
"""Repository and cache Protocols for platform settings."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.em_pricing.domain.models import PaymentInstructions, PlatformSetting


class PlatformSettingsRepositoryProtocol(Protocol):
    async def get_all(self, db: AsyncSession) -> list[PlatformSetting]: ...

    async def upsert(
        self, db: AsyncSession, key: str, value: str | None, updated_by: str
    ) -> PlatformSetting: ...


class PaymentInstructionsCacheProtocol(Protocol):
    async def get(self) -> PaymentInstructions | None: ...

    async def set(self, instructions: PaymentInstructions) -> None: ...

    async def invalidate(self) -> None: ...
