"""PlatformSettingsRepository: versioned key/value rows.

Each upsert bumps the key's version; there is no process-wide settings object.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_pricing.domain.models import PlatformSetting

_GET_ALL_SQL = text("""
    SELECT key, value, version, updated_by, updated_at
    FROM platform_settings
    ORDER BY key
""")

_UPSERT_SQL = text("""
    INSERT INTO platform_settings (key, value, version, updated_by)
    VALUES (:key, :value, 1, :updated_by)
    ON CONFLICT (key) DO UPDATE
        SET value = EXCLUDED.value,
            version = platform_settings.version + 1,
            updated_by = EXCLUDED.updated_by,
            updated_at = NOW()
    RETURNING key, value, version, updated_by, updated_at
""")


def _row_to_setting(row: Any) -> PlatformSetting:
    return PlatformSetting(
        key=row.key,
        value=row.value,
        version=row.version,
        updated_by=row.updated_by,
        updated_at=row.updated_at,
    )


class PlatformSettingsRepository:
    async def get_all(self, db: AsyncSession) -> list[PlatformSetting]:
        result = await db.execute(_GET_ALL_SQL)
        return [_row_to_setting(row) for row in result.fetchall()]

    async def upsert(
        self, db: AsyncSession, key: str, value: str | None, updated_by: str
    ) -> PlatformSetting:
        result = await db.execute(
            _UPSERT_SQL, {"key": key, "value": value, "updated_by": updated_by}
        )
        return _row_to_setting(result.fetchone())
