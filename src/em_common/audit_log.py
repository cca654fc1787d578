"""system_logs writer: append-only audit trail of privileged actions.

Rows are inserted on the caller's session so they commit (or roll back)
together with the change they describe.
"""

import json
from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_INSERT_LOG_SQL = text("""
    INSERT INTO system_logs (action, actor_id, target_type, target_id, metadata)
    VALUES (:action, :actor_id, :target_type, :target_id, CAST(:metadata AS JSONB))
""")


class AuditLogProtocol(Protocol):
    async def record(
        self,
        db: AsyncSession,
        action: str,
        actor_id: str | None,
        target_type: str | None,
        target_id: str | None,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...


class SystemLogRepository:
    async def record(
        self,
        db: AsyncSession,
        action: str,
        actor_id: str | None,
        target_type: str | None,
        target_id: str | None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        await db.execute(
            _INSERT_LOG_SQL,
            {
                "action": action,
                "actor_id": actor_id,
                "target_type": target_type,
                "target_id": target_id,
                "metadata": json.dumps(metadata or {}, default=str),
            },
        )
