"""006: create system_logs table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE system_logs (
            id           BIGSERIAL       PRIMARY KEY,
            action       VARCHAR(64)     NOT NULL,
            actor_id     VARCHAR(64),
            target_type  VARCHAR(32),
            target_id    VARCHAR(64),
            metadata     JSONB           NOT NULL DEFAULT '{}'::JSONB,
            created_at   TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute(
        "CREATE INDEX idx_system_logs_target ON system_logs (target_type, target_id);"
    )
    op.execute("CREATE INDEX idx_system_logs_created ON system_logs (created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS system_logs CASCADE;")
