"""005: create platform_settings table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE platform_settings (
            key         VARCHAR(64)     PRIMARY KEY,
            value       TEXT,
            version     INTEGER         NOT NULL DEFAULT 1,
            updated_by  VARCHAR(64),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_platform_settings_version CHECK (version >= 1)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS platform_settings CASCADE;")
