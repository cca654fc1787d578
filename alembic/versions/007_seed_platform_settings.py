"""007: seed platform settings keys

Revision ID: 007
Revises: 006
Create Date: 2026-10-19

Keys start with NULL values; the API falls back to configured defaults until
an admin writes them.
"""

from typing import Sequence, Union

from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO platform_settings (key, value, version, updated_by)
        VALUES
            ('fps_number', NULL, 1, 'migration'),
            ('payment_email', NULL, 1, 'migration'),
            ('payment_methods', NULL, 1, 'migration')
        ON CONFLICT (key) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("""
        DELETE FROM platform_settings
        WHERE key IN ('fps_number', 'payment_email', 'payment_methods');
    """)
