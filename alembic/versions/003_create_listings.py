"""003: create listings table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id                VARCHAR(32)     PRIMARY KEY,
            seller_id         VARCHAR(64)     NOT NULL,
            username          VARCHAR(64)     NOT NULL,
            follower_count    INTEGER         NOT NULL DEFAULT 0,
            avatar_url        TEXT,
            pricing_strategy  VARCHAR(32)     NOT NULL,
            fixed_price       NUMERIC(14, 2),
            percentage_rate   NUMERIC(5, 2),
            contact_phone     VARCHAR(32),
            contact_email     VARCHAR(255),
            payment_details   TEXT,
            is_published      BOOLEAN         NOT NULL DEFAULT FALSE,
            last_synced_at    TIMESTAMPTZ,
            created_at        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_followers CHECK (follower_count >= 0),
            CONSTRAINT ck_listings_strategy CHECK (
                pricing_strategy IN ('FIXED', 'PERCENTAGE_OF_FOLLOWERS')
            ),
            CONSTRAINT ck_listings_fixed CHECK (
                pricing_strategy <> 'FIXED'
                OR (percentage_rate IS NULL AND (fixed_price IS NULL OR fixed_price >= 0))
            ),
            CONSTRAINT ck_listings_percentage CHECK (
                pricing_strategy <> 'PERCENTAGE_OF_FOLLOWERS'
                OR (fixed_price IS NULL AND percentage_rate BETWEEN 0 AND 100)
            )
        );
    """)
    op.execute("CREATE INDEX idx_listings_seller ON listings (seller_id);")
    op.execute(
        "CREATE INDEX idx_listings_published ON listings (id DESC) WHERE is_published;"
    )
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
