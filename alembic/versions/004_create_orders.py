"""004: create orders table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19

listing_id carries no foreign key: the order is a snapshot and survives the
listing being deleted.
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                      VARCHAR(32)     PRIMARY KEY,
            listing_id              VARCHAR(32)     NOT NULL,
            buyer_id                VARCHAR(64)     NOT NULL,
            seller_id               VARCHAR(64)     NOT NULL,
            listing_price           NUMERIC(14, 2)  NOT NULL,
            platform_fee            NUMERIC(14, 2)  NOT NULL,
            seller_payout           NUMERIC(14, 2)  NOT NULL,
            status                  VARCHAR(32)     NOT NULL DEFAULT 'PENDING_PAYMENT',
            buyer_phone             VARCHAR(32)     NOT NULL,
            buyer_email             VARCHAR(255)    NOT NULL,
            admin_notes             TEXT,
            payment_screenshot_url  TEXT,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            confirmed_at            TIMESTAMPTZ,
            completed_at            TIMESTAMPTZ,
            refunded_at             TIMESTAMPTZ,
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_status CHECK (status IN (
                'PENDING_PAYMENT', 'AWAITING_CONFIRMATION', 'PAYMENT_CONFIRMED',
                'COMPLETED', 'REFUNDED', 'CANCELLED'
            )),
            CONSTRAINT ck_orders_fee_split CHECK (
                platform_fee + seller_payout = listing_price
            ),
            CONSTRAINT ck_orders_non_negative CHECK (
                listing_price >= 0 AND platform_fee >= 0 AND seller_payout >= 0
            ),
            CONSTRAINT ck_orders_no_self_purchase CHECK (buyer_id <> seller_id),
            CONSTRAINT ck_orders_confirmed_at CHECK (
                (confirmed_at IS NOT NULL)
                = (status IN ('PAYMENT_CONFIRMED', 'COMPLETED'))
            ),
            CONSTRAINT ck_orders_completed_at CHECK (
                (completed_at IS NOT NULL) = (status = 'COMPLETED')
            ),
            CONSTRAINT ck_orders_refunded_at CHECK (
                (refunded_at IS NOT NULL) = (status = 'REFUNDED')
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, id DESC);")
    op.execute("CREATE INDEX idx_orders_seller ON orders (seller_id, id DESC);")
    op.execute("CREATE INDEX idx_orders_status ON orders (status, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
