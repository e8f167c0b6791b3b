"""003: create orders table

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                    VARCHAR(32)     PRIMARY KEY,
            owner_id              VARCHAR(64)     NOT NULL REFERENCES actors (id),
            side                  VARCHAR(10)     NOT NULL,
            crypto                VARCHAR(10)     NOT NULL,
            fiat                  VARCHAR(10)     NOT NULL,
            amount                NUMERIC(28, 8)  NOT NULL,
            price                 NUMERIC(28, 8)  NOT NULL,
            total_amount          NUMERIC(38, 8)  NOT NULL,
            min_amount            NUMERIC(38, 8)  NOT NULL,
            max_amount            NUMERIC(38, 8)  NOT NULL,
            payment_methods       TEXT[]          NOT NULL,
            description           TEXT,
            status                VARCHAR(20)     NOT NULL DEFAULT 'active',
            response_count        INT             NOT NULL DEFAULT 0,
            accepted_response_id  VARCHAR(32),
            created_at            TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at            TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            completed_at          TIMESTAMPTZ,
            CONSTRAINT ck_orders_side        CHECK (side IN ('buy', 'sell')),
            CONSTRAINT ck_orders_crypto      CHECK (crypto IN ('BTC', 'ETH', 'USDT', 'USDC', 'LTC', 'TON')),
            CONSTRAINT ck_orders_fiat        CHECK (fiat IN ('RUB', 'USD', 'EUR', 'UAH')),
            CONSTRAINT ck_orders_amount      CHECK (amount > 0),
            CONSTRAINT ck_orders_price       CHECK (price > 0),
            CONSTRAINT ck_orders_limits      CHECK (min_amount >= 0 AND max_amount >= min_amount),
            CONSTRAINT ck_orders_methods     CHECK (cardinality(payment_methods) > 0),
            CONSTRAINT ck_orders_responses   CHECK (response_count >= 0),
            CONSTRAINT ck_orders_status      CHECK (
                status IN ('active', 'has_responses', 'in_deal', 'completed', 'cancelled', 'expired')
            )
        );
    """)
    op.execute("""
        CREATE INDEX idx_orders_market_open
        ON orders (created_at DESC, id DESC)
        WHERE status IN ('active', 'has_responses');
    """)
    op.execute("CREATE INDEX idx_orders_owner ON orders (owner_id, created_at DESC);")
    op.execute("CREATE INDEX idx_orders_pair ON orders (crypto, fiat, status);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TRIGGER trg_orders_no_delete
            BEFORE DELETE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_forbid_delete();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Standing buy/sell offers; never physically deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
