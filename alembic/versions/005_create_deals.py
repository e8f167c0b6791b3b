"""005: create deals table

Revision ID: 005
Revises: 004
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE deals (
            id                      VARCHAR(32)     PRIMARY KEY,
            order_id                VARCHAR(32)     NOT NULL REFERENCES orders (id),
            response_id             VARCHAR(32)     NOT NULL REFERENCES responses (id),
            author_id               VARCHAR(64)     NOT NULL REFERENCES actors (id),
            counterparty_id         VARCHAR(64)     NOT NULL REFERENCES actors (id),
            amount                  NUMERIC(28, 8)  NOT NULL,
            price                   NUMERIC(28, 8)  NOT NULL,
            total_amount            NUMERIC(38, 8)  NOT NULL,
            payment_methods         TEXT[]          NOT NULL,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'in_progress',
            author_confirmed        BOOLEAN         NOT NULL DEFAULT FALSE,
            counterparty_confirmed  BOOLEAN         NOT NULL DEFAULT FALSE,
            author_proof            TEXT,
            counterparty_proof      TEXT,
            cancelled_by            VARCHAR(64),
            cancel_reason           TEXT,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            completed_at            TIMESTAMPTZ,
            CONSTRAINT uq_deals_response       UNIQUE (response_id),
            CONSTRAINT ck_deals_distinct_party CHECK (author_id <> counterparty_id),
            CONSTRAINT ck_deals_status         CHECK (
                status IN ('in_progress', 'waiting_payment', 'completed', 'cancelled', 'expired')
            ),
            CONSTRAINT ck_deals_completed_iff_confirmed CHECK (
                (status = 'completed') = (author_confirmed AND counterparty_confirmed)
            )
        );
    """)
    # At most one non-terminal deal per order
    op.execute("""
        CREATE UNIQUE INDEX uq_deals_live_order
        ON deals (order_id)
        WHERE status IN ('in_progress', 'waiting_payment');
    """)
    op.execute("CREATE INDEX idx_deals_author ON deals (author_id, created_at DESC);")
    op.execute("CREATE INDEX idx_deals_counterparty ON deals (counterparty_id, created_at DESC);")
    op.execute("CREATE INDEX idx_deals_order ON deals (order_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_deals_updated_at
            BEFORE UPDATE ON deals
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TRIGGER trg_deals_no_delete
            BEFORE DELETE ON deals
            FOR EACH ROW EXECUTE FUNCTION fn_forbid_delete();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS deals CASCADE;")
