"""004: create responses table

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE responses (
            id              VARCHAR(32)   PRIMARY KEY,
            order_id        VARCHAR(32)   NOT NULL REFERENCES orders (id),
            responder_id    VARCHAR(64)   NOT NULL REFERENCES actors (id),
            message         TEXT,
            status          VARCHAR(20)   NOT NULL DEFAULT 'waiting',
            reject_reason   TEXT,
            created_at      TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            reviewed_at     TIMESTAMPTZ,
            CONSTRAINT ck_responses_status CHECK (status IN ('waiting', 'accepted', 'rejected'))
        );
    """)
    # At most one waiting response per (order, responder)
    op.execute("""
        CREATE UNIQUE INDEX uq_responses_waiting
        ON responses (order_id, responder_id)
        WHERE status = 'waiting';
    """)
    op.execute("CREATE INDEX idx_responses_order ON responses (order_id, created_at DESC);")
    op.execute("CREATE INDEX idx_responses_responder ON responses (responder_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_responses_updated_at
            BEFORE UPDATE ON responses
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TRIGGER trg_responses_no_delete
            BEFORE DELETE ON responses
            FOR EACH ROW EXECUTE FUNCTION fn_forbid_delete();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS responses CASCADE;")
