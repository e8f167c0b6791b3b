"""002: create actors table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE actors (
            id               VARCHAR(64)       PRIMARY KEY,
            rating           DOUBLE PRECISION  NOT NULL DEFAULT 0,
            review_count     INT               NOT NULL DEFAULT 0,
            total_orders     INT               NOT NULL DEFAULT 0,
            active_orders    INT               NOT NULL DEFAULT 0,
            completed_deals  INT               NOT NULL DEFAULT 0,
            is_active        BOOLEAN           NOT NULL DEFAULT TRUE,
            created_at       TIMESTAMPTZ       NOT NULL DEFAULT NOW(),
            updated_at       TIMESTAMPTZ       NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_actors_rating          CHECK (rating >= 0 AND rating <= 5),
            CONSTRAINT ck_actors_counters_gte_0  CHECK (
                review_count >= 0 AND total_orders >= 0
                AND active_orders >= 0 AND completed_deals >= 0
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_actors_updated_at
            BEFORE UPDATE ON actors
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE actors IS 'Authenticated parties; created on first request, never deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS actors CASCADE;")
