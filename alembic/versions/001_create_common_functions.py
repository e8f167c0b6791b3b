"""001: create common trigger functions

Revision ID: 001
Revises: 
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Maintains updated_at on every mutable ledger table
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    # Orders, responses, deals and reviews are never physically deleted
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_forbid_delete()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'rows of % are never deleted (id=%)', TG_TABLE_NAME, OLD.id
                USING ERRCODE = 'restrict_violation';
        END;
        $$ LANGUAGE plpgsql;
    """)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS fn_forbid_delete();")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
