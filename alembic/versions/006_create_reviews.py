"""006: create reviews and review_reports tables

Revision ID: 006
Revises: 005
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE reviews (
            id              VARCHAR(32)   PRIMARY KEY,
            deal_id         VARCHAR(32)   NOT NULL REFERENCES deals (id),
            from_actor_id   VARCHAR(64)   NOT NULL REFERENCES actors (id),
            to_actor_id     VARCHAR(64)   NOT NULL REFERENCES actors (id),
            rating          SMALLINT      NOT NULL,
            review_type     VARCHAR(10)   NOT NULL,
            comment         TEXT,
            is_anonymous    BOOLEAN       NOT NULL DEFAULT FALSE,
            reported_count  INT           NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_reviews_deal_author  UNIQUE (deal_id, from_actor_id),
            CONSTRAINT ck_reviews_rating       CHECK (rating BETWEEN 1 AND 5),
            CONSTRAINT ck_reviews_type         CHECK (review_type IN ('positive', 'neutral', 'negative')),
            CONSTRAINT ck_reviews_distinct     CHECK (from_actor_id <> to_actor_id),
            CONSTRAINT ck_reviews_low_comment  CHECK (rating > 2 OR comment IS NOT NULL)
        );
    """)
    op.execute("CREATE INDEX idx_reviews_to_actor ON reviews (to_actor_id, created_at DESC);")
    # Reviews are append-only: only the report counter may change
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_reviews_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            IF (NEW.deal_id, NEW.from_actor_id, NEW.to_actor_id, NEW.rating,
                NEW.review_type, NEW.comment, NEW.is_anonymous, NEW.created_at)
               IS DISTINCT FROM
               (OLD.deal_id, OLD.from_actor_id, OLD.to_actor_id, OLD.rating,
                OLD.review_type, OLD.comment, OLD.is_anonymous, OLD.created_at) THEN
                RAISE EXCEPTION 'review % is immutable', OLD.id
                    USING ERRCODE = 'restrict_violation';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_reviews_immutable
            BEFORE UPDATE ON reviews
            FOR EACH ROW EXECUTE FUNCTION fn_reviews_immutable();
    """)
    op.execute("""
        CREATE TRIGGER trg_reviews_no_delete
            BEFORE DELETE ON reviews
            FOR EACH ROW EXECUTE FUNCTION fn_forbid_delete();
    """)

    op.execute("""
        CREATE TABLE review_reports (
            id           VARCHAR(32)   PRIMARY KEY,
            review_id    VARCHAR(32)   NOT NULL REFERENCES reviews (id),
            reporter_id  VARCHAR(64)   NOT NULL REFERENCES actors (id),
            reason       VARCHAR(30)   NOT NULL,
            comment      TEXT,
            status       VARCHAR(20)   NOT NULL DEFAULT 'pending',
            created_at   TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_review_reports_reporter UNIQUE (review_id, reporter_id),
            CONSTRAINT ck_review_reports_reason   CHECK (
                reason IN ('spam', 'inappropriate_language', 'fake_review',
                           'personal_attack', 'irrelevant_content', 'other')
            ),
            CONSTRAINT ck_review_reports_status   CHECK (status IN ('pending', 'resolved', 'dismissed'))
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS review_reports CASCADE;")
    op.execute("DROP TABLE IF EXISTS reviews CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_reviews_immutable();")
