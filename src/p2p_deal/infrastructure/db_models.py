"""SQLAlchemy ORM model for the deals table (DDL reference only; queries use raw SQL)."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ARRAY, Boolean, DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.p2p_common.database import Base


class DealORM(Base):
    __tablename__ = "deals"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(32), ForeignKey("orders.id"), nullable=False)
    response_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("responses.id"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(String(64), ForeignKey("actors.id"), nullable=False)
    counterparty_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("actors.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(28, 8), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(28, 8), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(38, 8), nullable=False)
    payment_methods: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="in_progress")
    author_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    counterparty_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author_proof: Mapped[str | None] = mapped_column(Text, nullable=True)
    counterparty_proof: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancelled_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    cancel_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
