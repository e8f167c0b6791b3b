"""SQLAlchemy ORM model for the orders table (DDL reference only; queries use raw SQL)."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ARRAY, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.p2p_common.database import Base


class OrderORM(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), ForeignKey("actors.id"), nullable=False)
    side: Mapped[str] = mapped_column(String(10), nullable=False)
    crypto: Mapped[str] = mapped_column(String(10), nullable=False)
    fiat: Mapped[str] = mapped_column(String(10), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(28, 8), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(28, 8), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(38, 8), nullable=False)
    min_amount: Mapped[Decimal] = mapped_column(Numeric(38, 8), nullable=False)
    max_amount: Mapped[Decimal] = mapped_column(Numeric(38, 8), nullable=False)
    payment_methods: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    response_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accepted_response_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
