from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Numeric, DateTime, ForeignKey, JSON, func

from .accounts import Base


class Bill(Base):
    __tablename__ = 'bills'
    STATUS_PENDING = 'PENDING'
    STATUS_PAID = 'PAID'
    STATUS_CANCELLED = 'CANCELLED'
    ALL_STATUSES = (STATUS_PENDING, STATUS_PAID, STATUS_CANCELLED)
    PAYMENT_CASH = 'CASH'
    ALL_PAYMENT_METHODS = (PAYMENT_CASH, 'CARD', 'UPI', 'BANK_TRANSFER')
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey('customers.id'), nullable=False, index=True)
    technician_id: Mapped[int] = mapped_column(ForeignKey('technicians.id'), nullable=False, index=True)
    # [{"description": str, "amount": "12.50"}]
    items: Mapped[list] = mapped_column(JSON, default=list)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    bill_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_PENDING, index=True)
    payment_method: Mapped[str] = mapped_column(String(16), nullable=False, default=PAYMENT_CASH)
    notes: Mapped[str] = mapped_column(String(500), nullable=False, default='')
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship('Customer')

# No enforced status transitions: PENDING / PAID / CANCELLED may move any -> any.
