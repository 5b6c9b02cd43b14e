from __future__ import annotations
from datetime import date, datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Date, DateTime, ForeignKey, JSON, UniqueConstraint, func
from ro_service.models.accounts import Base


class Service(Base):
    """One scheduled-or-completed maintenance visit for a customer."""
    __tablename__ = 'services'
    # Status constants
    STATUS_PENDING = 'PENDING'
    STATUS_COMPLETED = 'COMPLETED'
    ALL_STATUSES = (STATUS_PENDING, STATUS_COMPLETED)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey('customers.id'), nullable=False, index=True)
    technician_id: Mapped[int] = mapped_column(ForeignKey('technicians.id'), nullable=False, index=True)
    service_number: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_PENDING, index=True)
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    completed_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    parts_used: Mapped[list] = mapped_column(JSON, default=list)
    task_id: Mapped[Optional[int]] = mapped_column(ForeignKey('tasks.id'), nullable=True, index=True)
    reminders: Mapped[list] = mapped_column(JSON, default=list)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship('Customer', back_populates='services')
    task = relationship('Task', back_populates='services')

    __table_args__ = (UniqueConstraint('customer_id', 'service_number', name='uq_customer_service_number'),)

# Status flow: PENDING -> COMPLETED (terminal, never re-opened).
# task_id is only written through ro_service.services.linkage.
