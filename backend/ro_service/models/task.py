from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, DateTime, ForeignKey, func

from .accounts import Base


class Task(Base):
    __tablename__ = 'tasks'
    STATUS_PENDING = 'PENDING'
    STATUS_COMPLETED = 'COMPLETED'
    ALL_STATUSES = (STATUS_PENDING, STATUS_COMPLETED)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    technician_id: Mapped[int] = mapped_column(ForeignKey('technicians.id'), nullable=False, index=True)
    shared_with_id: Mapped[Optional[int]] = mapped_column(ForeignKey('technicians.id'), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    services = relationship('Service', back_populates='task', order_by='Service.scheduled_date')
    shared_with = relationship('Technician', foreign_keys=[shared_with_id])

# Status is set by the technician; it is never derived from member service statuses.
