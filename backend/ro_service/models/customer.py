from __future__ import annotations
from datetime import date, datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Date, DateTime, ForeignKey, JSON, func

from .accounts import Base


class Customer(Base):
    __tablename__ = 'customers'
    CATEGORY_AMC = 'AMC'
    CATEGORY_NEW = 'NEW'
    CATEGORY_PAID = 'PAID'
    ALL_CATEGORIES = (CATEGORY_AMC, CATEGORY_NEW, CATEGORY_PAID)
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_OFFLINE = 'OFFLINE'
    ALL_STATUSES = (STATUS_ACTIVE, STATUS_OFFLINE)
    GENERATION_AUTOMATIC = 'AUTOMATIC'
    GENERATION_MANUAL = 'MANUAL'
    ALL_GENERATION_TYPES = (GENERATION_AUTOMATIC, GENERATION_MANUAL)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    technician_id: Mapped[int] = mapped_column(ForeignKey('technicians.id'), nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    contact_number: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    area: Mapped[Optional[str]] = mapped_column(String(128), index=True)
    joining_date: Mapped[date] = mapped_column(Date, nullable=False)
    tds: Mapped[Optional[int]] = mapped_column(Integer)
    ro_model: Mapped[Optional[str]] = mapped_column(String(64))
    category: Mapped[str] = mapped_column(String(16), nullable=False, default=CATEGORY_NEW)
    number_of_services: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    service_generation_type: Mapped[str] = mapped_column(String(16), nullable=False, default=GENERATION_AUTOMATIC)
    remark: Mapped[Optional[str]] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_ACTIVE, index=True)
    reminders: Mapped[list] = mapped_column(JSON, default=list)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # insertion order == service_number order
    services = relationship('Service', back_populates='customer', order_by='Service.service_number')
