from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Optional
from sqlalchemy import select

from ro_service.errors import InvalidInput
from ro_service.models.complaint import Complaint
from ro_service.models.customer import Customer
from ro_service.services.linkage import unit_of_work
from ro_service.services.policy import assert_owns_record
from ro_service.utils.validation import validate_enum


def create_complaint(session, customer_id: Any, technician_id: int, text: Any) -> Complaint:
    if isinstance(customer_id, bool) or not isinstance(customer_id, int):
        raise InvalidInput(description='customer_id must be an integer')
    customer = assert_owns_record(session.get(Customer, customer_id), technician_id, 'Customer')
    if not isinstance(text, str) or not text.strip():
        raise InvalidInput(description='text required')
    with unit_of_work(session):
        complaint = Complaint(customer_id=customer.id, technician_id=technician_id,
                              text=text.strip(), status=Complaint.STATUS_OPEN)
        session.add(complaint)
    return complaint


def get_complaint(session, complaint_id: int, technician_id: int) -> Complaint:
    return assert_owns_record(session.get(Complaint, complaint_id), technician_id, 'Complaint')


def set_complaint_status(session, complaint_id: int, technician_id: int, status: Any) -> Complaint:
    complaint = get_complaint(session, complaint_id, technician_id)
    new_status = validate_enum(status, Complaint.ALL_STATUSES, 'status')
    with unit_of_work(session):
        complaint.status = new_status
    return complaint


def delete_complaint(session, complaint_id: int, technician_id: int) -> Complaint:
    complaint = get_complaint(session, complaint_id, technician_id)
    with unit_of_work(session):
        complaint.deleted_at = datetime.now(timezone.utc)
    return complaint


def complaints_query(technician_id: int, status: Optional[str] = None, customer_id: Optional[int] = None):
    stmt = select(Complaint).where(Complaint.technician_id == technician_id, Complaint.deleted_at.is_(None))
    if status:
        stmt = stmt.where(Complaint.status == status)
    if customer_id is not None:
        stmt = stmt.where(Complaint.customer_id == customer_id)
    return stmt
