from __future__ import annotations
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
from sqlalchemy import select

from ro_service.errors import InvalidInput, NotFound
from ro_service.models.bill import Bill
from ro_service.models.customer import Customer
from ro_service.services.linkage import unit_of_work
from ro_service.services.notifications import notify, BILL_GENERATED
from ro_service.services.policy import assert_owns_record
from ro_service.utils.validation import validate_enum

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
MAX_NOTES = 500


def _amount(raw: Any, idx: int) -> Decimal:
    if isinstance(raw, bool) or raw is None:
        raise InvalidInput(description=f'items[{idx}].amount must be a positive number')
    try:
        # str() first so floats like 0.1 keep their printed value
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise InvalidInput(description=f'items[{idx}].amount must be a positive number')
    if not value.is_finite() or value <= 0:
        raise InvalidInput(description=f'items[{idx}].amount must be a positive number')
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def normalize_items(raw: Any) -> List[Dict[str, str]]:
    if not isinstance(raw, list) or not raw:
        raise InvalidInput(description='items must be a non-empty list')
    items = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise InvalidInput(description=f'items[{idx}] must be an object')
        desc = item.get('description')
        if not isinstance(desc, str) or not desc.strip():
            raise InvalidInput(description=f'items[{idx}].description required')
        items.append({'description': desc.strip(), 'amount': str(_amount(item.get('amount'), idx))})
    return items


def bill_total(items: List[Dict[str, str]]) -> Decimal:
    return sum((Decimal(i['amount']) for i in items), Decimal('0.00')).quantize(CENTS)


def _notes(raw: Any) -> str:
    if raw is None:
        return ''
    if not isinstance(raw, str) or len(raw) > MAX_NOTES:
        raise InvalidInput(description=f'notes must be a string of at most {MAX_NOTES} characters')
    return raw.strip()


def create_bill(session, customer_id: int, technician_id: int, items: Any,
                payment_method: Optional[str] = None, notes: Optional[str] = None) -> Bill:
    if isinstance(customer_id, bool) or not isinstance(customer_id, int):
        raise InvalidInput(description='customer_id must be an integer')
    customer = session.get(Customer, customer_id)
    # OFFLINE customers can still be billed; only deletion hides them
    if customer is None or customer.deleted_at is not None or customer.technician_id != technician_id:
        raise NotFound(description='Customer not found')
    lines = normalize_items(items)
    method = validate_enum(payment_method, Bill.ALL_PAYMENT_METHODS, 'payment_method', Bill.PAYMENT_CASH)
    note = _notes(notes)
    with unit_of_work(session):
        bill = Bill(
            customer_id=customer.id,
            technician_id=technician_id,
            items=lines,
            total=bill_total(lines),
            status=Bill.STATUS_PENDING,
            payment_method=method,
            notes=note,
            bill_date=datetime.now(timezone.utc),
        )
        session.add(bill)
    logger.info('Bill %s generated customer=%s total=%s', bill.id, customer.id, bill.total)
    notify(technician_id, BILL_GENERATED, {'bill_id': bill.id, 'customer_id': customer.id, 'total': str(bill.total)})
    return bill


def get_bill(session, bill_id: int, technician_id: int) -> Bill:
    return assert_owns_record(session.get(Bill, bill_id), technician_id, 'Bill')


def update_bill(session, bill_id: int, technician_id: int, status: Optional[str] = None,
                payment_method: Optional[str] = None, notes: Optional[str] = None) -> Bill:
    """Status moves any -> any among PENDING/PAID/CANCELLED."""
    bill = get_bill(session, bill_id, technician_id)
    changes: Dict[str, Any] = {}
    if status is not None:
        changes['status'] = validate_enum(status, Bill.ALL_STATUSES, 'status')
    if payment_method is not None:
        changes['payment_method'] = validate_enum(payment_method, Bill.ALL_PAYMENT_METHODS, 'payment_method')
    if notes is not None:
        changes['notes'] = _notes(notes)
    with unit_of_work(session):
        for key, val in changes.items():
            setattr(bill, key, val)
    return bill


def delete_bill(session, bill_id: int, technician_id: int) -> Bill:
    bill = get_bill(session, bill_id, technician_id)
    with unit_of_work(session):
        bill.deleted_at = datetime.now(timezone.utc)
    return bill


def bills_query(technician_id: int, *, status: Optional[str] = None, customer_id: Optional[int] = None,
                date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
    stmt = select(Bill).where(Bill.technician_id == technician_id, Bill.deleted_at.is_(None))
    if status:
        stmt = stmt.where(Bill.status == status)
    if customer_id is not None:
        stmt = stmt.where(Bill.customer_id == customer_id)
    if date_from is not None:
        stmt = stmt.where(Bill.bill_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Bill.bill_date < date_to)
    return stmt


__all__ = [
    'normalize_items', 'bill_total', 'create_bill', 'get_bill', 'update_bill', 'delete_bill', 'bills_query',
]
