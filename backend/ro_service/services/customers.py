"""Customer creation with its maintenance schedule, plus profile upkeep."""
from __future__ import annotations
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
from sqlalchemy import select

from ro_service.errors import InvalidInput
from ro_service.models.customer import Customer
from ro_service.models.service import Service
from ro_service.services.linkage import unit_of_work, detach_deleted
from ro_service.services.notifications import notify, CUSTOMER_CREATED
from ro_service.services.policy import assert_owns_record
from ro_service.services.schedule import (
    parse_date, generate_automatic_schedule, generate_manual_schedule, number_schedule,
)
from ro_service.utils.validation import validate_enum, require_fields

logger = logging.getLogger(__name__)

# Fields a technician may edit after creation. The schedule is fixed once generated.
PROFILE_FIELDS = ('full_name', 'contact_number', 'address', 'area', 'tds', 'ro_model', 'remark')


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    val = data.get(key)
    if val is None:
        return None
    if not isinstance(val, str):
        raise InvalidInput(description=f'{key} must be a string')
    return val.strip() or None


def _optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    val = data.get(key)
    if val is None or val == '':
        return None
    if isinstance(val, bool):
        raise InvalidInput(description=f'{key} must be an integer')
    try:
        return int(val)
    except (TypeError, ValueError):
        raise InvalidInput(description=f'{key} must be an integer')


def _plan_schedule(data: Dict[str, Any], generation: str, joining: date):
    """Return (requested count, planned dates).

    The requested count is kept as given; the generated count may differ.
    """
    if generation == Customer.GENERATION_MANUAL:
        dates = generate_manual_schedule(data.get('service_dates') or [])
        return len(dates), dates
    requested = data.get('number_of_services')
    return requested, generate_automatic_schedule(joining, requested)


def create_customer(session, technician_id: int, payload: Dict[str, Any]) -> Customer:
    """Create a customer and every scheduled Service row in one unit of work.

    The whole payload is validated first; no row is written for bad input.
    """
    data = payload or {}
    fields = require_fields(data, 'full_name', 'contact_number', 'address')
    category = validate_enum(data.get('category'), Customer.ALL_CATEGORIES, 'category', Customer.CATEGORY_NEW)
    status = validate_enum(data.get('status'), Customer.ALL_STATUSES, 'status', Customer.STATUS_ACTIVE)
    generation = validate_enum(
        data.get('service_generation_type'), Customer.ALL_GENERATION_TYPES,
        'service_generation_type', Customer.GENERATION_AUTOMATIC,
    )
    joining = parse_date(data['joining_date'], 'joining_date') if data.get('joining_date') else date.today()
    requested, planned = _plan_schedule(data, generation, joining)
    visits = number_schedule(planned)
    extras = {k: _optional_str(data, k) for k in ('area', 'ro_model', 'remark')}
    extras['tds'] = _optional_int(data, 'tds')

    with unit_of_work(session):
        customer = Customer(
            technician_id=technician_id,
            full_name=fields['full_name'],
            contact_number=fields['contact_number'],
            address=fields['address'],
            joining_date=joining,
            category=category,
            number_of_services=requested,
            service_generation_type=generation,
            status=status,
            reminders=[],
            **extras,
        )
        session.add(customer)
        session.flush()  # need customer.id for the service rows
        services = [
            Service(
                customer_id=customer.id,
                technician_id=technician_id,
                service_number=v.service_number,
                category=category,
                status=Service.STATUS_PENDING,
                scheduled_date=v.scheduled_date,
                parts_used=[],
                reminders=[],
            )
            for v in visits
        ]
        session.add_all(services)
        customer.services = services
    logger.info('Customer %s created with %d services technician=%s', customer.id, len(services), technician_id)
    notify(technician_id, CUSTOMER_CREATED, {'customer_id': customer.id, 'service_count': len(services)})
    return customer


def get_customer(session, customer_id: int, technician_id: int) -> Customer:
    return assert_owns_record(session.get(Customer, customer_id), technician_id, 'Customer')


def update_customer(session, customer_id: int, technician_id: int, payload: Dict[str, Any]) -> Customer:
    data = payload or {}
    customer = get_customer(session, customer_id, technician_id)
    unknown = [k for k in data if k not in PROFILE_FIELDS]
    if unknown:
        raise InvalidInput(description=f"Fields not editable: {', '.join(sorted(unknown))}")
    changes: Dict[str, Any] = {}
    for key in ('full_name', 'contact_number', 'address'):
        if key in data:
            changes[key] = require_fields(data, key)[key]
    for key in ('area', 'ro_model', 'remark'):
        if key in data:
            changes[key] = _optional_str(data, key)
    if 'tds' in data:
        changes['tds'] = _optional_int(data, 'tds')
    with unit_of_work(session):
        for key, val in changes.items():
            setattr(customer, key, val)
    return customer


def set_customer_status(session, customer_id: int, technician_id: int, status: Any) -> Customer:
    customer = get_customer(session, customer_id, technician_id)
    new_status = validate_enum(status, Customer.ALL_STATUSES, 'status')
    with unit_of_work(session):
        customer.status = new_status
    return customer


def delete_customer(session, customer_id: int, technician_id: int) -> Customer:
    """Soft delete the customer and its services; their task links are released."""
    customer = get_customer(session, customer_id, technician_id)
    now = datetime.now(timezone.utc)
    with unit_of_work(session):
        live = session.execute(
            select(Service).where(Service.customer_id == customer.id, Service.deleted_at.is_(None))
        ).scalars().all()
        released = detach_deleted(session, live)
        for svc in live:
            svc.deleted_at = now
        customer.deleted_at = now
    if released:
        logger.info('Customer %s deleted; released services %s from tasks', customer.id, released)
    return customer


__all__ = [
    'PROFILE_FIELDS', 'create_customer', 'get_customer', 'update_customer', 'set_customer_status', 'delete_customer',
]
