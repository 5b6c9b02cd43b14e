from __future__ import annotations
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy import select

from ro_service.errors import InvalidInput
from ro_service.models.service import Service
from ro_service.services.linkage import unit_of_work
from ro_service.services.policy import assert_owns_record
from ro_service.utils.fsm import TransitionValidator

logger = logging.getLogger(__name__)

SERVICE_FSM = TransitionValidator({
    Service.STATUS_PENDING: {Service.STATUS_COMPLETED},
    Service.STATUS_COMPLETED: set(),
})


def get_service(session, service_id: int, technician_id: int) -> Service:
    return assert_owns_record(session.get(Service, service_id), technician_id, 'Service')


def normalize_parts(raw: Any) -> List[Dict[str, Any]]:
    """Validate ``[{part_name, quantity}]``; quantity defaults to 1."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidInput(description='parts_used must be a list')
    parts = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise InvalidInput(description=f'parts_used[{idx}] must be an object')
        name = item.get('part_name')
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput(description=f'parts_used[{idx}].part_name required')
        qty = item.get('quantity', 1)
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise InvalidInput(description=f'parts_used[{idx}].quantity must be a positive integer')
        parts.append({'part_name': name.strip(), 'quantity': qty})
    return parts


def complete_service(session, service_id: int, technician_id: int, parts_used: Any = None) -> Service:
    """Mark a pending visit COMPLETED with the parts used.

    The owning task's status is not touched.
    """
    svc = get_service(session, service_id, technician_id)
    parts = normalize_parts(parts_used)
    SERVICE_FSM.assert_can_transition(svc.status, Service.STATUS_COMPLETED)
    with unit_of_work(session):
        svc.parts_used = parts
        svc.status = Service.STATUS_COMPLETED
        svc.completed_date = datetime.now(timezone.utc)
    logger.info('Service %s completed technician=%s parts=%d', svc.id, technician_id, len(parts))
    return svc


def month_bounds(today: Optional[date] = None):
    today = today or date.today()
    start = today.replace(day=1)
    end = start.replace(year=start.year + 1, month=1) if start.month == 12 else start.replace(month=start.month + 1)
    return start, end


def services_query(technician_id: int, *, month: str = 'current', status: Optional[str] = Service.STATUS_PENDING,
                   category: Optional[str] = None, customer_id: Optional[int] = None, today: Optional[date] = None):
    stmt = select(Service).where(Service.technician_id == technician_id, Service.deleted_at.is_(None))
    if month == 'current':
        start, end = month_bounds(today)
        stmt = stmt.where(Service.scheduled_date >= start, Service.scheduled_date < end)
    elif month != 'all':
        raise InvalidInput(description='month must be current or all')
    if status:
        stmt = stmt.where(Service.status == status)
    if category:
        stmt = stmt.where(Service.category == category)
    if customer_id is not None:
        stmt = stmt.where(Service.customer_id == customer_id)
    return stmt.order_by(Service.scheduled_date.asc(), Service.id.asc())


__all__ = ['SERVICE_FSM', 'get_service', 'normalize_parts', 'complete_service', 'month_bounds', 'services_query']
