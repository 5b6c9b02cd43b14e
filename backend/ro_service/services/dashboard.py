from __future__ import annotations
from typing import Any, Dict, List
from sqlalchemy import select, func

from ro_service.models.customer import Customer
from ro_service.models.service import Service

UNKNOWN_AREA = 'Unknown Area'


def completion_rate(pending: int, completed: int) -> int:
    total = pending + completed
    return round(completed * 100 / total) if total else 0


def _count(session, stmt) -> int:
    return session.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()


def technician_dashboard(session, technician_id: int) -> Dict[str, Any]:
    customers = select(Customer.id).where(Customer.technician_id == technician_id, Customer.deleted_at.is_(None))
    services = select(Service.id).where(Service.technician_id == technician_id, Service.deleted_at.is_(None))
    all_customers = _count(session, customers)
    active_customers = _count(session, customers.where(Customer.status == Customer.STATUS_ACTIVE))
    pending = _count(session, services.where(Service.status == Service.STATUS_PENDING))
    completed = _count(session, services.where(Service.status == Service.STATUS_COMPLETED))

    rows = session.execute(
        select(Service, Customer.area)
        .join(Customer, Customer.id == Service.customer_id)
        .where(
            Service.technician_id == technician_id,
            Service.deleted_at.is_(None),
            Service.status == Service.STATUS_PENDING,
        )
        .order_by(Service.scheduled_date.asc(), Service.id.asc())
    ).all()
    groups: Dict[str, List[Service]] = {}
    for svc, area in rows:
        groups.setdefault(area or UNKNOWN_AREA, []).append(svc)
    areas = [
        {
            'area_name': name,
            'service_count': len(items),
            'services': [
                {
                    'id': s.id,
                    'customer_id': s.customer_id,
                    'service_number': s.service_number,
                    'status': s.status,
                    'scheduled_date': s.scheduled_date.isoformat(),
                    'category': s.category,
                }
                for s in items
            ],
        }
        for name, items in groups.items()
    ]
    areas.sort(key=lambda a: (-a['service_count'], a['area_name']))
    return {
        'metrics': {
            'all_customers': all_customers,
            'active_customers': active_customers,
            'pending_services': pending,
            'completed_services': completed,
            'completion_rate': completion_rate(pending, completed),
        },
        'areas': areas,
    }
