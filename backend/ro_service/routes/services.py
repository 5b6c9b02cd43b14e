from flask import Blueprint, request
from ro_service import get_db
from ro_service.decorators.audit import audit_log
from ro_service.decorators.auth import require_permissions
from ro_service.models.customer import Customer
from ro_service.models.service import Service
from ro_service.services.maintenance import get_service, complete_service, services_query
from ro_service.services.policy import current_technician_id
from ro_service.services.tasks import create_batch_task
from ro_service.utils.listing import apply_pagination, build_list_payload
from ro_service.utils.validation import validate_status

svc_bp = Blueprint('services', __name__)


def service_json(s: Service):
    return {
        'id': s.id,
        'customer_id': s.customer_id,
        'technician_id': s.technician_id,
        'service_number': s.service_number,
        'category': s.category,
        'status': s.status,
        'scheduled_date': s.scheduled_date.isoformat() if s.scheduled_date else None,
        'completed_date': s.completed_date.isoformat() if s.completed_date else None,
        'parts_used': list(s.parts_used or []),
        'task_id': s.task_id,
    }


def _prefetch_service(service_id):
    return service_json(get_service(get_db(), service_id, current_technician_id()))


@svc_bp.get('')
@require_permissions('SVC.READ')
def list_services():
    tech_id = current_technician_id()
    args = request.args
    status = args.get('status', Service.STATUS_PENDING)
    if status:
        validate_status(status, Service.ALL_STATUSES)
    category = args.get('category')
    if category:
        validate_status(category, Customer.ALL_CATEGORIES, 'category')
    customer_id = args.get('customer_id', type=int)
    stmt = services_query(tech_id, month=args.get('month', 'current'), status=status or None,
                          category=category, customer_id=customer_id)
    rows, total, limit, offset = apply_pagination(get_db(), stmt)
    return build_list_payload([service_json(s) for s in rows], total, limit, offset)


@svc_bp.get('/<int:service_id>')
@require_permissions('SVC.READ')
def get_one(service_id: int):
    return service_json(get_service(get_db(), service_id, current_technician_id()))


@svc_bp.post('/<int:service_id>/complete')
@require_permissions('SVC.COMPLETE')
@audit_log('SERVICE.COMPLETE', entity='Service', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_service(kw.get('service_id')), meta_keys=['parts_used'])
def complete(service_id: int):
    data = request.json or {}
    svc = complete_service(get_db(), service_id, current_technician_id(), data.get('parts_used'))
    return service_json(svc)


@svc_bp.post('/batch-task')
@require_permissions('TASK.MANAGE')
@audit_log('TASK.CREATE', entity='Task', entity_id_key='id', meta_keys=['title', 'service_ids'])
def batch_task():
    from ro_service.routes.tasks import task_json
    data = request.json or {}
    task = create_batch_task(get_db(), data.get('title'), data.get('service_ids'), current_technician_id())
    return task_json(task), 201
