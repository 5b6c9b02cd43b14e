from flask import Blueprint, request
from ro_service import get_db
from ro_service.decorators.audit import audit_log
from ro_service.decorators.auth import require_permissions
from ro_service.models.task import Task
from ro_service.routes.services import service_json
from ro_service.services import tasks as task_ops
from ro_service.services.policy import current_technician_id
from ro_service.utils.listing import apply_pagination, build_list_payload
from ro_service.utils.sorting import apply_multi_sort
from ro_service.utils.validation import validate_status

task_bp = Blueprint('tasks', __name__)

SORTABLE = {
    'created_at': Task.created_at,
    'title': Task.title,
    'status': Task.status,
    'id': Task.id,
}


def task_json(t: Task):
    members = task_ops.live_members(t)
    return {
        'id': t.id,
        'title': t.title,
        'technician_id': t.technician_id,
        'shared_with_id': t.shared_with_id,
        'status': t.status,
        'service_ids': [s.id for s in members],
        'services': [service_json(s) for s in members],
        'created_at': t.created_at.isoformat() if t.created_at else None,
    }


def _prefetch_task(task_id):
    return task_json(task_ops.get_task(get_db(), task_id, current_technician_id()))


@task_bp.get('')
@require_permissions('TASK.READ')
def list_tasks():
    tech_id = current_technician_id()
    status = request.args.get('status')
    if status:
        validate_status(status, Task.ALL_STATUSES)
    stmt = task_ops.visible_tasks_query(tech_id, status)
    stmt = apply_multi_sort(stmt, request.args.get('sort') or '-created_at', SORTABLE, Task.id)
    rows, total, limit, offset = apply_pagination(get_db(), stmt)
    return build_list_payload([task_json(t) for t in rows], total, limit, offset)


@task_bp.get('/<int:task_id>')
@require_permissions('TASK.READ')
def get_task(task_id: int):
    return task_json(task_ops.get_task(get_db(), task_id, current_technician_id()))


@task_bp.post('/<int:task_id>/services')
@require_permissions('TASK.MANAGE')
@audit_log('TASK.SERVICES.ADD', entity='Task', entity_id_key='id', diff_keys=['service_ids'],
           pre_fetch=lambda a, kw: _prefetch_task(kw.get('task_id')))
def add_services(task_id: int):
    data = request.json or {}
    task = task_ops.add_services_to_task(get_db(), task_id, data.get('service_ids'), current_technician_id())
    return task_json(task)


@task_bp.delete('/<int:task_id>/services')
@require_permissions('TASK.MANAGE')
@audit_log('TASK.SERVICES.REMOVE', entity='Task', entity_id_arg='task_id', meta_keys=['released_ids'])
def remove_services(task_id: int):
    data = request.json or {}
    released = task_ops.remove_services_from_task(get_db(), task_id, data.get('service_ids'), current_technician_id())
    return {'task_id': task_id, 'released_ids': released}


@task_bp.post('/<int:task_id>/share')
@require_permissions('TASK.SHARE')
@audit_log('TASK.SHARE', entity='Task', entity_id_key='id', meta_keys=['shared_with_id'])
def share(task_id: int):
    data = request.json or {}
    task = task_ops.share_task(get_db(), task_id, data.get('contact_number'), current_technician_id())
    return task_json(task)


@task_bp.patch('/<int:task_id>')
@require_permissions('TASK.MANAGE')
@audit_log('TASK.UPDATE', entity='Task', entity_id_key='id', diff_keys=['title', 'shared_with_id'],
           pre_fetch=lambda a, kw: _prefetch_task(kw.get('task_id')))
def update(task_id: int):
    data = request.json or {}
    task = task_ops.update_task(get_db(), task_id, current_technician_id(),
                                title=data.get('title'), unshare=bool(data.get('unshare')))
    return task_json(task)


@task_bp.patch('/<int:task_id>/status')
@require_permissions('TASK.MANAGE')
@audit_log('TASK.STATUS', entity='Task', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_task(kw.get('task_id')))
def update_status(task_id: int):
    data = request.json or {}
    task = task_ops.update_task_status(get_db(), task_id, current_technician_id(), data.get('status'))
    return task_json(task)


@task_bp.delete('/<int:task_id>')
@require_permissions('TASK.MANAGE')
@audit_log('TASK.DELETE', entity='Task', entity_id_arg='task_id', meta_keys=['released_ids'])
def delete(task_id: int):
    released = task_ops.delete_task(get_db(), task_id, current_technician_id())
    return {'id': task_id, 'deleted': True, 'released_ids': released}
