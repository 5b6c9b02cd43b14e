from flask import Blueprint, request
from ro_service import get_db
from ro_service.decorators.audit import audit_log
from ro_service.decorators.auth import require_permissions
from ro_service.services import reminders as reminder_ops
from ro_service.services.policy import current_technician_id

rmd_bp = Blueprint('reminders', __name__)


@rmd_bp.get('/<entity_type>/<int:entity_id>')
@require_permissions('RMD.READ')
def list_reminders(entity_type: str, entity_id: int):
    rows = reminder_ops.list_reminders(get_db(), entity_type, entity_id, current_technician_id())
    return {'data': rows, 'count': len(rows)}


@rmd_bp.post('/<entity_type>/<int:entity_id>')
@require_permissions('RMD.MANAGE')
@audit_log('REMINDER.ADD', entity='Reminder', meta_keys=['entity_type', 'entity_id', 'type'])
def add_reminder(entity_type: str, entity_id: int):
    entry = reminder_ops.add_reminder(get_db(), entity_type, entity_id, current_technician_id(), request.json or {})
    return entry, 201


@rmd_bp.delete('/<entity_type>/<int:entity_id>/<int:index>')
@require_permissions('RMD.MANAGE')
@audit_log('REMINDER.DELETE', entity='Reminder', meta_keys=['entity_type', 'entity_id', 'type'])
def delete_reminder(entity_type: str, entity_id: int, index: int):
    return reminder_ops.delete_reminder(get_db(), entity_type, entity_id, current_technician_id(), index)
