from flask import Blueprint, request
from ro_service import get_db
from ro_service.decorators.audit import audit_log
from ro_service.decorators.auth import require_permissions
from ro_service.models.complaint import Complaint
from ro_service.services import complaints as complaint_ops
from ro_service.services.policy import current_technician_id
from ro_service.utils.listing import apply_pagination, build_list_payload
from ro_service.utils.validation import validate_status

cmp_bp = Blueprint('complaints', __name__)


def _complaint_json(c: Complaint):
    return {
        'id': c.id,
        'customer_id': c.customer_id,
        'technician_id': c.technician_id,
        'text': c.text,
        'status': c.status,
        'created_at': c.created_at.isoformat() if c.created_at else None,
    }


def _prefetch_complaint(complaint_id):
    return _complaint_json(complaint_ops.get_complaint(get_db(), complaint_id, current_technician_id()))


@cmp_bp.get('')
@require_permissions('CMP.READ')
def list_complaints():
    status = request.args.get('status')
    if status:
        validate_status(status, Complaint.ALL_STATUSES)
    stmt = complaint_ops.complaints_query(current_technician_id(), status, request.args.get('customer_id', type=int))
    rows, total, limit, offset = apply_pagination(get_db(), stmt.order_by(Complaint.id.desc()))
    return build_list_payload([_complaint_json(c) for c in rows], total, limit, offset)


@cmp_bp.post('')
@require_permissions('CMP.MANAGE')
@audit_log('COMPLAINT.CREATE', entity='Complaint', entity_id_key='id', meta_keys=['customer_id'])
def create_complaint():
    data = request.json or {}
    c = complaint_ops.create_complaint(get_db(), data.get('customer_id'), current_technician_id(), data.get('text'))
    return _complaint_json(c), 201


@cmp_bp.get('/<int:complaint_id>')
@require_permissions('CMP.READ')
def get_complaint(complaint_id: int):
    return _complaint_json(complaint_ops.get_complaint(get_db(), complaint_id, current_technician_id()))


@cmp_bp.patch('/<int:complaint_id>/status')
@require_permissions('CMP.MANAGE')
@audit_log('COMPLAINT.STATUS', entity='Complaint', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_complaint(kw.get('complaint_id')))
def update_status(complaint_id: int):
    data = request.json or {}
    c = complaint_ops.set_complaint_status(get_db(), complaint_id, current_technician_id(), data.get('status'))
    return _complaint_json(c)


@cmp_bp.delete('/<int:complaint_id>')
@require_permissions('CMP.MANAGE')
@audit_log('COMPLAINT.DELETE', entity='Complaint', entity_id_arg='complaint_id')
def delete_complaint(complaint_id: int):
    complaint_ops.delete_complaint(get_db(), complaint_id, current_technician_id())
    return {'id': complaint_id, 'deleted': True}
