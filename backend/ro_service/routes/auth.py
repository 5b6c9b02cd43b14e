from datetime import datetime, timezone
from flask import Blueprint, request, abort
from flask_jwt_extended import jwt_required
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from ro_service.models.accounts import Admin, Technician
from ro_service.models.audit import AuditLog
from ro_service import get_db
from ro_service.constants.permissions import ROLE_ADMIN, ROLE_TECHNICIAN
from ro_service.decorators.audit import audit_log
from ro_service.decorators.auth import require_permissions
from ro_service.errors import Conflict
from ro_service.services.policy import current_caller, issue_token
from ro_service.utils.listing import apply_pagination, build_list_payload
from ro_service.utils.validation import require_fields

auth_bp = Blueprint('auth', __name__)


def _technician_json(t: Technician):
    return {
        'id': t.id,
        'full_name': t.full_name,
        'contact_number': t.contact_number,
        'address': t.address,
        'email': t.email,
        'company_name': t.company_name,
        'city_name': t.city_name,
        'created_at': t.created_at.isoformat() if t.created_at else None,
    }


@auth_bp.post('/admin/login')
def admin_login():
    data = request.json or {}
    username = data.get('username'); password = data.get('password')
    if not username or not password:
        abort(400, description='username & password required')
    session = get_db()
    admin = session.execute(select(Admin).where(Admin.username==username)).scalar_one_or_none()
    if not admin or not admin.is_active or not admin.verify_password(password):
        abort(401, description='invalid credentials')
    admin.last_login = datetime.now(timezone.utc)
    session.commit()
    return {'access_token': issue_token(admin.id, ROLE_ADMIN), 'role': ROLE_ADMIN}


@auth_bp.post('/technicians/login')
def technician_login():
    data = request.json or {}
    phone = data.get('contact_number'); password = data.get('password')
    if not phone or not password:
        abort(400, description='contact_number & password required')
    session = get_db()
    tech = session.execute(
        select(Technician).where(Technician.contact_number==phone, Technician.deleted_at.is_(None))
    ).scalar_one_or_none()
    if not tech or not tech.verify_password(password):
        abort(401, description='invalid credentials')
    return {'access_token': issue_token(tech.id, ROLE_TECHNICIAN), 'role': ROLE_TECHNICIAN}


@auth_bp.get('/me')
@jwt_required()
def me():
    caller = current_caller()
    session = get_db()
    if caller.is_admin:
        admin = session.get(Admin, caller.id)
        if not admin:
            abort(404)
        return {'id': admin.id, 'role': ROLE_ADMIN, 'username': admin.username, 'email': admin.email,
                'perms': sorted(caller.perms)}
    tech = session.get(Technician, caller.id)
    if not tech or tech.deleted_at is not None:
        abort(404)
    out = _technician_json(tech)
    out.update({'role': ROLE_TECHNICIAN, 'perms': sorted(caller.perms)})
    return out


@auth_bp.post('/technicians')
@require_permissions('ADMIN.TECH.MANAGE')
@audit_log('TECHNICIAN.CREATE', entity='Technician', entity_id_key='id', meta_keys=['contact_number'])
def register_technician():
    data = request.json or {}
    fields = require_fields(data, 'full_name', 'contact_number', 'address', 'password')
    session = get_db()
    exists = session.execute(
        select(Technician.id).where(Technician.contact_number==fields['contact_number'])
    ).scalar_one_or_none()
    if exists is not None:
        raise Conflict(description='contact_number already registered')
    tech = Technician(
        full_name=fields['full_name'],
        contact_number=fields['contact_number'],
        address=fields['address'],
        email=(data.get('email') or None),
        company_name=data.get('company_name'),
        city_name=data.get('city_name'),
    )
    tech.set_password(fields['password'])
    session.add(tech)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict(description='contact_number or email already registered')
    return _technician_json(tech), 201


@auth_bp.get('/technicians')
@require_permissions('ADMIN.TECH.MANAGE')
def list_technicians():
    session = get_db()
    stmt = select(Technician).where(Technician.deleted_at.is_(None))
    search = request.args.get('search')
    if search:
        like = f"%{search}%"
        stmt = stmt.where(Technician.full_name.ilike(like) | Technician.contact_number.ilike(like))
    rows, total, limit, offset = apply_pagination(session, stmt.order_by(Technician.id.asc()))
    return build_list_payload([_technician_json(t) for t in rows], total, limit, offset)


@auth_bp.get('/audit/logs')
@require_permissions('ADMIN.AUDIT.READ')
def list_audit_logs():
    session = get_db()
    stmt = select(AuditLog)
    actor = request.args.get('actor_id')
    action = request.args.get('action')
    entity = request.args.get('entity')
    entity_id = request.args.get('entity_id')
    if actor:
        try:
            stmt = stmt.where(AuditLog.actor_id==int(actor))
        except ValueError:
            abort(400, description='actor_id must be int')
    if action:
        stmt = stmt.where(AuditLog.action==action)
    if entity:
        stmt = stmt.where(AuditLog.entity==entity)
    if entity_id:
        stmt = stmt.where(AuditLog.entity_id==entity_id)
    rows, total, limit, offset = apply_pagination(session, stmt.order_by(AuditLog.id.desc()))
    data = [
        {
            'id': r.id,
            'actor_id': r.actor_id,
            'actor_role': r.actor_role,
            'action': r.action,
            'entity': r.entity,
            'entity_id': r.entity_id,
            'meta': r.meta,
            'created_at': r.created_at.isoformat() if r.created_at else None
        } for r in rows
    ]
    return build_list_payload(data, total, limit, offset)
