from flask import Blueprint, request
from sqlalchemy import select, or_
from ro_service import get_db
from ro_service.decorators.audit import audit_log
from ro_service.decorators.auth import require_permissions
from ro_service.models.customer import Customer
from ro_service.routes.services import service_json
from ro_service.services import customers as customer_ops
from ro_service.services.policy import current_technician_id
from ro_service.utils.filters import apply_filters
from ro_service.utils.listing import apply_pagination, build_list_payload
from ro_service.utils.sorting import apply_multi_sort

cust_bp = Blueprint('customers', __name__)

SORTABLE = {
    'full_name': Customer.full_name,
    'joining_date': Customer.joining_date,
    'created_at': Customer.created_at,
    'area': Customer.area,
    'id': Customer.id,
}

FILTERS = {
    'status': {
        'coerce': str.upper,
        'validate': lambda v: v in Customer.ALL_STATUSES,
        'op': lambda s, v: s.where(Customer.status == v),
    },
    'category': {
        'coerce': str.upper,
        'validate': lambda v: v in Customer.ALL_CATEGORIES,
        'op': lambda s, v: s.where(Customer.category == v),
    },
    'area': {'op': lambda s, v: s.where(Customer.area.ilike(f"%{v}%"))},
    'search': {
        'op': lambda s, v: s.where(or_(
            Customer.full_name.ilike(f"%{v}%"),
            Customer.contact_number.ilike(f"%{v}%"),
            Customer.address.ilike(f"%{v}%"),
        )),
    },
}


def _customer_json(c: Customer, with_services: bool = False):
    out = {
        'id': c.id,
        'technician_id': c.technician_id,
        'full_name': c.full_name,
        'contact_number': c.contact_number,
        'address': c.address,
        'area': c.area,
        'joining_date': c.joining_date.isoformat() if c.joining_date else None,
        'tds': c.tds,
        'ro_model': c.ro_model,
        'category': c.category,
        'number_of_services': c.number_of_services,
        'service_generation_type': c.service_generation_type,
        'remark': c.remark,
        'status': c.status,
    }
    if with_services:
        out['services'] = [service_json(s) for s in c.services if s.deleted_at is None]
    return out


def _prefetch_customer(customer_id):
    return _customer_json(customer_ops.get_customer(get_db(), customer_id, current_technician_id()))


@cust_bp.get('')
@require_permissions('CUST.READ')
def list_customers():
    tech_id = current_technician_id()
    stmt = select(Customer).where(Customer.technician_id == tech_id, Customer.deleted_at.is_(None))
    stmt = apply_filters(stmt, FILTERS, request.args.to_dict())
    stmt = apply_multi_sort(stmt, request.args.get('sort') or '-created_at', SORTABLE, Customer.id)
    rows, total, limit, offset = apply_pagination(get_db(), stmt)
    return build_list_payload([_customer_json(c) for c in rows], total, limit, offset)


@cust_bp.post('')
@require_permissions('CUST.MANAGE')
@audit_log('CUSTOMER.CREATE', entity='Customer', entity_id_key='id',
           meta_keys=['category', 'service_generation_type', 'number_of_services'])
def create_customer():
    customer = customer_ops.create_customer(get_db(), current_technician_id(), request.json or {})
    return _customer_json(customer, with_services=True), 201


@cust_bp.get('/<int:customer_id>')
@require_permissions('CUST.READ')
def get_customer(customer_id: int):
    customer = customer_ops.get_customer(get_db(), customer_id, current_technician_id())
    return _customer_json(customer, with_services=True)


@cust_bp.put('/<int:customer_id>')
@require_permissions('CUST.MANAGE')
@audit_log('CUSTOMER.UPDATE', entity='Customer', entity_id_key='id', diff_keys=list(customer_ops.PROFILE_FIELDS),
           pre_fetch=lambda a, kw: _prefetch_customer(kw.get('customer_id')))
def update_customer(customer_id: int):
    customer = customer_ops.update_customer(get_db(), customer_id, current_technician_id(), request.json or {})
    return _customer_json(customer)


@cust_bp.patch('/<int:customer_id>/status')
@require_permissions('CUST.MANAGE')
@audit_log('CUSTOMER.STATUS', entity='Customer', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_customer(kw.get('customer_id')))
def update_status(customer_id: int):
    data = request.json or {}
    customer = customer_ops.set_customer_status(get_db(), customer_id, current_technician_id(), data.get('status'))
    return _customer_json(customer)


@cust_bp.delete('/<int:customer_id>')
@require_permissions('CUST.MANAGE')
@audit_log('CUSTOMER.DELETE', entity='Customer', entity_id_arg='customer_id')
def delete_customer(customer_id: int):
    customer_ops.delete_customer(get_db(), customer_id, current_technician_id())
    return {'id': customer_id, 'deleted': True}
