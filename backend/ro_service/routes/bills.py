from datetime import datetime, time, timedelta
from flask import Blueprint, request
from ro_service import get_db
from ro_service.decorators.audit import audit_log
from ro_service.decorators.auth import require_permissions
from ro_service.models.bill import Bill
from ro_service.services import billing
from ro_service.services.policy import current_technician_id, assert_owns_record
from ro_service.services.schedule import parse_date
from ro_service.models.customer import Customer
from ro_service.utils.listing import apply_pagination, build_list_payload
from ro_service.utils.sorting import apply_multi_sort
from ro_service.utils.validation import validate_status

bill_bp = Blueprint('bills', __name__)

SORTABLE = {
    'bill_date': Bill.bill_date,
    'total': Bill.total,
    'status': Bill.status,
    'id': Bill.id,
}


def _bill_json(b: Bill):
    return {
        'id': b.id,
        'customer_id': b.customer_id,
        'technician_id': b.technician_id,
        'items': list(b.items or []),
        'total': str(b.total),
        'bill_date': b.bill_date.isoformat() if b.bill_date else None,
        'status': b.status,
        'payment_method': b.payment_method,
        'notes': b.notes,
    }


def _prefetch_bill(bill_id):
    return _bill_json(billing.get_bill(get_db(), bill_id, current_technician_id()))


def _list(stmt):
    stmt = apply_multi_sort(stmt, request.args.get('sort') or '-bill_date', SORTABLE, Bill.id)
    rows, total, limit, offset = apply_pagination(get_db(), stmt)
    return build_list_payload([_bill_json(b) for b in rows], total, limit, offset)


@bill_bp.get('')
@require_permissions('BILL.READ')
def list_bills():
    tech_id = current_technician_id()
    args = request.args
    status = args.get('status')
    if status:
        validate_status(status, Bill.ALL_STATUSES)
    date_from = datetime.combine(parse_date(args['from'], 'from'), time.min) if args.get('from') else None
    # 'to' is inclusive of the whole day
    date_to = datetime.combine(parse_date(args['to'], 'to') + timedelta(days=1), time.min) if args.get('to') else None
    stmt = billing.bills_query(tech_id, status=status, customer_id=args.get('customer_id', type=int),
                               date_from=date_from, date_to=date_to)
    return _list(stmt)


@bill_bp.get('/customer/<int:customer_id>')
@require_permissions('BILL.READ')
def list_customer_bills(customer_id: int):
    tech_id = current_technician_id()
    assert_owns_record(get_db().get(Customer, customer_id), tech_id, 'Customer')
    return _list(billing.bills_query(tech_id, customer_id=customer_id))


@bill_bp.post('')
@require_permissions('BILL.MANAGE')
@audit_log('BILL.CREATE', entity='Bill', entity_id_key='id', meta_keys=['customer_id', 'total', 'payment_method'])
def create_bill():
    data = request.json or {}
    bill = billing.create_bill(get_db(), data.get('customer_id'), current_technician_id(), data.get('items'),
                               payment_method=data.get('payment_method'), notes=data.get('notes'))
    return _bill_json(bill), 201


@bill_bp.get('/<int:bill_id>')
@require_permissions('BILL.READ')
def get_bill(bill_id: int):
    return _bill_json(billing.get_bill(get_db(), bill_id, current_technician_id()))


@bill_bp.patch('/<int:bill_id>')
@require_permissions('BILL.MANAGE')
@audit_log('BILL.UPDATE', entity='Bill', entity_id_key='id', diff_keys=['status', 'payment_method', 'notes'],
           pre_fetch=lambda a, kw: _prefetch_bill(kw.get('bill_id')))
def update_bill(bill_id: int):
    data = request.json or {}
    bill = billing.update_bill(get_db(), bill_id, current_technician_id(), status=data.get('status'),
                               payment_method=data.get('payment_method'), notes=data.get('notes'))
    return _bill_json(bill)


@bill_bp.delete('/<int:bill_id>')
@require_permissions('BILL.MANAGE')
@audit_log('BILL.DELETE', entity='Bill', entity_id_arg='bill_id')
def delete_bill(bill_id: int):
    billing.delete_bill(get_db(), bill_id, current_technician_id())
    return {'id': bill_id, 'deleted': True}
