from decimal import Decimal
import pytest
from ro_service import get_db
from ro_service.errors import InvalidInput, NotFound
from ro_service.services import billing
from ro_service.services.customers import set_customer_status, delete_customer
from tests.test_utils_seed import ensure_technician, seed_customer
from tests.test_lifecycle_helpers import tech_headers, assert_error


def test_total_is_exact_sum(app_context):
    tech = ensure_technician()
    customer = seed_customer(tech)
    bill = billing.create_bill(get_db(), customer.id, tech.id, [
        {'description': 'Service visit', 'amount': 0.1},
        {'description': 'Filter', 'amount': '0.2'},
        {'description': 'Membrane', 'amount': 1450},
    ])
    assert bill.total == Decimal('1450.30')
    assert bill.status == 'PENDING'
    assert bill.payment_method == 'CASH'
    assert [i['amount'] for i in bill.items] == ['0.10', '0.20', '1450.00']


@pytest.mark.parametrize('items', [
    [],
    None,
    [{'description': '', 'amount': 10}],
    [{'description': 'x', 'amount': 0}],
    [{'description': 'x', 'amount': -5}],
    [{'description': 'x', 'amount': 'ten'}],
    [{'description': 'x'}],
    [{'description': 'x', 'amount': True}],
])
def test_invalid_items_rejected(app_context, items):
    tech = ensure_technician()
    customer = seed_customer(tech)
    with pytest.raises(InvalidInput):
        billing.create_bill(get_db(), customer.id, tech.id, items)


def test_customer_must_be_owned(app_context):
    tech = ensure_technician()
    other = ensure_technician()
    customer = seed_customer(tech)
    items = [{'description': 'Visit', 'amount': 300}]
    with pytest.raises(NotFound):
        billing.create_bill(get_db(), customer.id, other.id, items)
    delete_customer(get_db(), customer.id, tech.id)
    with pytest.raises(NotFound):
        billing.create_bill(get_db(), customer.id, tech.id, items)


def test_offline_customer_can_be_billed(app_context):
    tech = ensure_technician()
    customer = seed_customer(tech)
    set_customer_status(get_db(), customer.id, tech.id, 'OFFLINE')
    bill = billing.create_bill(get_db(), customer.id, tech.id, [{'description': 'filter', 'amount': 100}])
    assert bill.customer_id == customer.id
    assert bill.total == Decimal('100.00')


def test_payment_method_validated(app_context):
    tech = ensure_technician()
    customer = seed_customer(tech)
    items = [{'description': 'Visit', 'amount': 300}]
    bill = billing.create_bill(get_db(), customer.id, tech.id, items, payment_method='upi')
    assert bill.payment_method == 'UPI'
    with pytest.raises(InvalidInput):
        billing.create_bill(get_db(), customer.id, tech.id, items, payment_method='BARTER')


def test_status_moves_any_to_any(app_context):
    tech = ensure_technician()
    customer = seed_customer(tech)
    session = get_db()
    bill = billing.create_bill(session, customer.id, tech.id, [{'description': 'Visit', 'amount': 300}])
    for status in ('PAID', 'PENDING', 'CANCELLED', 'PAID'):
        assert billing.update_bill(session, bill.id, tech.id, status=status).status == status
    with pytest.raises(InvalidInput):
        billing.update_bill(session, bill.id, tech.id, status='REFUNDED')
    assert bill.status == 'PAID'


def test_bill_generated_notification(app_context, sink_events):
    tech = ensure_technician()
    customer = seed_customer(tech)
    bill = billing.create_bill(get_db(), customer.id, tech.id, [{'description': 'Visit', 'amount': '250.5'}])
    assert (tech.id, 'BILL_GENERATED', {'bill_id': bill.id, 'customer_id': customer.id, 'total': '250.50'}) in sink_events


def test_http_bill_flow(client, app_context):
    tech = ensure_technician()
    customer = seed_customer(tech)
    headers = tech_headers(tech.id)
    resp = client.post('/bills', json={
        'customer_id': customer.id,
        'items': [{'description': 'Visit', 'amount': 350}, {'description': 'Spun filter', 'amount': 120.75}],
        'notes': 'paid half',
    }, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    bill = resp.get_json()
    assert bill['total'] == '470.75'

    assert client.patch(f"/bills/{bill['id']}", json={'status': 'PAID'}, headers=headers).get_json()['status'] == 'PAID'
    listed = client.get('/bills?status=PAID', headers=headers).get_json()
    assert bill['id'] in [b['id'] for b in listed['data']]
    by_customer = client.get(f'/bills/customer/{customer.id}', headers=headers).get_json()
    assert [b['id'] for b in by_customer['data']] == [bill['id']]

    assert client.delete(f"/bills/{bill['id']}", headers=headers).status_code == 200
    assert_error(client.get(f"/bills/{bill['id']}", headers=headers), 404)
    assert_error(client.post('/bills', json={'customer_id': 'abc', 'items': []}, headers=headers), 400)
