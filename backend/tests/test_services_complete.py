from datetime import date
import pytest
from ro_service import get_db
from ro_service.errors import Conflict, InvalidInput, NotFound
from ro_service.services.maintenance import complete_service, services_query
from ro_service.services.tasks import create_batch_task
from tests.test_utils_seed import ensure_technician, seed_customer
from tests.test_lifecycle_helpers import tech_headers, assert_error


def test_complete_sets_parts_status_and_date(app_context):
    tech = ensure_technician()
    svc = seed_customer(tech).services[0]
    done = complete_service(get_db(), svc.id, tech.id, [{'part_name': 'Sediment filter', 'quantity': 2}, {'part_name': 'O-ring'}])
    assert done.status == 'COMPLETED'
    assert done.completed_date is not None
    assert done.parts_used == [{'part_name': 'Sediment filter', 'quantity': 2}, {'part_name': 'O-ring', 'quantity': 1}]


def test_completed_is_terminal(app_context):
    tech = ensure_technician()
    svc = seed_customer(tech).services[0]
    session = get_db()
    complete_service(session, svc.id, tech.id, [{'part_name': 'Membrane', 'quantity': 1}])
    stamped = svc.completed_date
    with pytest.raises(Conflict):
        complete_service(session, svc.id, tech.id, [{'part_name': 'Carbon', 'quantity': 1}])
    assert svc.parts_used == [{'part_name': 'Membrane', 'quantity': 1}]
    assert svc.completed_date == stamped


def test_foreign_or_missing_service_not_found(app_context):
    owner = ensure_technician()
    other = ensure_technician()
    svc = seed_customer(owner).services[0]
    with pytest.raises(NotFound):
        complete_service(get_db(), svc.id, other.id, [])
    with pytest.raises(NotFound):
        complete_service(get_db(), 987654, owner.id, [])


@pytest.mark.parametrize('parts', ['filter', [{'quantity': 1}], [{'part_name': 'x', 'quantity': 0}], [{'part_name': 'x', 'quantity': '2'}], ['x']])
def test_malformed_parts_rejected(app_context, parts):
    tech = ensure_technician()
    svc = seed_customer(tech).services[0]
    with pytest.raises(InvalidInput):
        complete_service(get_db(), svc.id, tech.id, parts)
    assert svc.status == 'PENDING'


def test_completing_does_not_touch_task_status(app_context):
    tech = ensure_technician()
    svc = seed_customer(tech).services[0]
    task = create_batch_task(get_db(), 'Morning', [svc.id], tech.id)
    complete_service(get_db(), svc.id, tech.id, [])
    assert task.status == 'PENDING'


def test_services_query_month_filter(app_context):
    tech = ensure_technician()
    seed_customer(tech, count=1, joining=date(2024, 1, 10))
    session = get_db()
    current = session.execute(services_query(tech.id, today=date(2024, 3, 5))).scalars().all()
    assert [s.scheduled_date for s in current] == [date(2024, 3, 10)]
    everything = session.execute(services_query(tech.id, month='all')).scalars().all()
    assert len(everything) == 12


def test_http_complete_and_double_complete(client, app_context):
    tech = ensure_technician()
    svc = seed_customer(tech).services[0]
    headers = tech_headers(tech.id)
    resp = client.post(f'/services/{svc.id}/complete', json={'parts_used': [{'part_name': 'UV lamp', 'quantity': 1}]}, headers=headers)
    assert resp.status_code == 200, resp.get_json()
    assert resp.get_json()['status'] == 'COMPLETED'
    assert_error(client.post(f'/services/{svc.id}/complete', json={'parts_used': []}, headers=headers), 409)


def test_http_list_services(client, app_context):
    tech = ensure_technician()
    customer = seed_customer(tech, count=1, joining=date(2024, 1, 1))
    headers = tech_headers(tech.id)
    body = client.get(f'/services?month=all&customer_id={customer.id}&limit=100', headers=headers).get_json()
    assert body['pagination']['total'] == 12
    dates = [s['scheduled_date'] for s in body['data']]
    assert dates == sorted(dates)
    assert_error(client.get('/services?month=someday', headers=headers), 400)
    assert_error(client.get('/services?status=LOST', headers=headers), 400)
