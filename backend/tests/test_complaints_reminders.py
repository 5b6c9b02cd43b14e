import pytest
from ro_service import get_db
from ro_service.errors import InvalidInput, NotFound
from ro_service.services import reminders as reminder_ops
from tests.test_utils_seed import ensure_technician, seed_customer
from tests.test_lifecycle_helpers import tech_headers, assert_error


def test_complaint_lifecycle(client, app_context):
    tech = ensure_technician()
    customer = seed_customer(tech)
    headers = tech_headers(tech.id)
    resp = client.post('/complaints', json={'customer_id': customer.id, 'text': 'Water tastes salty'}, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    cid = resp.get_json()['id']
    assert resp.get_json()['status'] == 'OPEN'
    resp = client.patch(f'/complaints/{cid}/status', json={'status': 'CLOSED'}, headers=headers)
    assert resp.get_json()['status'] == 'CLOSED'
    assert_error(client.patch(f'/complaints/{cid}/status', json={'status': 'MAYBE'}, headers=headers), 400)
    listed = client.get('/complaints?status=CLOSED', headers=headers).get_json()
    assert cid in [c['id'] for c in listed['data']]
    assert client.delete(f'/complaints/{cid}', headers=headers).status_code == 200
    assert_error(client.get(f'/complaints/{cid}', headers=headers), 404)


def test_complaint_needs_owned_customer(client, app_context):
    owner = ensure_technician()
    other = ensure_technician()
    customer = seed_customer(owner)
    assert_error(client.post('/complaints', json={'customer_id': customer.id, 'text': 'Leak'}, headers=tech_headers(other.id)), 404)
    assert_error(client.post('/complaints', json={'customer_id': customer.id, 'text': '  '}, headers=tech_headers(owner.id)), 400)


def test_text_and_audio_reminders(app_context):
    tech = ensure_technician()
    customer = seed_customer(tech)
    session = get_db()
    text = reminder_ops.add_reminder(session, 'CUSTOMER', customer.id, tech.id,
                                     {'type': 'TEXT', 'message': 'Call before visit', 'date': '2024-02-01'})
    assert text == {'type': 'TEXT', 'message': 'Call before visit', 'date': '2024-02-01',
                    'entity_type': 'CUSTOMER', 'entity_id': customer.id}
    svc = customer.services[0]
    reminder_ops.add_reminder(session, 'service', svc.id, tech.id,
                              {'type': 'AUDIO', 'audio_url': 'https://cdn.example.com/a.m4a', 'date': '2024-02-02'})
    assert len(reminder_ops.list_reminders(session, 'SERVICE', svc.id, tech.id)) == 1
    removed = reminder_ops.delete_reminder(session, 'CUSTOMER', customer.id, tech.id, 0)
    assert removed['message'] == 'Call before visit'
    assert reminder_ops.list_reminders(session, 'CUSTOMER', customer.id, tech.id) == []


@pytest.mark.parametrize('payload', [
    {'type': 'TEXT', 'date': '2024-02-01'},
    {'type': 'AUDIO', 'message': 'hi', 'date': '2024-02-01'},
    {'type': 'VIDEO', 'message': 'hi', 'date': '2024-02-01'},
    {'type': 'TEXT', 'message': 'hi', 'date': 'tomorrow'},
])
def test_invalid_reminders(app_context, payload):
    tech = ensure_technician()
    customer = seed_customer(tech)
    with pytest.raises(InvalidInput):
        reminder_ops.add_reminder(get_db(), 'CUSTOMER', customer.id, tech.id, payload)


def test_reminders_ownership_and_http(client, app_context):
    owner = ensure_technician()
    other = ensure_technician()
    customer = seed_customer(owner)
    with pytest.raises(NotFound):
        reminder_ops.list_reminders(get_db(), 'CUSTOMER', customer.id, other.id)
    headers = tech_headers(owner.id)
    resp = client.post(f'/reminders/CUSTOMER/{customer.id}', json={'type': 'TEXT', 'message': 'AMC due', 'date': '2024-05-01'}, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    body = client.get(f'/reminders/CUSTOMER/{customer.id}', headers=headers).get_json()
    assert body['count'] == 1
    assert_error(client.delete(f'/reminders/CUSTOMER/{customer.id}/5', headers=headers), 404)
    assert_error(client.get(f'/reminders/BILL/{customer.id}', headers=headers), 400)
