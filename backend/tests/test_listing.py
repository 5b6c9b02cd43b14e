from ro_service.config.pagination import normalize_pagination, DEFAULT_LIMIT, MAX_LIMIT
from tests.test_utils_seed import ensure_technician, seed_customer
from tests.test_lifecycle_helpers import tech_headers, assert_error


def test_normalize_pagination_bounds():
    assert normalize_pagination(None, None) == (DEFAULT_LIMIT, 0)
    assert normalize_pagination('1000', '-5') == (MAX_LIMIT, 0)
    assert normalize_pagination('10', '0', '3') == (10, 20)


def test_pagination_meta_and_pages(client, app_context):
    tech = ensure_technician()
    for name in ('Cara', 'Abel', 'Bina'):
        seed_customer(tech, full_name=name)
    headers = tech_headers(tech.id)
    page1 = client.get('/customers?sort=full_name&limit=2&page=1', headers=headers).get_json()
    page2 = client.get('/customers?sort=full_name&limit=2&page=2', headers=headers).get_json()
    assert [c['full_name'] for c in page1['data']] == ['Abel', 'Bina']
    assert [c['full_name'] for c in page2['data']] == ['Cara']
    assert page1['pagination'] == {'total': 3, 'limit': 2, 'offset': 0, 'returned': 2}
    assert page2['pagination']['offset'] == 2


def test_sort_desc_and_invalid_field(client, app_context):
    tech = ensure_technician()
    for name in ('Zed', 'Amy'):
        seed_customer(tech, full_name=name)
    headers = tech_headers(tech.id)
    body = client.get('/customers?sort=-full_name', headers=headers).get_json()
    assert [c['full_name'] for c in body['data']] == ['Zed', 'Amy']
    assert_error(client.get('/customers?sort=password', headers=headers), 400)
    assert_error(client.get('/customers?limit=ten', headers=headers), 400)


def test_filters(client, app_context):
    tech = ensure_technician()
    seed_customer(tech, full_name='Filter One', category='AMC', address='Hill Street')
    seed_customer(tech, full_name='Filter Two', category='PAID', status='OFFLINE')
    headers = tech_headers(tech.id)
    amc = client.get('/customers?category=amc', headers=headers).get_json()
    assert [c['full_name'] for c in amc['data']] == ['Filter One']
    offline = client.get('/customers?status=OFFLINE', headers=headers).get_json()
    assert [c['full_name'] for c in offline['data']] == ['Filter Two']
    hill = client.get('/customers?search=hill', headers=headers).get_json()
    assert [c['full_name'] for c in hill['data']] == ['Filter One']
    assert_error(client.get('/customers?status=SLEEPING', headers=headers), 400)
