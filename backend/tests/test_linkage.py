from datetime import datetime, timezone
import pytest
from sqlalchemy import update
from ro_service import get_db
from ro_service.models.service import Service
from ro_service.services.linkage import (
    unit_of_work, attach_services, find_task_link_problems, find_customer_link_problems, repair_task_links,
)
from ro_service.services.tasks import create_batch_task
from tests.test_utils_seed import ensure_technician, seed_customer
from tests.test_lifecycle_helpers import services_linked_to


def test_unit_of_work_rolls_back_on_error(app_context):
    tech = ensure_technician()
    customer = seed_customer(tech)
    session = get_db()
    with pytest.raises(RuntimeError):
        with unit_of_work(session):
            customer.remark = 'half written'
            raise RuntimeError('boom')
    session.refresh(customer)
    assert customer.remark is None


def test_attach_refuses_service_of_another_task(app_context):
    tech = ensure_technician()
    a, b = [s for s in seed_customer(tech, count=6).services]
    session = get_db()
    first = create_batch_task(session, 'First', [a.id], tech.id)
    second = create_batch_task(session, 'Second', [b.id], tech.id)
    with pytest.raises(ValueError):
        attach_services(second, [a])
    session.rollback()
    assert services_linked_to(first.id) == [a.id]


def test_clean_data_reports_no_problems(app_context):
    tech = ensure_technician()
    svc = seed_customer(tech, count=6).services[0]
    create_batch_task(get_db(), 'Clean', [svc.id], tech.id)
    assert find_task_link_problems(get_db(), tech.id) == []
    assert find_customer_link_problems(get_db(), tech.id) == []


def test_detects_and_repairs_foreign_and_deleted_links(app_context):
    owner = ensure_technician()
    other = ensure_technician()
    mine = seed_customer(owner, count=6).services
    theirs = seed_customer(other).services[0]
    session = get_db()
    task = create_batch_task(session, 'Owner task', [mine[0].id], owner.id)
    # simulate writes that bypassed the linkage layer
    session.execute(update(Service).where(Service.id == theirs.id).values(task_id=task.id))
    session.execute(update(Service).where(Service.id == mine[0].id).values(deleted_at=datetime.now(timezone.utc)))
    session.commit()
    session.expire_all()

    problems = {(p['service_id'], p['problem']) for p in find_task_link_problems(session)}
    assert (theirs.id, 'foreign_task') in problems
    assert (mine[0].id, 'deleted_service') in problems

    repaired = repair_task_links(session)
    assert {p['service_id'] for p in repaired} >= {theirs.id, mine[0].id}
    assert services_linked_to(task.id) == []
    # idempotent
    assert repair_task_links(session, owner.id) == []
    assert repair_task_links(session, other.id) == []


def test_detects_non_contiguous_numbers(app_context):
    tech = ensure_technician()
    customer = seed_customer(tech, count=4)
    session = get_db()
    session.execute(update(Service).where(Service.id == customer.services[1].id).values(deleted_at=datetime.now(timezone.utc)))
    session.commit()
    session.expire_all()
    problems = find_customer_link_problems(session, tech.id)
    assert problems == [{'customer_id': customer.id, 'service_numbers': [1, 3], 'problem': 'non_contiguous'}]


def test_reconcile_script_reports_and_repairs(app_context, monkeypatch):
    import os, sys
    sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'scripts')))
    import reconcile_links
    tech = ensure_technician()
    customer = seed_customer(tech)
    svc = customer.services[0]
    task = create_batch_task(get_db(), 'Script', [svc.id], tech.id)
    session = get_db()
    session.execute(update(Service).where(Service.id == svc.id).values(deleted_at=datetime.now(timezone.utc)))
    session.commit()
    session.expire_all()
    report = reconcile_links.run(session, tech.id, repair=False)
    assert [p['problem'] for p in report['task_links']] == ['deleted_service']
    report = reconcile_links.run(session, tech.id, repair=True)
    assert [p['service_id'] for p in report['repaired']] == [svc.id]
    assert services_linked_to(task.id) == []
