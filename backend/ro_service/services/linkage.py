"""Customer -> Service and Task -> Service link maintenance.

All writes of ``Service.task_id`` go through ``attach_services`` and
``release_services`` so both sides of the Task <-> Service link change inside
the caller's unit of work. The ``find_*`` helpers and ``repair_task_links`` form
the reconciliation pass run by ``scripts/reconcile_links.py``.
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Sequence
from sqlalchemy import select

from ro_service.models.customer import Customer
from ro_service.models.service import Service
from ro_service.models.task import Task

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(session):
    """Commit everything done in the block, or roll all of it back."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def attach_services(task: Task, services: Sequence[Service]):
    for svc in services:
        if svc.task_id is not None and svc.task_id != task.id:
            raise ValueError(f'service {svc.id} already linked to task {svc.task_id}')
        svc.task = task
    return task


def release_services(session, task: Task, service_ids: Optional[Iterable[int]] = None) -> List[int]:
    """Detach services from ``task``; ids linked to other tasks are left alone.

    Returns the ids actually released.
    """
    q = select(Service).where(Service.task_id == task.id)
    if service_ids is not None:
        ids = list(service_ids)
        if not ids:
            return []
        q = q.where(Service.id.in_(ids))
    released = []
    for svc in session.execute(q).scalars().all():
        svc.task = None
        svc.task_id = None
        released.append(svc.id)
    return released


def detach_deleted(session, services: Iterable[Service]) -> List[int]:
    """Drop task links for services being soft-deleted."""
    released = []
    for svc in services:
        if svc.task_id is not None:
            released.append(svc.id)
            svc.task = None
            svc.task_id = None
    return released


def find_task_link_problems(session, technician_id: Optional[int] = None) -> List[Dict]:
    problems = []
    q = (
        select(Service, Task)
        .outerjoin(Task, Task.id == Service.task_id)
        .where(Service.task_id.is_not(None))
    )
    if technician_id is not None:
        q = q.where(Service.technician_id == technician_id)
    for svc, task in session.execute(q).all():
        if task is None:
            problems.append({'service_id': svc.id, 'task_id': svc.task_id, 'problem': 'missing_task'})
        elif task.technician_id != svc.technician_id:
            problems.append({'service_id': svc.id, 'task_id': svc.task_id, 'problem': 'foreign_task'})
        elif svc.deleted_at is not None:
            problems.append({'service_id': svc.id, 'task_id': svc.task_id, 'problem': 'deleted_service'})
    return problems


def find_customer_link_problems(session, technician_id: Optional[int] = None) -> List[Dict]:
    problems = []
    q = select(Customer).where(Customer.deleted_at.is_(None))
    if technician_id is not None:
        q = q.where(Customer.technician_id == technician_id)
    for customer in session.execute(q).scalars():
        numbers = [s.service_number for s in customer.services if s.deleted_at is None]
        if numbers != list(range(1, len(numbers) + 1)):
            problems.append({'customer_id': customer.id, 'service_numbers': numbers, 'problem': 'non_contiguous'})
        foreign = [s.id for s in customer.services if s.technician_id != customer.technician_id]
        if foreign:
            problems.append({'customer_id': customer.id, 'service_ids': foreign, 'problem': 'foreign_service'})
    return problems


def repair_task_links(session, technician_id: Optional[int] = None) -> List[Dict]:
    """Clear every dangling or foreign task link. Safe to run repeatedly."""
    problems = find_task_link_problems(session, technician_id)
    if not problems:
        return []
    ids = [p['service_id'] for p in problems]
    with unit_of_work(session):
        for svc in session.execute(select(Service).where(Service.id.in_(ids))).scalars():
            svc.task = None
            svc.task_id = None
    logger.warning('Repaired %d task links: %s', len(problems), problems)
    return problems


__all__ = [
    'unit_of_work', 'attach_services', 'release_services', 'detach_deleted',
    'find_task_link_problems', 'find_customer_link_problems', 'repair_task_links',
]
