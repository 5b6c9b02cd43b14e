"""Task batching and technician-to-technician sharing.

Task membership lives on ``Service.task_id`` and is only changed through
``ro_service.services.linkage``. Every operation here runs as one unit of work:
either the task and all of its back-links change together, or nothing does.
"""
from __future__ import annotations
import logging
from typing import Any, Iterable, List, Optional
from sqlalchemy import select, or_

from ro_service.errors import InvalidInput, NotFound, Conflict
from ro_service.models.accounts import Technician
from ro_service.models.service import Service
from ro_service.models.task import Task
from ro_service.services.linkage import unit_of_work, attach_services, release_services
from ro_service.services.notifications import notify, TASK_ASSIGNED, TASK_COMPLETED
from ro_service.utils.validation import validate_enum, validate_id_list

logger = logging.getLogger(__name__)


def _require_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise InvalidInput(description='title required')
    return title.strip()


def _owned_task(session, task_id: int, technician_id: int) -> Task:
    task = session.get(Task, task_id)
    if task is None or task.technician_id != technician_id:
        raise NotFound(description='Task not found')
    return task


def _assignable_services(session, service_ids: List[int], technician_id: int) -> List[Service]:
    """Load services for linking, in request order.

    Missing, foreign or deleted ids are bad input; ids already in a task are a conflict.
    """
    rows = session.execute(select(Service).where(Service.id.in_(service_ids))).scalars().all()
    by_id = {s.id: s for s in rows}
    invalid = [
        sid for sid in service_ids
        if sid not in by_id or by_id[sid].technician_id != technician_id or by_id[sid].deleted_at is not None
    ]
    if invalid:
        raise InvalidInput(description=f'Invalid service ids: {invalid}')
    taken = [sid for sid in service_ids if by_id[sid].task_id is not None]
    if taken:
        raise Conflict(description=f'Services already assigned to a task: {taken}')
    return [by_id[sid] for sid in service_ids]


def create_batch_task(session, title: Any, service_ids: Any, technician_id: int) -> Task:
    name = _require_title(title)
    ids = validate_id_list(service_ids)
    services = _assignable_services(session, ids, technician_id)
    with unit_of_work(session):
        task = Task(title=name, technician_id=technician_id, status=Task.STATUS_PENDING)
        session.add(task)
        session.flush()
        attach_services(task, services)
    logger.info('Task %s created with services %s technician=%s', task.id, ids, technician_id)
    return task


def add_services_to_task(session, task_id: int, service_ids: Any, technician_id: int) -> Task:
    task = _owned_task(session, task_id, technician_id)
    ids = validate_id_list(service_ids)
    services = _assignable_services(session, ids, technician_id)
    with unit_of_work(session):
        attach_services(task, services)
    return task


def remove_services_from_task(session, task_id: int, service_ids: Any, technician_id: int) -> List[int]:
    """Release the given services from this task; returns the ids actually released."""
    task = _owned_task(session, task_id, technician_id)
    ids = validate_id_list(service_ids)
    with unit_of_work(session):
        released = release_services(session, task, ids)
    return released


def share_task(session, task_id: int, target_phone: Any, technician_id: int) -> Task:
    task = _owned_task(session, task_id, technician_id)
    if task.shared_with_id is not None:
        raise Conflict(description='Task already shared')
    if not isinstance(target_phone, str) or not target_phone.strip():
        raise InvalidInput(description='contact_number required')
    target = session.execute(
        select(Technician).where(Technician.contact_number == target_phone.strip(), Technician.deleted_at.is_(None))
    ).scalar_one_or_none()
    if target is None:
        raise NotFound(description='Technician not found')
    if target.id == technician_id:
        raise InvalidInput(description='Cannot share a task with yourself')
    with unit_of_work(session):
        task.shared_with = target
    notify(target.id, TASK_ASSIGNED, {'task_id': task.id, 'title': task.title, 'from_technician_id': technician_id})
    return task


def update_task(session, task_id: int, technician_id: int, title: Any = None, unshare: bool = False) -> Task:
    task = _owned_task(session, task_id, technician_id)
    name = _require_title(title) if title is not None else None
    with unit_of_work(session):
        if name is not None:
            task.title = name
        if unshare:
            task.shared_with = None
            task.shared_with_id = None
    return task


def update_task_status(session, task_id: int, technician_id: int, status: Any) -> Task:
    """Set the task status by hand. Any -> any; member services are not consulted."""
    task = _owned_task(session, task_id, technician_id)
    new_status = validate_enum(status, Task.ALL_STATUSES, 'status')
    with unit_of_work(session):
        task.status = new_status
    if new_status == Task.STATUS_COMPLETED:
        notify(task.shared_with_id, TASK_COMPLETED, {'task_id': task.id, 'title': task.title})
    return task


def delete_task(session, task_id: int, technician_id: int) -> List[int]:
    task = _owned_task(session, task_id, technician_id)
    with unit_of_work(session):
        released = release_services(session, task)
        session.delete(task)
    logger.info('Task %s deleted; released services %s', task_id, released)
    return released


def visible_tasks_query(technician_id: int, status: Optional[str] = None):
    stmt = select(Task).where(or_(Task.technician_id == technician_id, Task.shared_with_id == technician_id))
    if status:
        stmt = stmt.where(Task.status == status)
    return stmt


def get_task(session, task_id: int, technician_id: int) -> Task:
    """Owner or sharing partner may read the task."""
    task = session.get(Task, task_id)
    if task is None or technician_id not in (task.technician_id, task.shared_with_id):
        raise NotFound(description='Task not found')
    return task


def live_members(task: Task) -> Iterable[Service]:
    return [s for s in task.services if s.deleted_at is None]


__all__ = [
    'create_batch_task', 'add_services_to_task', 'remove_services_from_task', 'share_task', 'update_task',
    'update_task_status', 'delete_task', 'visible_tasks_query', 'get_task', 'live_members',
]
