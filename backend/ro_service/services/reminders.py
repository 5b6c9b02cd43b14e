"""Reminder entries embedded on customers and services.

Entries are stored as a JSON list on the owning row; an entry is addressed by
its position in that list.
"""
from __future__ import annotations
from typing import Any, Dict, List
from ro_service.errors import InvalidInput, NotFound
from ro_service.models.customer import Customer
from ro_service.models.service import Service
from ro_service.services.linkage import unit_of_work
from ro_service.services.policy import assert_owns_record
from ro_service.services.schedule import parse_date
from ro_service.utils.validation import validate_enum

TYPE_TEXT = 'TEXT'
TYPE_AUDIO = 'AUDIO'
ALL_TYPES = (TYPE_TEXT, TYPE_AUDIO)

ENTITY_CUSTOMER = 'CUSTOMER'
ENTITY_SERVICE = 'SERVICE'
ENTITY_MODELS = {ENTITY_CUSTOMER: Customer, ENTITY_SERVICE: Service}


def build_reminder(entity_type: str, entity_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    data = payload or {}
    kind = validate_enum(data.get('type'), ALL_TYPES, 'type')
    entry: Dict[str, Any] = {
        'type': kind,
        'date': parse_date(data.get('date'), 'date').isoformat(),
        'entity_type': entity_type,
        'entity_id': entity_id,
    }
    if kind == TYPE_TEXT:
        msg = data.get('message')
        if not isinstance(msg, str) or not msg.strip():
            raise InvalidInput(description='message required for TEXT reminders')
        entry['message'] = msg.strip()
    else:
        url = data.get('audio_url')
        if not isinstance(url, str) or not url.strip():
            raise InvalidInput(description='audio_url required for AUDIO reminders')
        entry['audio_url'] = url.strip()
    return entry


def _owner(session, entity_type: Any, entity_id: int, technician_id: int):
    kind = validate_enum(entity_type, tuple(ENTITY_MODELS), 'entity_type')
    model = ENTITY_MODELS[kind]
    return kind, assert_owns_record(session.get(model, entity_id), technician_id, model.__name__)


def list_reminders(session, entity_type: Any, entity_id: int, technician_id: int) -> List[Dict[str, Any]]:
    _, owner = _owner(session, entity_type, entity_id, technician_id)
    return list(owner.reminders or [])


def add_reminder(session, entity_type: Any, entity_id: int, technician_id: int, payload: Dict[str, Any]):
    kind, owner = _owner(session, entity_type, entity_id, technician_id)
    entry = build_reminder(kind, owner.id, payload)
    with unit_of_work(session):
        # reassign so the JSON column is flagged dirty
        owner.reminders = list(owner.reminders or []) + [entry]
    return entry


def delete_reminder(session, entity_type: Any, entity_id: int, technician_id: int, index: int):
    _, owner = _owner(session, entity_type, entity_id, technician_id)
    current = list(owner.reminders or [])
    if index < 0 or index >= len(current):
        raise NotFound(description='Reminder not found')
    removed = current.pop(index)
    with unit_of_work(session):
        owner.reminders = current
    return removed
