"""Caller identity and ownership checks.

Every token carries its role, so the caller is resolved once per request into a
``Caller`` and the technician id is handed explicitly to the core operations.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet
from flask_jwt_extended import get_jwt, get_jwt_identity, create_access_token

from ro_service.constants.permissions import ROLE_PRESETS, ROLE_TECHNICIAN, ROLE_ADMIN
from ro_service.errors import Unauthorized, NotFound


@dataclass(frozen=True)
class Caller:
    id: int
    role: str
    perms: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_technician(self) -> bool:
        return self.role == ROLE_TECHNICIAN

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def current_caller() -> Caller:
    claims = get_jwt()
    ident = get_jwt_identity()
    if ident is None:
        raise Unauthorized(description='Missing identity')
    return Caller(id=int(ident), role=claims.get('role', ''), perms=frozenset(claims.get('perms', [])))


def current_permissions():
    return set(get_jwt().get('perms', []))


def current_technician_id() -> int:
    caller = current_caller()
    if not caller.is_technician:
        raise Unauthorized(description='Technician account required')
    return caller.id


def issue_token(subject_id: int, role: str) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    claims = {'role': role, 'perms': sorted(ROLE_PRESETS.get(role, []))}
    return create_access_token(identity=str(subject_id), additional_claims=claims)


def assert_owns_record(record, technician_id: int, label: str = 'Record'):
    """Missing, soft-deleted and foreign records all look the same to the caller."""
    if record is None or getattr(record, 'deleted_at', None) is not None or record.technician_id != technician_id:
        raise NotFound(description=f'{label} not found')
    return record
