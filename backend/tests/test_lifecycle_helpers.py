"""Reusable test helpers for auth headers and linked-record assertions."""
from __future__ import annotations
from typing import Dict, List, Optional
from flask_jwt_extended import create_access_token
from sqlalchemy import select, func
from ro_service import get_db
from ro_service.constants.permissions import ROLE_PRESETS, ROLE_TECHNICIAN, ROLE_ADMIN
from ro_service.models.service import Service
from ro_service.services.policy import issue_token

# ---------- Generic Auth Helpers ---------- #

def jwt_headers(user_id: int, perms: List[str], role: str = ROLE_TECHNICIAN):
    token = create_access_token(identity=str(user_id), additional_claims={'role': role, 'perms': perms})
    return {'Authorization': f'Bearer {token}'}


def tech_headers(technician_id: int) -> Dict[str, str]:
    return {'Authorization': f'Bearer {issue_token(technician_id, ROLE_TECHNICIAN)}'}


def admin_headers(admin_id: int) -> Dict[str, str]:
    return {'Authorization': f'Bearer {issue_token(admin_id, ROLE_ADMIN)}'}


def technician_perms() -> List[str]:
    return list(ROLE_PRESETS[ROLE_TECHNICIAN])

# ---------- Assertion Helpers ---------- #

def assert_error(resp, status: int, detail_contains: Optional[str] = None):
    assert resp.status_code == status, resp.get_json()
    body = resp.get_json()
    assert body['error']['status'] == status
    if detail_contains:
        assert detail_contains in body['error']['detail']
    return body


def service_rows_for_customer(customer_id: int) -> int:
    return get_db().execute(
        select(func.count()).select_from(Service).where(Service.customer_id == customer_id)
    ).scalar_one()


def services_linked_to(task_id: int) -> List[int]:
    return sorted(get_db().execute(select(Service.id).where(Service.task_id == task_id)).scalars().all())
