"""Central enum-like definitions to avoid typos in permission/service strings.
Extend cautiously; never rename codes silently, tokens already issued carry them.
"""
from __future__ import annotations
from typing import List, Dict

ROLE_TECHNICIAN = 'TECHNICIAN'
ROLE_ADMIN = 'ADMIN'

SERVICES = ['CUST', 'SVC', 'TASK', 'BILL', 'CMP', 'RMD', 'DASH', 'ADMIN']

SERVICE_ACTIONS = {
    'CUST': ['READ', 'MANAGE'],
    'SVC': ['READ', 'COMPLETE'],
    'TASK': ['READ', 'MANAGE', 'SHARE'],
    'BILL': ['READ', 'MANAGE'],
    'CMP': ['READ', 'MANAGE'],
    'RMD': ['READ', 'MANAGE'],
    'DASH': ['READ'],
    'ADMIN': ['TECH.MANAGE', 'AUDIT.READ'],
}


def build_all_permission_codes() -> List[str]:
    codes: List[str] = []
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            codes.append(f"{svc}.{act}")
    return codes

ALL_PERMISSION_CODES = build_all_permission_codes()

ROLE_PRESETS: Dict[str, List[str]] = {
    # Technicians work their own book: everything except ADMIN.*
    ROLE_TECHNICIAN: [c for c in ALL_PERMISSION_CODES if not c.startswith('ADMIN.')],
    ROLE_ADMIN: [c for c in ALL_PERMISSION_CODES if c.startswith('ADMIN.')],
}
