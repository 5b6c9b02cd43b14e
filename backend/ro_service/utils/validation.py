from __future__ import annotations
"""Reusable validation helpers for request payloads.

All helpers raise ``InvalidInput`` (400) so routes and core operations share
one error shape.
"""
from typing import Any, Dict, Iterable, List, Optional
from ro_service.errors import InvalidInput


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or raises 400.
    """
    if new_status not in allowed:
        raise InvalidInput(description=f"{field_name} invalid")
    return new_status


def validate_enum(value: Optional[str], allowed: Iterable[str], field_name: str, default: Optional[str] = None) -> str:
    if value is None or value == '':
        if default is None:
            raise InvalidInput(description=f"{field_name} required")
        return default
    if not isinstance(value, str):
        raise InvalidInput(description=f"{field_name} invalid")
    return validate_status(value.strip().upper(), allowed, field_name)


def require_fields(data: Dict[str, Any], *names: str) -> Dict[str, str]:
    out = {}
    missing = []
    for name in names:
        val = data.get(name)
        if not isinstance(val, str) or not val.strip():
            missing.append(name)
        else:
            out[name] = val.strip()
    if missing:
        raise InvalidInput(description=f"{', '.join(missing)} required")
    return out


def validate_id_list(raw: Any, field_name: str = 'service_ids') -> List[int]:
    """Non-empty list of distinct positive integers, order preserved."""
    if not isinstance(raw, list) or not raw:
        raise InvalidInput(description=f"{field_name} must be a non-empty list")
    ids = []
    for v in raw:
        if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
            raise InvalidInput(description=f"{field_name} must contain positive integers")
        ids.append(v)
    if len(set(ids)) != len(ids):
        raise InvalidInput(description=f"{field_name} contains duplicates")
    return ids

__all__ = ['validate_status', 'validate_enum', 'require_fields', 'validate_id_list']
