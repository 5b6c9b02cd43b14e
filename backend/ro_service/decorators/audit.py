from __future__ import annotations
"""Audit logging decorator to reduce repetitive add_audit() calls in route handlers.

Usage examples:

@audit_log('CUSTOMER.CREATE', entity='Customer', entity_id_key='id', meta_keys=['category'])
def create_customer():
    ... return {'id': customer.id, ...}, 201

@audit_log('TASK.STATUS', entity='Task', entity_id_arg='task_id',
           diff_keys=['status'], pre_fetch=lambda a, kw: {'status': ...})
def update_task_status(task_id): ...

Parameters:
  action: required audit action code
  entity: optional entity label
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: path parameter used for entity_id when entity_id_key is absent.
  meta_keys: keys projected from the returned JSON into meta.
  meta_builder: callable(data, rv, args, kwargs) -> dict; overrides meta_keys.
  diff_keys / pre_fetch: record {'before', 'after'} for keys that changed.

Only successful responses (status < 400) are audited. The audit row is
committed in its own step after the view returns, so an audit failure is logged
and never changes the response.
"""

from functools import wraps
from typing import Any, Callable, Iterable, Optional, Dict
from flask import current_app

from ro_service.services.audit import add_audit
from ro_service import get_db


def _extract_payload(rv: Any):
    """Return (data, status) where data is the JSON-able dict for inspection."""
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def _diff(before: Dict[str, Any], after: Dict[str, Any], keys: Iterable[str]):
    changes = {}
    for k in keys:
        if k in before and k in after and before.get(k) != after.get(k):
            changes[k] = {'before': before.get(k), 'after': after.get(k)}
    return changes


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before_snapshot = None
            if diff_keys and pre_fetch:
                # pre_fetch raising (e.g. NotFound) must surface exactly as the view would
                before_snapshot = pre_fetch(args, kwargs)
            rv = fn(*args, **kwargs)
            data, status = _extract_payload(rv)
            if status >= 400:
                return rv
            session = get_db()
            try:
                entity_id = None
                if isinstance(data, dict) and entity_id_key and entity_id_key in data:
                    entity_id = data.get(entity_id_key)
                elif entity_id_arg and entity_id_arg in kwargs:
                    entity_id = kwargs.get(entity_id_arg)
                meta = None
                if isinstance(data, dict):
                    if meta_builder:
                        meta = meta_builder(data, rv, args, kwargs)
                    elif meta_keys:
                        meta = {k: data.get(k) for k in meta_keys if k in data}
                    if diff_keys and isinstance(before_snapshot, dict):
                        changes = _diff(before_snapshot, data, diff_keys)
                        if changes:
                            meta = dict(meta or {})
                            meta['changes'] = changes
                add_audit(action, entity, entity_id, meta)
                session.commit()
            except Exception:
                session.rollback()
                current_app.logger.exception('Audit write failed action=%s', action)
            return rv
        return wrapper
    return outer
