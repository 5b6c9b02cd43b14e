from __future__ import annotations
import logging
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from ro_service import get_db
from ro_service.models.audit import AuditLog

logger = logging.getLogger(__name__)


def _actor():
    """Return (actor_id, role) from the current token, or (0, '') outside a JWT request."""
    try:
        ident = get_jwt_identity()
        claims = get_jwt() or {}
    except RuntimeError:
        # no JWT context (CLI scripts, bare app context)
        return 0, ''
    return (int(ident) if ident is not None else 0), claims.get('role', '')


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[Any] = None, meta: Optional[Dict[str, Any]] = None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      action: short action code e.g. CUSTOMER.CREATE, TASK.SHARE, BILL.UPDATE
      entity: optional entity name (Customer, Task, Bill, ...)
      entity_id: optional primary key
      meta: additional JSON-safe dictionary (shallow copied)
    """
    session = get_db()
    actor_id, role = _actor()
    log = AuditLog(
        actor_id=actor_id,
        actor_role=role,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
