"""Outbound notification fan-out.

Delivery (push, SMS) is not handled here: sinks are plain callables
``sink(target_id, event_kind, payload)`` registered on the app's ``Notifier``.
The default sink only logs. A notification is always sent after the state
change it describes has been committed, and a failing sink never affects the
caller.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional
from flask import current_app

logger = logging.getLogger(__name__)

TASK_ASSIGNED = 'TASK_ASSIGNED'
TASK_COMPLETED = 'TASK_COMPLETED'
CUSTOMER_CREATED = 'CUSTOMER_CREATED'
BILL_GENERATED = 'BILL_GENERATED'
ALL_EVENTS = (TASK_ASSIGNED, TASK_COMPLETED, CUSTOMER_CREATED, BILL_GENERATED)

Sink = Callable[[int, str, Dict[str, Any]], None]


class Notifier:
    def __init__(self):
        self._sinks: List[Sink] = []

    def register(self, sink: Sink):
        self._sinks.append(sink)
        return sink

    def notify(self, target_id: int, event_kind: str, payload: Optional[Dict[str, Any]] = None) -> int:
        """Deliver to every sink; returns how many accepted the event."""
        delivered = 0
        for sink in list(self._sinks):
            try:
                sink(target_id, event_kind, dict(payload or {}))
                delivered += 1
            except Exception:
                logger.exception('Notification sink %r failed event=%s target=%s', sink, event_kind, target_id)
        return delivered


def log_sink(target_id: int, event_kind: str, payload: Dict[str, Any]):
    logger.info('notify target=%s event=%s payload=%s', target_id, event_kind, payload)


def notify(target_id: Optional[int], event_kind: str, payload: Optional[Dict[str, Any]] = None) -> int:
    if target_id is None:
        return 0
    notifier = current_app.extensions.get('notifier')
    if notifier is None:
        logger.warning('No notifier registered; dropping event=%s target=%s', event_kind, target_id)
        return 0
    return notifier.notify(target_id, event_kind, payload)


__all__ = [
    'Notifier', 'log_sink', 'notify',
    'TASK_ASSIGNED', 'TASK_COMPLETED', 'CUSTOMER_CREATED', 'BILL_GENERATED', 'ALL_EVENTS',
]
