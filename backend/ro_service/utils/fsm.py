from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed status transitions.

Usage:
    from ro_service.utils.fsm import TransitionValidator
    SERVICE_FSM = TransitionValidator({
        'PENDING': {'COMPLETED'},
        'COMPLETED': set(),
    })
    SERVICE_FSM.assert_can_transition(current_status, target_status)

Raises ``Conflict`` (409) by default; pass ``error=InvalidInput`` for a 400.
"""
from typing import Dict, Set, Type
from werkzeug.exceptions import HTTPException
from ro_service.errors import Conflict


class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status', error: Type[HTTPException] = Conflict):
        self.graph = graph
        self.field_name = field_name
        self.error = error

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise self.error(description=f"Invalid {self.field_name} transition {current} -> {target}")
        return True

    def is_terminal(self, state: str) -> bool:
        return not self.graph.get(state)

__all__ = ['TransitionValidator']
