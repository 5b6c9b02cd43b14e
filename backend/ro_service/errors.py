"""Domain error kinds.

Each one is a Werkzeug HTTPException so the app-level error handler renders it
with the standard JSON error shape, and core operations can raise them outside
of a route without knowing about responses.
"""
from werkzeug.exceptions import BadRequest, Conflict as _Conflict, Forbidden, NotFound as _NotFound


class InvalidInput(BadRequest):
    """Malformed or missing fields; raised before any write."""


class NotFound(_NotFound):
    """Referenced entity absent, soft-deleted, or not owned by the caller."""


class Conflict(_Conflict):
    """Terminal-state violation: already completed, shared or task-assigned."""


class Unauthorized(Forbidden):
    """Caller identity does not match the required role or owner."""


__all__ = ['InvalidInput', 'NotFound', 'Conflict', 'Unauthorized']
