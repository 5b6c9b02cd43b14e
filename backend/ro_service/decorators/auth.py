import logging
from functools import wraps
from flask import request
from flask_jwt_extended import verify_jwt_in_request
from ro_service.errors import Unauthorized
from ro_service.services.policy import current_permissions

logger = logging.getLogger(__name__)


def missing_permissions(*codes: str):
    held = current_permissions()
    return [c for c in codes if c not in held]


def require_permissions(*codes: str):
    """Guard a route with a valid token carrying every listed permission code.

    No token is a 401 from flask_jwt_extended; missing codes are a 403 naming them.
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            missing = missing_permissions(*codes)
            if missing:
                logger.info('Permission denied path=%s missing=%s', request.path, missing)
                raise Unauthorized(description=f"Missing permission: {', '.join(missing)}")
            return fn(*args, **kwargs)
        return wrapper
    return outer
