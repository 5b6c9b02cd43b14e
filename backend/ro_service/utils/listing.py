from __future__ import annotations
from typing import Tuple
from flask import request
from sqlalchemy import select, func
from ro_service.config.pagination import normalize_pagination
from ro_service.errors import InvalidInput


def pagination_args() -> Tuple[int, int]:
    try:
        return normalize_pagination(request.args.get('limit'), request.args.get('offset'), request.args.get('page'))
    except ValueError as e:
        raise InvalidInput(description=str(e))


def apply_pagination(session, stmt) -> Tuple[list, int, int, int]:
    """Run a 2.0-style select with limit/offset; returns (rows, total, limit, offset)."""
    limit, offset = pagination_args()
    total = session.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    rows = session.execute(stmt.offset(offset).limit(limit)).scalars().all()
    return rows, total, limit, offset


def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }
