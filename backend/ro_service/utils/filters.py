from __future__ import annotations
from typing import Any, Dict
from ro_service.errors import InvalidInput

def apply_filters(stmt, specs: Dict[str, Dict[str, Any]], params: Dict[str, Any]):
    """Generic filter builder.

    specs: { param_name: { 'op': callable(stmt, value)->stmt, 'coerce': type/func, 'validate': callable(optional) } }
    """
    for name, meta in specs.items():
        if name not in params or params[name] in (None, ''):
            continue
        val = params[name]
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except (TypeError, ValueError):
                raise InvalidInput(description=f'{name} invalid')
        if 'validate' in meta and not meta['validate'](val):
            raise InvalidInput(description=f'{name} invalid')
        stmt = meta['op'](stmt, val)
    return stmt
