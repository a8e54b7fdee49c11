from __future__ import annotations

from functools import wraps
from typing import Callable, Any

from flask import jsonify
from flask_login import current_user

from virtualmark.content.errors import AUTH_REQUIRED_MESSAGE, PERMISSION_DENIED_MESSAGE


def admin_required(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({"error": "unauthorized", "message": AUTH_REQUIRED_MESSAGE}), 401
        if not getattr(current_user, "is_admin", False):
            return jsonify({"error": "forbidden", "message": PERMISSION_DENIED_MESSAGE}), 403
        return fn(*args, **kwargs)

    return wrapper
