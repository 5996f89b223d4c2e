from __future__ import annotations

from functools import wraps
from typing import Any

from flask import request, session

from ..core.exceptions import AuthenticationError, ValidationError


def current_user_id() -> str:
    """Identity established by the hosted auth layer."""
    user_id = session.get("user_id")
    if not user_id:
        raise AuthenticationError("Not authenticated")
    return str(user_id)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user_id()
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
