# fitquest/routes/common.py
from typing import Any, Optional

from flask import current_app, request
from flask_jwt_extended import get_jwt_identity

from ..domain import User
from ..errors import Forbidden, NotFound
from ..storage import get_store


def current_user_id() -> int:
    return int(get_jwt_identity())


def current_user() -> User:
    user = get_store().get_user(current_user_id())
    if not user:
        raise NotFound("User not found")
    return user


def get_payments():
    return current_app.extensions["fitquest_payments"]


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_owner(entity: Optional[Any], kind: str, action: str):
    """404 if missing, 403 if it belongs to someone else."""
    if entity is None:
        raise NotFound(f"{kind} not found")
    if entity.user_id != current_user_id():
        raise Forbidden(f"Not authorized to {action} this {kind.lower()}")
    return entity
