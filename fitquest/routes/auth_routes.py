# fitquest/routes/auth_routes.py

from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import (
    create_access_token,
    jwt_required,
    set_access_cookies,
    unset_jwt_cookies,
)

from ..services import accounts
from ..storage import get_store
from .common import current_user, json_body

auth_bp = Blueprint("auth", __name__)


def _session_response(user, status):
    resp = jsonify({"user": user.to_dict()})
    set_access_cookies(resp, create_access_token(identity=str(user.id)))
    return resp, status


# -----------------------------
# Routes
# -----------------------------
@auth_bp.route("/register", methods=["POST"])
def register():
    data = json_body()
    user = accounts.register_user(get_store(), **accounts.registration_kwargs(data))
    return _session_response(user, 201)


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Accepts: { "email": "...", "password": "..." }
    Sets the session cookie on success.
    """
    data = json_body()

    # Debug payload keys (do not log password)
    current_app.logger.info(f"[auth/login] keys={list(data.keys())}")

    user = accounts.authenticate(get_store(), data.get("email"), data.get("password"))
    return _session_response(user, 200)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    resp = jsonify({"message": "Logged out successfully"})
    unset_jwt_cookies(resp)
    return resp, 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    return jsonify({"user": current_user().to_dict()}), 200
