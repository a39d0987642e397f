# fitquest/routes/spin_routes.py
from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required

from ..services import spin as spin_engine
from ..storage import get_store
from .common import current_user_id

spins_bp = Blueprint("spins", __name__)


@spins_bp.route("", methods=["GET"])
@jwt_required()
def spin_status():
    """
    Returns: { "spins": [ ...history... ], "canSpinToday": true }
    """
    history, can_spin = spin_engine.spin_status(get_store(), current_user_id())
    return jsonify({"spins": [s.to_dict() for s in history], "canSpinToday": can_spin}), 200


@spins_bp.route("", methods=["POST"])
@jwt_required()
def spin():
    # Outcome is decided here; the wheel animation on the client is cosmetic
    result = spin_engine.spin(
        get_store(),
        current_user_id(),
        outcomes=current_app.config.get("SPIN_OUTCOMES"),
        rng=current_app.extensions.get("fitquest_spin_rng"),
    )
    return jsonify(result.to_dict()), 201
