# fitquest/routes/challenge_routes.py
from typing import Any, Optional

from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required

from ..catalog import CHALLENGE_CATEGORIES
from ..errors import ValidationError
from ..services import ledger
from ..storage import get_store
from .common import current_user_id, json_body, require_owner

challenges_bp = Blueprint("challenges", __name__)


# ------------------------------
# Helpers
# ------------------------------
def _optional_positive_int(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        raise ValueError(v)
    value = int(v)
    if value < 0:
        raise ValueError(v)
    return value or None


def _parse_challenge(data: dict) -> dict:
    errors = []
    fields = {}
    for key in ("title", "description", "category", "icon"):
        value = (data.get(key) or "").strip() if isinstance(data.get(key), str) else ""
        if not value:
            errors.append(key)
        fields[key] = value

    if fields["category"] and fields["category"] not in CHALLENGE_CATEGORIES:
        errors.append("category")

    points = data.get("points")
    if isinstance(points, bool) or not isinstance(points, int) or points < 0:
        errors.append("points")
    fields["points"] = points

    for key in ("duration", "reps"):
        try:
            fields[key] = _optional_positive_int(data.get(key))
        except (TypeError, ValueError):
            errors.append(key)

    if errors:
        raise ValidationError(errors)
    return fields


# ------------------------------
# GET /api/challenges
# ------------------------------
@challenges_bp.route("", methods=["GET"])
@jwt_required()
def list_challenges():
    challenges = get_store().list_challenges(current_user_id())
    return jsonify([c.to_dict() for c in challenges]), 200


# ------------------------------
# POST /api/challenges
# ------------------------------
@challenges_bp.route("", methods=["POST"])
@jwt_required()
def create_challenge():
    fields = _parse_challenge(json_body())
    challenge = get_store().create_challenge(user_id=current_user_id(), **fields)
    return jsonify(challenge.to_dict()), 201


# ------------------------------
# PATCH /api/challenges/<id>/progress
# ------------------------------
@challenges_bp.route("/<int:challenge_id>/progress", methods=["PATCH"])
@jwt_required()
def update_progress(challenge_id):
    """
    Body: { "progress": 0..100 }
    """
    store = get_store()
    challenge = require_owner(store.get_challenge(challenge_id), "Challenge", "update")
    updated = ledger.update_challenge_progress(store, challenge, json_body().get("progress"))
    return jsonify(updated.to_dict()), 200


# ------------------------------
# POST /api/challenges/<id>/complete
# ------------------------------
@challenges_bp.route("/<int:challenge_id>/complete", methods=["POST"])
@jwt_required()
def complete_challenge(challenge_id):
    store = get_store()
    challenge = require_owner(store.get_challenge(challenge_id), "Challenge", "complete")

    updated, awarded = ledger.complete_challenge(store, challenge)
    if awarded:
        ledger.unlock_achievement(store, challenge.user_id, "first_challenge")
    else:
        current_app.logger.info(
            f"[challenges/complete] challenge_id={challenge_id} already complete, nothing awarded"
        )

    return jsonify(updated.to_dict()), 200
