# fitquest/routes/workout_routes.py

import json
from typing import Any

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from ..errors import ValidationError
from ..services import ledger
from ..storage import get_store
from .common import current_user_id, json_body, require_owner

workouts_bp = Blueprint("workouts", __name__)


# ------------------------------
# Helpers
# ------------------------------
def _serialize_exercises(v: Any) -> str:
    """Exercises arrive as a list or an already-serialized JSON list."""
    if isinstance(v, str):
        try:
            parsed = json.loads(v)
        except ValueError:
            raise ValidationError(["exercises"], "exercises must be a JSON list")
    else:
        parsed = v
    if not isinstance(parsed, list):
        raise ValidationError(["exercises"], "exercises must be a JSON list")
    return json.dumps(parsed)


# ------------------------------
# GET /api/workouts
# ------------------------------
@workouts_bp.route("", methods=["GET"])
@jwt_required()
def list_workouts():
    workouts = get_store().list_workouts(current_user_id())
    return jsonify([w.to_dict() for w in workouts]), 200


# ------------------------------
# POST /api/workouts
# ------------------------------
@workouts_bp.route("", methods=["POST"])
@jwt_required()
def create_workout():
    """
    Expected body:
    {
      "title": "Full body",
      "description": "...",
      "exercises": [...],
      "duration": 20
    }
    """
    data = json_body()

    errors = []
    title = data.get("title").strip() if isinstance(data.get("title"), str) else ""
    if not title:
        errors.append("title")
    description = data.get("description") if isinstance(data.get("description"), str) else ""

    duration = data.get("duration")
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        errors.append("duration")

    if "exercises" not in data:
        errors.append("exercises")
    if errors:
        raise ValidationError(errors)

    workout = get_store().create_workout(
        user_id=current_user_id(),
        title=title,
        description=description,
        exercises=_serialize_exercises(data.get("exercises")),
        duration=duration,
    )
    return jsonify(workout.to_dict()), 201


# ------------------------------
# POST /api/workouts/<id>/complete
# ------------------------------
@workouts_bp.route("/<int:workout_id>/complete", methods=["POST"])
@jwt_required()
def complete_workout(workout_id):
    store = get_store()
    workout = require_owner(store.get_workout(workout_id), "Workout", "complete")

    updated, awarded = ledger.complete_workout(store, workout)

    # Idempotency: already completed -> no bonus, no streak bump
    if awarded:
        ledger.increment_streak(store, workout.user_id)
        if store.count_completed_workouts(workout.user_id) == 1:
            ledger.unlock_achievement(store, workout.user_id, "first_workout")

    return jsonify(updated.to_dict()), 200
