# fitquest/routes/profile_routes.py
from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from ..services import accounts
from ..storage import get_store
from .common import current_user, current_user_id, json_body

profile_bp = Blueprint("profile", __name__)


@profile_bp.route("", methods=["GET"])
@jwt_required()
def get_profile():
    return jsonify({"user": current_user().to_dict()}), 200


@profile_bp.route("", methods=["PATCH"])
@jwt_required()
def update_profile():
    # points, level, streakDays etc. are not editable here
    user = accounts.update_profile(get_store(), current_user_id(), json_body())
    return jsonify({"user": user.to_dict()}), 200


@profile_bp.route("/bmi", methods=["POST"])
@jwt_required()
def bmi():
    """
    Body: { "weight": 70, "height": 175, "units": "metric" }
    ("imperial": weight in lbs, height in inches)
    """
    data = json_body()
    value, category = accounts.compute_bmi(
        data.get("weight"), data.get("height"), data.get("units") or "metric"
    )
    return jsonify({"bmi": value, "category": category}), 200
