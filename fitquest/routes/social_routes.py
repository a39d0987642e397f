# fitquest/routes/social_routes.py
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from ..storage import get_store
from .common import current_user_id

social_bp = Blueprint("social", __name__)

LEADERBOARD_SIZE = 10


@social_bp.route("/leaderboard", methods=["GET"])
@jwt_required()
def leaderboard():
    """
    Top users by points, without credentials:
    { "leaderboard": [ { "rank": 1, "id": 2, "username": "alice", "points": 1234, ... } ] }
    """
    try:
        limit = int(request.args.get("limit", LEADERBOARD_SIZE))
    except ValueError:
        limit = LEADERBOARD_SIZE
    limit = max(1, min(limit, LEADERBOARD_SIZE))

    payload = []
    for rank, user in enumerate(get_store().leaderboard(limit), start=1):
        row = user.to_dict()
        row.pop("email", None)
        row["rank"] = rank
        payload.append(row)

    return jsonify({"leaderboard": payload}), 200


@social_bp.route("/achievements", methods=["GET"])
@jwt_required()
def achievements():
    rows = get_store().list_achievements(current_user_id())
    return jsonify([a.to_dict() for a in rows]), 200
