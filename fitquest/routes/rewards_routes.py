# fitquest/routes/rewards_routes.py
from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required

from ..errors import NotFound, ValidationError
from ..services import ledger, rewards
from ..storage import get_store
from .common import current_user, current_user_id, get_payments, json_body

rewards_bp = Blueprint("rewards", __name__)


def _get_reward(reward_id: int):
    reward = get_store().get_reward(reward_id)
    if not reward:
        raise NotFound("Reward not found")
    return reward


@rewards_bp.route("", methods=["GET"])
@jwt_required()
def list_rewards():
    return jsonify([r.to_dict() for r in get_store().list_rewards()]), 200


@rewards_bp.route("/mine", methods=["GET"])
@jwt_required()
def my_rewards():
    owned = get_store().list_user_rewards(current_user_id())
    return jsonify([r.to_dict() for r in owned]), 200


@rewards_bp.route("/overview", methods=["GET"])
@jwt_required()
def rewards_overview():
    """
    Returns:
    {
      "user": { ... user.to_dict() ... },
      "summary": {
        "points": 240,
        "level": 3,
        "nextLevelPoints": 300,
        "ownedRewardsCount": 1,
        "achievementsCount": 2
      },
      "owned": [ ...rewards... ],
      "achievements": [ ...achievements... ]
    }
    """
    store = get_store()
    user = current_user()
    owned = store.list_user_rewards(user.id)
    achievements = store.list_achievements(user.id)

    summary = {
        "points": int(user.points),
        "level": int(user.level),
        "nextLevelPoints": ledger.next_level_points(user.level),
        "ownedRewardsCount": len(owned),
        "achievementsCount": len(achievements),
    }

    return (
        jsonify(
            {
                "user": user.to_dict(),
                "summary": summary,
                "owned": [r.to_dict() for r in owned],
                "achievements": [a.to_dict() for a in achievements],
            }
        ),
        200,
    )


@rewards_bp.route("/<int:reward_id>/redeem", methods=["POST"])
@jwt_required()
def redeem_reward(reward_id):
    """
    Digital rewards: empty body.
    Real World rewards: shippingName, shippingAddress, shippingCity,
    shippingState, shippingZip, shippingCountry.
    """
    user_id = current_user_id()
    reward = _get_reward(reward_id)

    redemption = rewards.redeem_reward(
        get_store(), get_payments(), user_id, reward, json_body()
    )
    current_app.logger.info(
        f"[rewards/redeem] user_id={user_id} reward_id={reward_id} "
        f"physical={redemption.is_physical}"
    )
    return jsonify(redemption.to_dict()), 200


@rewards_bp.route("/payment-intent", methods=["POST"])
@jwt_required()
def create_payment_intent():
    """
    Body: { "rewardId": 3, "shippingInfo": { ... } }
    """
    data = json_body()
    raw_id = data.get("rewardId")
    try:
        reward_id = int(raw_id)
    except (TypeError, ValueError):
        raise ValidationError(["rewardId"], "Reward ID is required")

    reward = _get_reward(reward_id)
    shipping = data.get("shippingInfo") if isinstance(data.get("shippingInfo"), dict) else {}
    client_secret = rewards.create_payment_session(
        get_payments(), current_user_id(), reward, shipping
    )
    return jsonify({"clientSecret": client_secret}), 200
