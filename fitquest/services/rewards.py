# fitquest/services/rewards.py
"""
Point-for-reward exchange.

Digital rewards are granted directly. "Real World" rewards also need a
zero-amount payment-collection session so the client can confirm shipping
details; points remain the only currency.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from ..catalog import DEFAULT_REWARDS, PHYSICAL_REWARD_CATEGORY
from ..domain import Reward, UserReward
from ..errors import InsufficientBalance, NotFound, ValidationError
from ..storage import Store
from . import ledger

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = (
    "shippingName",
    "shippingAddress",
    "shippingCity",
    "shippingState",
    "shippingZip",
    "shippingCountry",
)


@dataclass
class Redemption:
    user_reward: UserReward
    is_physical: bool
    client_secret: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "userReward": self.user_reward.to_dict(),
            "isPhysicalReward": self.is_physical,
        }
        if self.is_physical:
            payload["clientSecret"] = self.client_secret
        return payload


def is_physical(reward: Reward) -> bool:
    return reward.category == PHYSICAL_REWARD_CATEGORY


def validate_shipping(shipping: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    shipping = shipping or {}
    cleaned = {}
    missing = []
    for name in SHIPPING_FIELDS:
        value = shipping.get(name)
        value = value.strip() if isinstance(value, str) else value
        if not value:
            missing.append(name)
        else:
            cleaned[name] = str(value)
    if missing:
        raise ValidationError(
            missing, "Shipping information is required for physical rewards: " + ", ".join(missing)
        )
    return cleaned


def _require_available(reward: Reward) -> None:
    if not reward.is_available:
        raise ValidationError(["reward"], "This reward is not available")


def _check_affordable(store: Store, user_id: int, reward: Reward) -> None:
    user = store.get_user(user_id)
    if not user:
        raise NotFound("user not found")
    if user.points < reward.points_cost:
        logger.info(
            "redeem refused user_id=%s reward_id=%s cost=%s balance=%s",
            user_id, reward.id, reward.points_cost, user.points,
        )
        raise InsufficientBalance(required=reward.points_cost, available=user.points)


def _debit_and_grant(store: Store, user_id: int, reward: Reward) -> UserReward:
    if reward.points_cost > 0:
        ledger.apply_points(store, user_id, -reward.points_cost)
    user_reward = store.create_user_reward(user_id=user_id, reward_id=reward.id)
    logger.info(
        "reward redeemed user_id=%s reward_id=%s cost=%s user_reward_id=%s",
        user_id, reward.id, reward.points_cost, user_reward.id,
    )
    return user_reward


def redeem(store: Store, user_id: int, reward: Reward) -> UserReward:
    """Exchange ``reward.points_cost`` points for ownership of ``reward``."""
    _require_available(reward)
    with store.atomic(user_id):
        _check_affordable(store, user_id, reward)
        return _debit_and_grant(store, user_id, reward)


def _payment_metadata(user_id: int, reward: Reward, shipping: Mapping[str, str]) -> Dict[str, Any]:
    metadata = {
        "userId": user_id,
        "rewardId": reward.id,
        "rewardTitle": reward.title,
        "rewardDescription": reward.description,
    }
    metadata.update(shipping)
    return metadata


def redeem_physical(
    store: Store, payments, user_id: int, reward: Reward, shipping: Mapping[str, Any]
) -> Tuple[UserReward, str]:
    """
    Same exchange as ``redeem`` plus a payment-collection session carrying
    the reward and shipping metadata. Returns the grant and the client secret.

    The session is requested before the debit, so a provider failure leaves
    the balance and ownership untouched.
    """
    shipping = validate_shipping(shipping)
    _require_available(reward)

    with store.atomic(user_id):
        _check_affordable(store, user_id, reward)
        client_secret = payments.create_collection_session(
            _payment_metadata(user_id, reward, shipping)
        )
        user_reward = _debit_and_grant(store, user_id, reward)

    return user_reward, client_secret


def redeem_reward(
    store: Store,
    payments,
    user_id: int,
    reward: Reward,
    shipping: Optional[Mapping[str, Any]] = None,
) -> Redemption:
    """Pick the digital or physical path from the reward's category."""
    if is_physical(reward):
        user_reward, client_secret = redeem_physical(
            store, payments, user_id, reward, shipping or {}
        )
        redemption = Redemption(user_reward, is_physical=True, client_secret=client_secret)
    else:
        redemption = Redemption(redeem(store, user_id, reward), is_physical=False)

    ledger.unlock_achievement(store, user_id, "first_reward")
    return redemption


def create_payment_session(
    payments, user_id: int, reward: Reward, shipping: Optional[Mapping[str, Any]] = None
) -> str:
    """Standalone collection session for a reward; no points change hands."""
    metadata = _payment_metadata(user_id, reward, {})
    for key, value in (shipping or {}).items():
        if isinstance(value, (str, int, float)):
            metadata[key] = value
    return payments.create_collection_session(metadata)


def seed_reward_catalog(store: Store) -> int:
    """Insert the default catalog into an empty store. Returns rows added."""
    if store.list_rewards():
        return 0
    for reward in DEFAULT_REWARDS:
        store.create_reward(**reward)
    logger.info("seeded %s default rewards", len(DEFAULT_REWARDS))
    return len(DEFAULT_REWARDS)
