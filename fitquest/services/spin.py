# fitquest/services/spin.py
import logging
import random
from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from ..domain import SpinResult
from ..errors import AlreadySpunToday, NotFound
from ..storage import Store
from . import ledger

logger = logging.getLogger(__name__)

# Four equally likely slices
DEFAULT_SPIN_OUTCOMES = (
    {"reward": "points", "points": 50},
    {"reward": "points", "points": 100},
    {"reward": "avatar", "points": 0},
    {"reward": "surprise", "points": 20},
)

_system_random = random.SystemRandom()


def can_spin_today(history: Iterable[SpinResult], now: Optional[datetime] = None) -> bool:
    """
    False if any spin in ``history`` happened on today's local calendar date.
    Derived from the log every time; there is no "last spin" field.
    """
    today = (now or datetime.now()).date()
    return not any(spin.spin_date and spin.spin_date.date() == today for spin in history)


def spin_status(
    store: Store, user_id: int, now: Optional[datetime] = None
) -> Tuple[List[SpinResult], bool]:
    history = store.spin_history(user_id)
    return history, can_spin_today(history, now)


def spin(
    store: Store,
    user_id: int,
    outcomes: Optional[Sequence[Mapping]] = None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> SpinResult:
    """
    Draw one outcome uniformly, persist it and pay out any points.
    Raises AlreadySpunToday if the user has a spin dated today.
    """
    outcomes = outcomes or DEFAULT_SPIN_OUTCOMES
    rng = rng or _system_random
    now = now or datetime.now()

    with store.atomic(user_id):
        if store.get_user(user_id) is None:
            raise NotFound("user not found")

        if not can_spin_today(store.spin_history(user_id), now):
            logger.info("spin refused user_id=%s: already spun today", user_id)
            raise AlreadySpunToday()

        outcome = rng.choice(list(outcomes))
        payout = int(outcome.get("points") or 0)

        result = store.create_spin_result(
            user_id=user_id,
            reward=outcome["reward"],
            points=payout or None,
            spin_date=now,
        )
        if payout > 0:
            ledger.apply_points(store, user_id, payout)

    logger.info("spin user_id=%s reward=%s points=%s", user_id, result.reward, payout)
    return result
