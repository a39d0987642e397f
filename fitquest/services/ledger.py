# fitquest/services/ledger.py
"""
Progression ledger: the single place that turns point deltas into a
consistent (points, level) pair and that performs challenge and workout
completion.

Every function takes the store explicitly and returns fresh records; callers
never write ``points`` or ``level`` themselves.
"""
import logging
import numbers
from datetime import datetime
from typing import Optional, Tuple

from ..catalog import ACHIEVEMENTS
from ..domain import (
    LEVEL_STEP_POINTS,
    Achievement,
    Challenge,
    User,
    Workout,
    compute_level,
)
from ..errors import InsufficientBalance, NotFound, ValidationError
from ..storage import Store

logger = logging.getLogger(__name__)

WORKOUT_COMPLETION_POINTS = 30

__all__ = [
    "LEVEL_STEP_POINTS",
    "WORKOUT_COMPLETION_POINTS",
    "compute_level",
    "next_level_points",
    "apply_points",
    "update_challenge_progress",
    "complete_challenge",
    "complete_workout",
    "increment_streak",
    "set_streak",
    "unlock_achievement",
]


def next_level_points(level: int) -> int:
    """Total points at which ``level + 1`` starts."""
    if level < 1:
        level = 1
    return level * LEVEL_STEP_POINTS


def _require_user(store: Store, user_id: int) -> User:
    user = store.get_user(user_id)
    if not user:
        raise NotFound("user not found")
    return user


def apply_points(store: Store, user_id: int, delta: int) -> User:
    """
    points' = points + delta, level' = points' // 100 + 1.

    Raises InsufficientBalance (nothing written) when points' would be
    negative. The store applies the change as one conditional write, so a
    stale balance read elsewhere cannot cause an overdraft.
    """
    delta = int(delta)
    updated = store.adjust_points(user_id, delta)
    if updated is None:
        user = _require_user(store, user_id)
        logger.info(
            "points debit refused user_id=%s delta=%s balance=%s", user_id, delta, user.points
        )
        raise InsufficientBalance(required=-delta, available=user.points)

    logger.info(
        "points applied user_id=%s delta=%s points=%s level=%s",
        user_id, delta, updated.points, updated.level,
    )
    return updated


# ------------------------------
# Challenges
# ------------------------------
def _validate_progress(progress) -> int:
    # bool is an int subclass; "true" is not a progress value
    if isinstance(progress, bool) or not isinstance(progress, numbers.Real):
        raise ValidationError(["progress"], "progress must be a number between 0 and 100")
    if not 0 <= progress <= 100:
        raise ValidationError(["progress"], "progress must be a number between 0 and 100")
    # 50.0 is fine, 99.9 is not
    if progress != int(progress):
        raise ValidationError(["progress"], "progress must be a whole number")
    return int(progress)


def update_challenge_progress(store: Store, challenge: Challenge, progress) -> Challenge:
    """Set progress on an incomplete challenge. No-op once complete."""
    value = _validate_progress(progress)
    if challenge.is_complete:
        return challenge

    updated = store.set_challenge_progress(challenge.id, value)
    if updated is None:
        raise NotFound("Challenge not found")
    return updated


def complete_challenge(store: Store, challenge: Challenge) -> Tuple[Challenge, int]:
    """
    Incomplete -> Complete, awarding ``challenge.points`` to the owner.

    Only the call that actually performs the transition awards points, so
    a retried or duplicated request returns ``(challenge, 0)``.
    """
    with store.atomic(challenge.user_id):
        transitioned = store.mark_challenge_complete(challenge.id)
        awarded = 0
        if transitioned and challenge.points > 0:
            apply_points(store, challenge.user_id, challenge.points)
            awarded = challenge.points

    updated = store.get_challenge(challenge.id)
    if updated is None:
        raise NotFound("Challenge not found")

    if transitioned:
        logger.info(
            "challenge completed challenge_id=%s user_id=%s awarded=%s",
            challenge.id, challenge.user_id, awarded,
        )
    return updated, awarded


# ------------------------------
# Workouts
# ------------------------------
def complete_workout(
    store: Store, workout: Workout, now: Optional[datetime] = None
) -> Tuple[Workout, int]:
    """Stamp ``completed_date`` and award the flat workout bonus once."""
    now = now or datetime.now()
    with store.atomic(workout.user_id):
        transitioned = store.mark_workout_complete(workout.id, now)
        awarded = 0
        if transitioned:
            apply_points(store, workout.user_id, WORKOUT_COMPLETION_POINTS)
            awarded = WORKOUT_COMPLETION_POINTS

    updated = store.get_workout(workout.id)
    if updated is None:
        raise NotFound("Workout not found")
    return updated, awarded


# ------------------------------
# Streaks
# ------------------------------
def increment_streak(store: Store, user_id: int) -> User:
    with store.atomic(user_id):
        user = _require_user(store, user_id)
        return store.set_streak(user_id, user.streak_days + 1)


def set_streak(store: Store, user_id: int, streak_days: int) -> User:
    if isinstance(streak_days, bool) or not isinstance(streak_days, int) or streak_days < 0:
        raise ValidationError(["streakDays"], "streakDays must be a non-negative integer")
    _require_user(store, user_id)
    return store.set_streak(user_id, streak_days)


# ------------------------------
# Achievements
# ------------------------------
def unlock_achievement(store: Store, user_id: int, code: str) -> Optional[Achievement]:
    """
    Append the catalog achievement ``code`` unless the user already has it.
    Returns the new achievement, or None if nothing was unlocked.
    """
    entry = ACHIEVEMENTS.get(code)
    if not entry:
        return None

    with store.atomic(user_id):
        if any(a.title == entry["title"] for a in store.list_achievements(user_id)):
            return None
        achievement = store.create_achievement(
            user_id=user_id,
            title=entry["title"],
            description=entry["description"],
            icon=entry["icon"],
        )

    logger.info("achievement unlocked user_id=%s code=%s", user_id, code)
    return achievement
