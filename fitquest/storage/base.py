# fitquest/storage/base.py
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from ..domain import (
    Achievement,
    Challenge,
    Reward,
    SpinResult,
    User,
    UserReward,
    Workout,
)

# Fields a user may never change through a profile update
PROTECTED_USER_FIELDS = frozenset(
    {"id", "points", "level", "streak_days", "created_at", "password_hash", "email"}
)
PROFILE_FIELDS = frozenset(
    {"username", "avatar_id", "fitness_goal", "workout_days_per_week", "theme_color"}
)


class Store(ABC):
    """
    Persistence gateway used by every service.

    Reads return domain records (or None / empty lists). Ledger writes are
    conditional so that a caller holding a stale record can never push a
    balance below zero or award a challenge twice.
    """

    # -----------------------------
    # Transactions
    # -----------------------------
    @abstractmethod
    @contextmanager
    def atomic(self, user_id: int) -> Iterator[None]:
        """Serialize ledger work for one user; commit on success."""

    # -----------------------------
    # Users
    # -----------------------------
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(
        self,
        email: str,
        username: str,
        password_hash: str,
        avatar_id: int = 1,
        fitness_goal: Optional[str] = None,
        workout_days_per_week: int = 3,
        theme_color: int = 0,
    ) -> User: ...

    @abstractmethod
    def update_user_profile(self, user_id: int, fields: Dict[str, Any]) -> Optional[User]: ...

    @abstractmethod
    def adjust_points(self, user_id: int, delta: int) -> Optional[User]:
        """
        Add ``delta`` to the balance and re-derive the level in one step.
        Returns None (and writes nothing) if the result would be negative.
        """

    @abstractmethod
    def set_streak(self, user_id: int, streak_days: int) -> Optional[User]: ...

    @abstractmethod
    def leaderboard(self, limit: int = 10) -> List[User]: ...

    # -----------------------------
    # Challenges
    # -----------------------------
    @abstractmethod
    def list_challenges(self, user_id: int) -> List[Challenge]: ...

    @abstractmethod
    def get_challenge(self, challenge_id: int) -> Optional[Challenge]: ...

    @abstractmethod
    def create_challenge(
        self,
        user_id: int,
        title: str,
        description: str,
        category: str,
        icon: str,
        points: int,
        duration: Optional[int] = None,
        reps: Optional[int] = None,
    ) -> Challenge: ...

    @abstractmethod
    def set_challenge_progress(self, challenge_id: int, progress: int) -> Optional[Challenge]:
        """Only touches incomplete challenges."""

    @abstractmethod
    def mark_challenge_complete(self, challenge_id: int) -> bool:
        """True only for the call that performed the Incomplete -> Complete move."""

    # -----------------------------
    # Workouts
    # -----------------------------
    @abstractmethod
    def list_workouts(self, user_id: int) -> List[Workout]: ...

    @abstractmethod
    def get_workout(self, workout_id: int) -> Optional[Workout]: ...

    @abstractmethod
    def create_workout(
        self,
        user_id: int,
        title: str,
        description: str,
        exercises: str,
        duration: int,
    ) -> Workout: ...

    @abstractmethod
    def mark_workout_complete(self, workout_id: int, when: datetime) -> bool: ...

    @abstractmethod
    def count_completed_workouts(self, user_id: int) -> int: ...

    # -----------------------------
    # Achievements
    # -----------------------------
    @abstractmethod
    def list_achievements(self, user_id: int) -> List[Achievement]: ...

    @abstractmethod
    def create_achievement(
        self, user_id: int, title: str, description: str, icon: str
    ) -> Achievement: ...

    # -----------------------------
    # Rewards
    # -----------------------------
    @abstractmethod
    def list_rewards(self) -> List[Reward]: ...

    @abstractmethod
    def get_reward(self, reward_id: int) -> Optional[Reward]: ...

    @abstractmethod
    def create_reward(
        self,
        title: str,
        description: str,
        category: str,
        icon: str,
        points_cost: int,
        is_available: bool = True,
    ) -> Reward: ...

    @abstractmethod
    def list_user_rewards(self, user_id: int) -> List[Reward]: ...

    @abstractmethod
    def create_user_reward(self, user_id: int, reward_id: int) -> UserReward: ...

    # -----------------------------
    # Spins
    # -----------------------------
    @abstractmethod
    def spin_history(self, user_id: int) -> List[SpinResult]: ...

    @abstractmethod
    def create_spin_result(
        self, user_id: int, reward: str, points: Optional[int], spin_date: datetime
    ) -> SpinResult: ...


def clean_profile_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        k: v
        for k, v in (fields or {}).items()
        if k in PROFILE_FIELDS and k not in PROTECTED_USER_FIELDS
    }
