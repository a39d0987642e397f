# fitquest/domain.py
"""
Plain records handed out by every store implementation.

The ORM models in ``fitquest.models`` are only a storage detail of
``SqlStore``; services and routes work with these dataclasses so they never
care which backend is active.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union

LEVEL_STEP_POINTS = 100


def _dt_iso(dt) -> Optional[str]:
    return dt.isoformat() if dt else None


def compute_level(points: int) -> int:
    points = int(points or 0)
    return max(1, (points // LEVEL_STEP_POINTS) + 1)


# ------------------------------
# Challenge state
# ------------------------------
@dataclass(frozen=True)
class Incomplete:
    progress: int = 0


@dataclass(frozen=True)
class Complete:
    progress = 100


ChallengeState = Union[Incomplete, Complete]


def challenge_state(is_complete: bool, progress: int) -> ChallengeState:
    """Rebuild the state variant from the two persisted columns."""
    if is_complete:
        return Complete()
    return Incomplete(int(progress or 0))


# ------------------------------
# Records
# ------------------------------
@dataclass
class User:
    id: int
    email: str
    username: str
    password_hash: str
    avatar_id: int = 1
    level: int = 1
    points: int = 0
    streak_days: int = 0
    fitness_goal: Optional[str] = None
    workout_days_per_week: int = 3
    theme_color: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        # password_hash never leaves the server
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "avatarId": self.avatar_id,
            "level": self.level,
            "points": self.points,
            "streakDays": self.streak_days,
            "fitnessGoal": self.fitness_goal,
            "workoutDaysPerWeek": self.workout_days_per_week,
            "themeColor": self.theme_color,
            "createdAt": _dt_iso(self.created_at),
        }


@dataclass
class Challenge:
    id: int
    user_id: int
    title: str
    description: str
    category: str
    icon: str
    points: int
    duration: Optional[int] = None
    reps: Optional[int] = None
    state: ChallengeState = field(default_factory=Incomplete)

    @property
    def is_complete(self) -> bool:
        return isinstance(self.state, Complete)

    @property
    def progress(self) -> int:
        return self.state.progress

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "icon": self.icon,
            "points": self.points,
            "duration": self.duration,
            "reps": self.reps,
            "isComplete": self.is_complete,
            "progress": self.progress,
        }


@dataclass
class Workout:
    id: int
    user_id: int
    title: str
    description: str
    exercises: str
    duration: int
    completed_date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "exercises": self.exercises,
            "duration": self.duration,
            "completedDate": _dt_iso(self.completed_date),
        }


@dataclass
class Achievement:
    id: int
    user_id: int
    title: str
    description: str
    icon: str
    achieved_date: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "achievedDate": _dt_iso(self.achieved_date),
        }


@dataclass
class Reward:
    id: int
    title: str
    description: str
    category: str
    icon: str
    points_cost: int
    is_available: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "icon": self.icon,
            "pointsCost": self.points_cost,
            "isAvailable": self.is_available,
        }


@dataclass
class UserReward:
    id: int
    user_id: int
    reward_id: int
    acquired_date: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "rewardId": self.reward_id,
            "acquiredDate": _dt_iso(self.acquired_date),
        }


@dataclass
class SpinResult:
    id: int
    user_id: int
    reward: str
    points: Optional[int]
    spin_date: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "reward": self.reward,
            "points": self.points,
            "spinDate": _dt_iso(self.spin_date),
        }
