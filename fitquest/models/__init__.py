# fitquest/models/__init__.py
from .user import User
from .workout import Workout
from .progress import Achievement, Challenge
from .reward import Reward, SpinResult, UserReward

__all__ = [
    "User",
    "Workout",
    "Challenge",
    "Achievement",
    "Reward",
    "UserReward",
    "SpinResult",
]
