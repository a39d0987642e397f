# fitquest/storage/memory.py
import itertools
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from ..domain import (
    Achievement,
    Challenge,
    Complete,
    Incomplete,
    Reward,
    SpinResult,
    User,
    UserReward,
    Workout,
    compute_level,
)
from .base import Store, clean_profile_fields


class MemoryStore(Store):
    """
    Dict-backed store for tests and local runs.

    A single lock guards every map so that conditional writes are atomic;
    ``atomic(user_id)`` additionally holds a re-entrant per-user lock for the
    duration of a multi-step ledger operation. Records are copied on the way
    out so callers cannot mutate stored state by accident.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._user_locks: Dict[int, threading.RLock] = defaultdict(threading.RLock)

        self._users: Dict[int, User] = {}
        self._challenges: Dict[int, Challenge] = {}
        self._workouts: Dict[int, Workout] = {}
        self._achievements: Dict[int, Achievement] = {}
        self._rewards: Dict[int, Reward] = {}
        self._user_rewards: Dict[int, UserReward] = {}
        self._spins: Dict[int, SpinResult] = {}

        self._ids = defaultdict(lambda: itertools.count(1))

    def _next_id(self, table: str) -> int:
        return next(self._ids[table])

    @contextmanager
    def atomic(self, user_id: int):
        with self._lock:
            user_lock = self._user_locks[user_id]
        with user_lock:
            yield

    # -----------------------------
    # Users
    # -----------------------------
    def get_user(self, user_id):
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_email(self, email):
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return replace(user)
        return None

    def get_user_by_username(self, username):
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return replace(user)
        return None

    def create_user(
        self,
        email,
        username,
        password_hash,
        avatar_id=1,
        fitness_goal=None,
        workout_days_per_week=3,
        theme_color=0,
    ):
        with self._lock:
            user = User(
                id=self._next_id("users"),
                email=email,
                username=username,
                password_hash=password_hash,
                avatar_id=avatar_id or 1,
                fitness_goal=fitness_goal,
                workout_days_per_week=workout_days_per_week or 3,
                theme_color=theme_color or 0,
                created_at=datetime.now(),
            )
            self._users[user.id] = user
            return replace(user)

    def update_user_profile(self, user_id, fields):
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            updated = replace(user, **clean_profile_fields(fields))
            self._users[user_id] = updated
            return replace(updated)

    def adjust_points(self, user_id, delta):
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            new_points = user.points + int(delta)
            if new_points < 0:
                return None
            updated = replace(user, points=new_points, level=compute_level(new_points))
            self._users[user_id] = updated
            return replace(updated)

    def set_streak(self, user_id, streak_days):
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            updated = replace(user, streak_days=int(streak_days))
            self._users[user_id] = updated
            return replace(updated)

    def leaderboard(self, limit=10):
        with self._lock:
            users = sorted(self._users.values(), key=lambda u: u.points, reverse=True)
            return [replace(u) for u in users[:limit]]

    # -----------------------------
    # Challenges
    # -----------------------------
    def list_challenges(self, user_id):
        with self._lock:
            return [replace(c) for c in self._challenges.values() if c.user_id == user_id]

    def get_challenge(self, challenge_id):
        with self._lock:
            challenge = self._challenges.get(challenge_id)
            return replace(challenge) if challenge else None

    def create_challenge(
        self, user_id, title, description, category, icon, points, duration=None, reps=None
    ):
        with self._lock:
            challenge = Challenge(
                id=self._next_id("challenges"),
                user_id=user_id,
                title=title,
                description=description,
                category=category,
                icon=icon,
                points=int(points),
                duration=duration or None,
                reps=reps or None,
                state=Incomplete(0),
            )
            self._challenges[challenge.id] = challenge
            return replace(challenge)

    def set_challenge_progress(self, challenge_id, progress):
        with self._lock:
            challenge = self._challenges.get(challenge_id)
            if not challenge:
                return None
            if not challenge.is_complete:
                challenge = replace(challenge, state=Incomplete(int(progress)))
                self._challenges[challenge_id] = challenge
            return replace(challenge)

    def mark_challenge_complete(self, challenge_id):
        with self._lock:
            challenge = self._challenges.get(challenge_id)
            if not challenge or challenge.is_complete:
                return False
            self._challenges[challenge_id] = replace(challenge, state=Complete())
            return True

    # -----------------------------
    # Workouts
    # -----------------------------
    def list_workouts(self, user_id):
        with self._lock:
            return [replace(w) for w in self._workouts.values() if w.user_id == user_id]

    def get_workout(self, workout_id):
        with self._lock:
            workout = self._workouts.get(workout_id)
            return replace(workout) if workout else None

    def create_workout(self, user_id, title, description, exercises, duration):
        with self._lock:
            workout = Workout(
                id=self._next_id("workouts"),
                user_id=user_id,
                title=title,
                description=description,
                exercises=exercises,
                duration=int(duration),
            )
            self._workouts[workout.id] = workout
            return replace(workout)

    def mark_workout_complete(self, workout_id, when):
        with self._lock:
            workout = self._workouts.get(workout_id)
            if not workout or workout.completed_date is not None:
                return False
            self._workouts[workout_id] = replace(workout, completed_date=when)
            return True

    def count_completed_workouts(self, user_id):
        with self._lock:
            return sum(
                1
                for w in self._workouts.values()
                if w.user_id == user_id and w.completed_date is not None
            )

    # -----------------------------
    # Achievements
    # -----------------------------
    def list_achievements(self, user_id):
        with self._lock:
            return [replace(a) for a in self._achievements.values() if a.user_id == user_id]

    def create_achievement(self, user_id, title, description, icon):
        with self._lock:
            achievement = Achievement(
                id=self._next_id("achievements"),
                user_id=user_id,
                title=title,
                description=description,
                icon=icon,
                achieved_date=datetime.now(),
            )
            self._achievements[achievement.id] = achievement
            return replace(achievement)

    # -----------------------------
    # Rewards
    # -----------------------------
    def list_rewards(self):
        with self._lock:
            return [replace(r) for r in self._rewards.values()]

    def get_reward(self, reward_id):
        with self._lock:
            reward = self._rewards.get(reward_id)
            return replace(reward) if reward else None

    def create_reward(
        self, title, description, category, icon, points_cost, is_available=True
    ):
        with self._lock:
            reward = Reward(
                id=self._next_id("rewards"),
                title=title,
                description=description,
                category=category,
                icon=icon,
                points_cost=int(points_cost),
                is_available=bool(is_available),
            )
            self._rewards[reward.id] = reward
            return replace(reward)

    def list_user_rewards(self, user_id) -> List[Reward]:
        with self._lock:
            owned_ids = [ur.reward_id for ur in self._user_rewards.values() if ur.user_id == user_id]
            return [replace(self._rewards[rid]) for rid in owned_ids if rid in self._rewards]

    def create_user_reward(self, user_id, reward_id):
        with self._lock:
            user_reward = UserReward(
                id=self._next_id("user_rewards"),
                user_id=user_id,
                reward_id=reward_id,
                acquired_date=datetime.now(),
            )
            self._user_rewards[user_reward.id] = user_reward
            return replace(user_reward)

    # -----------------------------
    # Spins
    # -----------------------------
    def spin_history(self, user_id):
        with self._lock:
            return [replace(s) for s in self._spins.values() if s.user_id == user_id]

    def create_spin_result(
        self, user_id, reward, points: Optional[int], spin_date
    ):
        with self._lock:
            result = SpinResult(
                id=self._next_id("spin_results"),
                user_id=user_id,
                reward=reward,
                points=points,
                spin_date=spin_date,
            )
            self._spins[result.id] = result
            return replace(result)
