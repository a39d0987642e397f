# fitquest/storage/sql.py
import threading
from contextlib import contextmanager

from sqlalchemy import func, update

from .. import db
from ..domain import compute_level
from ..models import (
    Achievement,
    Challenge,
    Reward,
    SpinResult,
    User,
    UserReward,
    Workout,
)
from .base import Store, clean_profile_fields


class SqlStore(Store):
    """
    Store backed by the Flask-SQLAlchemy session (needs an app context).

    Writes commit immediately unless they run inside ``atomic()``, which locks
    the user's row (``SELECT ... FOR UPDATE`` where the backend supports it)
    and commits or rolls back once at the end of the block.
    """

    def __init__(self):
        self._local = threading.local()

    @property
    def _depth(self) -> int:
        return getattr(self._local, "depth", 0)

    def _commit(self):
        if self._depth == 0:
            db.session.commit()

    @contextmanager
    def atomic(self, user_id):
        depth = self._depth
        if depth == 0:
            db.session.query(User.id).filter(User.id == user_id).with_for_update().first()
        self._local.depth = depth + 1
        try:
            yield
        except Exception:
            self._local.depth = depth
            if depth == 0:
                db.session.rollback()
            raise
        self._local.depth = depth
        if depth == 0:
            db.session.commit()

    def _add(self, row):
        db.session.add(row)
        db.session.flush()
        record = row.to_record()
        self._commit()
        return record

    # -----------------------------
    # Users
    # -----------------------------
    def get_user(self, user_id):
        # balance may have moved in another session since this one cached the row
        row = db.session.get(User, user_id, populate_existing=True)
        return row.to_record() if row else None

    def get_user_by_email(self, email):
        row = User.query.filter_by(email=email).first()
        return row.to_record() if row else None

    def get_user_by_username(self, username):
        row = User.query.filter_by(username=username).first()
        return row.to_record() if row else None

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
        return self._add(
            User(
                email=email,
                username=username,
                password_hash=password_hash,
                avatar_id=avatar_id or 1,
                fitness_goal=fitness_goal,
                workout_days_per_week=workout_days_per_week or 3,
                theme_color=theme_color or 0,
                points=0,
                level=1,
                streak_days=0,
            )
        )

    def update_user_profile(self, user_id, fields):
        row = db.session.get(User, user_id)
        if not row:
            return None
        for key, value in clean_profile_fields(fields).items():
            setattr(row, key, value)
        db.session.flush()
        record = row.to_record()
        self._commit()
        return record

    def adjust_points(self, user_id, delta):
        delta = int(delta)
        # Conditional decrement: the balance check and the write are one statement
        result = db.session.execute(
            update(User)
            .where(User.id == user_id, User.points + delta >= 0)
            .values(points=User.points + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None

        row = db.session.get(User, user_id)
        db.session.refresh(row)
        row.level = compute_level(row.points)
        db.session.flush()
        record = row.to_record()
        self._commit()
        return record

    def set_streak(self, user_id, streak_days):
        row = db.session.get(User, user_id)
        if not row:
            return None
        row.streak_days = int(streak_days)
        db.session.flush()
        record = row.to_record()
        self._commit()
        return record

    def leaderboard(self, limit=10):
        rows = User.query.order_by(User.points.desc(), User.id.asc()).limit(limit).all()
        return [r.to_record() for r in rows]

    # -----------------------------
    # Challenges
    # -----------------------------
    def list_challenges(self, user_id):
        rows = Challenge.query.filter_by(user_id=user_id).order_by(Challenge.id.asc()).all()
        return [r.to_record() for r in rows]

    def get_challenge(self, challenge_id):
        row = db.session.get(Challenge, challenge_id)
        return row.to_record() if row else None

    def create_challenge(
        self, user_id, title, description, category, icon, points, duration=None, reps=None
    ):
        return self._add(
            Challenge(
                user_id=user_id,
                title=title,
                description=description,
                category=category,
                icon=icon,
                points=int(points),
                duration=duration or None,
                reps=reps or None,
                is_complete=False,
                progress=0,
            )
        )

    def set_challenge_progress(self, challenge_id, progress):
        db.session.execute(
            update(Challenge)
            .where(Challenge.id == challenge_id, Challenge.is_complete.is_(False))
            .values(progress=int(progress))
            .execution_options(synchronize_session=False)
        )
        row = db.session.get(Challenge, challenge_id)
        if not row:
            return None
        db.session.refresh(row)
        record = row.to_record()
        self._commit()
        return record

    def mark_challenge_complete(self, challenge_id):
        result = db.session.execute(
            update(Challenge)
            .where(Challenge.id == challenge_id, Challenge.is_complete.is_(False))
            .values(is_complete=True, progress=100)
            .execution_options(synchronize_session=False)
        )
        done = result.rowcount == 1
        row = db.session.get(Challenge, challenge_id)
        if row:
            db.session.refresh(row)
        self._commit()
        return done

    # -----------------------------
    # Workouts
    # -----------------------------
    def list_workouts(self, user_id):
        rows = Workout.query.filter_by(user_id=user_id).order_by(Workout.id.desc()).all()
        return [r.to_record() for r in rows]

    def get_workout(self, workout_id):
        row = db.session.get(Workout, workout_id)
        return row.to_record() if row else None

    def create_workout(self, user_id, title, description, exercises, duration):
        return self._add(
            Workout(
                user_id=user_id,
                title=title,
                description=description,
                exercises=exercises,
                duration=int(duration),
            )
        )

    def mark_workout_complete(self, workout_id, when):
        result = db.session.execute(
            update(Workout)
            .where(Workout.id == workout_id, Workout.completed_date.is_(None))
            .values(completed_date=when)
            .execution_options(synchronize_session=False)
        )
        done = result.rowcount == 1
        row = db.session.get(Workout, workout_id)
        if row:
            db.session.refresh(row)
        self._commit()
        return done

    def count_completed_workouts(self, user_id):
        return (
            db.session.query(func.count(Workout.id))
            .filter(Workout.user_id == user_id, Workout.completed_date.isnot(None))
            .scalar()
            or 0
        )

    # -----------------------------
    # Achievements
    # -----------------------------
    def list_achievements(self, user_id):
        rows = (
            Achievement.query.filter_by(user_id=user_id)
            .order_by(Achievement.achieved_date.desc())
            .all()
        )
        return [r.to_record() for r in rows]

    def create_achievement(self, user_id, title, description, icon):
        return self._add(
            Achievement(user_id=user_id, title=title, description=description, icon=icon)
        )

    # -----------------------------
    # Rewards
    # -----------------------------
    def list_rewards(self):
        return [r.to_record() for r in Reward.query.order_by(Reward.id.asc()).all()]

    def get_reward(self, reward_id):
        row = db.session.get(Reward, reward_id)
        return row.to_record() if row else None

    def create_reward(
        self, title, description, category, icon, points_cost, is_available=True
    ):
        return self._add(
            Reward(
                title=title,
                description=description,
                category=category,
                icon=icon,
                points_cost=int(points_cost),
                is_available=bool(is_available),
            )
        )

    def list_user_rewards(self, user_id):
        rows = (
            db.session.query(Reward)
            .join(UserReward, UserReward.reward_id == Reward.id)
            .filter(UserReward.user_id == user_id)
            .order_by(UserReward.acquired_date.desc())
            .all()
        )
        return [r.to_record() for r in rows]

    def create_user_reward(self, user_id, reward_id):
        return self._add(UserReward(user_id=user_id, reward_id=reward_id))

    # -----------------------------
    # Spins
    # -----------------------------
    def spin_history(self, user_id):
        rows = (
            SpinResult.query.filter_by(user_id=user_id)
            .order_by(SpinResult.spin_date.desc())
            .all()
        )
        return [r.to_record() for r in rows]

    def create_spin_result(self, user_id, reward, points, spin_date):
        return self._add(
            SpinResult(user_id=user_id, reward=reward, points=points, spin_date=spin_date)
        )
