# fitquest/models/user.py
from datetime import datetime
from .. import db
from ..domain import User as UserRecord


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    username = db.Column(db.String(50), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    avatar_id = db.Column(db.Integer, nullable=False, default=1)

    points = db.Column(db.Integer, nullable=False, default=0)
    level = db.Column(db.Integer, nullable=False, default=1)
    streak_days = db.Column(db.Integer, nullable=False, default=0)

    fitness_goal = db.Column(db.String(100))
    workout_days_per_week = db.Column(db.Integer, nullable=False, default=3)
    theme_color = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        db.CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
    )

    def to_record(self) -> UserRecord:
        return UserRecord(
            id=self.id,
            email=self.email,
            username=self.username,
            password_hash=self.password_hash,
            avatar_id=self.avatar_id or 1,
            level=self.level or 1,
            points=self.points or 0,
            streak_days=self.streak_days or 0,
            fitness_goal=self.fitness_goal,
            workout_days_per_week=self.workout_days_per_week or 3,
            theme_color=self.theme_color or 0,
            created_at=self.created_at,
        )
