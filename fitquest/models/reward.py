# fitquest/models/reward.py
from datetime import datetime
from .. import db
from ..domain import (
    Reward as RewardRecord,
    SpinResult as SpinResultRecord,
    UserReward as UserRewardRecord,
)


class Reward(db.Model):
    """Global catalog entry, not owned by a user."""
    __tablename__ = "rewards"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    icon = db.Column(db.String(50), nullable=False)
    points_cost = db.Column(db.Integer, nullable=False)
    is_available = db.Column(db.Boolean, nullable=False, default=True)

    def to_record(self) -> RewardRecord:
        return RewardRecord(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            icon=self.icon,
            points_cost=self.points_cost,
            is_available=bool(self.is_available),
        )


class UserReward(db.Model):
    __tablename__ = "user_rewards"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(
        db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reward_id = db.Column(db.Integer, db.ForeignKey("rewards.id"), nullable=False)
    acquired_date = db.Column(db.DateTime, nullable=False, default=datetime.now)

    user = db.relationship("User", backref=db.backref("user_rewards", passive_deletes=True))
    reward = db.relationship("Reward", backref="user_rewards")

    def to_record(self) -> UserRewardRecord:
        return UserRewardRecord(
            id=self.id,
            user_id=self.user_id,
            reward_id=self.reward_id,
            acquired_date=self.acquired_date,
        )


class SpinResult(db.Model):
    __tablename__ = "spin_results"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(
        db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reward = db.Column(db.String(50), nullable=False)
    points = db.Column(db.Integer)
    spin_date = db.Column(db.DateTime, nullable=False, default=datetime.now)

    user = db.relationship("User", backref=db.backref("spin_results", passive_deletes=True))

    def to_record(self) -> SpinResultRecord:
        return SpinResultRecord(
            id=self.id,
            user_id=self.user_id,
            reward=self.reward,
            points=self.points,
            spin_date=self.spin_date,
        )
