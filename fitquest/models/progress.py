# fitquest/models/progress.py
from datetime import datetime
from .. import db
from ..domain import (
    Achievement as AchievementRecord,
    Challenge as ChallengeRecord,
    challenge_state,
)


# -----------------------------
# Challenges
# -----------------------------
class Challenge(db.Model):
    __tablename__ = "challenges"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(
        db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    icon = db.Column(db.String(50), nullable=False)
    points = db.Column(db.Integer, nullable=False)
    duration = db.Column(db.Integer)  # minutes
    reps = db.Column(db.Integer)
    is_complete = db.Column(db.Boolean, nullable=False, default=False)
    progress = db.Column(db.Integer, nullable=False, default=0)

    user = db.relationship("User", backref=db.backref("challenges", passive_deletes=True))

    def to_record(self) -> ChallengeRecord:
        return ChallengeRecord(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            category=self.category,
            icon=self.icon,
            points=self.points,
            duration=self.duration,
            reps=self.reps,
            state=challenge_state(self.is_complete, self.progress),
        )


# -----------------------------
# Achievements
# -----------------------------
class Achievement(db.Model):
    __tablename__ = "achievements"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(
        db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    icon = db.Column(db.String(50), nullable=False)
    achieved_date = db.Column(db.DateTime, nullable=False, default=datetime.now)

    user = db.relationship("User", backref=db.backref("achievements", passive_deletes=True))

    def to_record(self) -> AchievementRecord:
        return AchievementRecord(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            icon=self.icon,
            achieved_date=self.achieved_date,
        )
