# fitquest/models/workout.py
from .. import db
from ..domain import Workout as WorkoutRecord


class Workout(db.Model):
    __tablename__ = "workouts"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    user_id = db.Column(
        db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    # JSON stringified list of exercises
    exercises = db.Column(db.Text, nullable=False, default="[]")
    duration = db.Column(db.Integer, nullable=False)  # minutes
    completed_date = db.Column(db.DateTime)

    user = db.relationship("User", backref=db.backref("workouts", passive_deletes=True))

    def to_record(self) -> WorkoutRecord:
        return WorkoutRecord(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            exercises=self.exercises,
            duration=self.duration,
            completed_date=self.completed_date,
        )
