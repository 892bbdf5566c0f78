"""Progress Snapshot model definition.
Exactly one row per (user, calendar day); recomputing a day overwrites it.
"""
from datetime import datetime
from extensions import db

SCORE_FIELDS = ('life_score', 'finance_score', 'fitness_score', 'habits_score', 'systems_score')


class ProgressSnapshot(db.Model):
    __tablename__ = 'progress_snapshot'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', name='uq_progress_snapshot_day'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    life_score = db.Column(db.Integer, default=0, nullable=False)
    finance_score = db.Column(db.Integer, default=0, nullable=False)
    fitness_score = db.Column(db.Integer, default=0, nullable=False)
    habits_score = db.Column(db.Integer, default=0, nullable=False)
    systems_score = db.Column(db.Integer, default=0, nullable=False)

    total_saved = db.Column(db.Float, default=0.0, nullable=False)
    active_habits = db.Column(db.Integer, default=0, nullable=False)
    active_goals = db.Column(db.Integer, default=0, nullable=False)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'date': self.date.isoformat() if self.date else None,
            'life_score': self.life_score,
            'finance_score': self.finance_score,
            'fitness_score': self.fitness_score,
            'habits_score': self.habits_score,
            'systems_score': self.systems_score,
            'total_saved': self.total_saved,
            'active_habits': self.active_habits,
            'active_goals': self.active_goals,
        }

    def __repr__(self) -> str:
        return f'<ProgressSnapshot {self.user_id} - {self.date}: {self.life_score}>'
