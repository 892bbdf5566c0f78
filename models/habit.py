"""Habit and HabitCheckIn model definitions.
A habit owns a day-granular check-in history; streak fields are written only
by the streak service.
"""
from datetime import datetime
from extensions import db

# Note stamped on the synthetic check-in created by a streak freeze
STREAK_FREEZE_NOTE = '❄️ Streak Freeze Used'

HABIT_FREQUENCIES = ('DAILY', 'WEEKLY', 'WEEKDAYS', 'WEEKENDS', 'CUSTOM')


class Habit(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    frequency = db.Column(db.String(20), default='DAILY', nullable=False)
    target_count = db.Column(db.Integer, default=1, nullable=False)

    # Quantity habits (e.g. glasses of water)
    is_quantity = db.Column(db.Boolean, default=False, nullable=False)
    quantity_target = db.Column(db.Float)
    quantity_unit = db.Column(db.String(20))

    # Streak state
    current_streak = db.Column(db.Integer, default=0, nullable=False)
    longest_streak = db.Column(db.Integer, default=0, nullable=False)
    streak_freeze_used = db.Column(db.Date)

    is_active = db.Column(db.Boolean, default=True, nullable=False)

    check_ins = db.relationship('HabitCheckIn', backref='habit', lazy='dynamic',
                                cascade='all, delete-orphan', order_by='HabitCheckIn.date.desc()')

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'frequency': self.frequency,
            'target_count': self.target_count,
            'is_quantity': self.is_quantity,
            'quantity_target': self.quantity_target,
            'quantity_unit': self.quantity_unit,
            'current_streak': self.current_streak,
            'longest_streak': self.longest_streak,
            'streak_freeze_used': self.streak_freeze_used.isoformat() if self.streak_freeze_used else None,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f'<Habit {self.user_id} - {self.name}: {self.current_streak}/{self.longest_streak}>'


class HabitCheckIn(db.Model):
    __tablename__ = 'habit_check_in'
    __table_args__ = (
        db.UniqueConstraint('habit_id', 'date', name='uq_habit_check_in_day'),
    )

    id = db.Column(db.Integer, primary_key=True)
    habit_id = db.Column(db.Integer, db.ForeignKey('habit.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    completed = db.Column(db.Boolean, default=True, nullable=False)
    quantity = db.Column(db.Float)
    notes = db.Column(db.Text)
    skipped = db.Column(db.Boolean, default=False, nullable=False)

    @property
    def is_freeze(self) -> bool:
        return self.notes == STREAK_FREEZE_NOTE

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'habit_id': self.habit_id,
            'date': self.date.isoformat() if self.date else None,
            'completed': self.completed,
            'quantity': self.quantity,
            'notes': self.notes,
            'skipped': self.skipped,
            'is_freeze': self.is_freeze,
        }

    def __repr__(self) -> str:
        return f'<HabitCheckIn {self.habit_id} - {self.date}: {self.completed}>'
