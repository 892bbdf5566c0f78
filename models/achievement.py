"""Achievement model definitions.
Achievement rows are a seeded catalog; UserAchievement rows are insert-only
unlock records, unique per (user, achievement).
"""
from datetime import datetime
from extensions import db


class Achievement(db.Model):
    __tablename__ = 'achievement'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255))
    icon = db.Column(db.String(50))
    category = db.Column(db.String(20), nullable=False)  # GENERAL, HABITS, FINANCE, FITNESS, SYSTEMS

    # Declarative unlock rule, e.g. ('streak', 30)
    criteria_type = db.Column(db.String(30), nullable=False)
    criteria_value = db.Column(db.Float, nullable=False)
    points = db.Column(db.Integer, default=0, nullable=False)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'category': self.category,
            'criteria': {'type': self.criteria_type, 'value': self.criteria_value},
            'points': self.points,
        }

    def __repr__(self) -> str:
        return f'<Achievement {self.code} ({self.points} pts)>'


class UserAchievement(db.Model):
    __tablename__ = 'user_achievement'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'achievement_id', name='uq_user_achievement'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    achievement_id = db.Column(db.Integer, db.ForeignKey('achievement.id'), nullable=False)
    unlocked_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    notified = db.Column(db.Boolean, default=False, nullable=False)

    achievement = db.relationship('Achievement')
    user = db.relationship('User', backref=db.backref('achievements', lazy='dynamic', cascade='all, delete-orphan'))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'achievement': self.achievement.to_dict() if self.achievement else None,
            'unlocked_at': self.unlocked_at.isoformat() if self.unlocked_at else None,
            'notified': self.notified,
        }

    def __repr__(self) -> str:
        return f'<UserAchievement {self.user_id} - {self.achievement_id}>'
