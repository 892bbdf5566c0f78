"""User Preferences model definition.
Holds per-user engine settings such as the remaining streak freeze quota.
"""
from datetime import datetime
from extensions import db

class UserPreferences(db.Model):
    __tablename__ = 'user_preferences'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Remaining streak freezes; decremented atomically when one is used
    streak_freeze_count = db.Column(db.Integer, default=2, nullable=False)

    achievement_notifications = db.Column(db.Boolean, default=True, nullable=False)

    # Relationships
    user = db.relationship('User', backref=db.backref('preferences', uselist=False, cascade='all, delete-orphan'))

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'streak_freeze_count': self.streak_freeze_count,
            'achievement_notifications': self.achievement_notifications,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<UserPreferences {self.user_id} - freezes: {self.streak_freeze_count}>'
