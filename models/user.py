"""User model definition.
This module defines the User ORM model and any user-related helper methods.
"""
from datetime import datetime

from extensions import db

class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Preferences
    timezone = db.Column(db.String(50), default='UTC')
    currency = db.Column(db.String(10), default='INR')

    # Relationships
    habits = db.relationship('Habit', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    financial_goals = db.relationship('FinancialGoal', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    fitness_goals = db.relationship('FitnessGoal', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    life_systems = db.relationship('LifeSystem', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    snapshots = db.relationship('ProgressSnapshot', backref='user', lazy='dynamic', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'timezone': self.timezone,
            'currency': self.currency,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<User {self.email}>'
