"""Life System model definitions.
A life system is a behavioral rule ("no phone after 10pm") with one adherence
log per day.
"""
from datetime import datetime
from extensions import db


class LifeSystem(db.Model):
    __tablename__ = 'life_system'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(30), default='PRODUCTIVITY')
    adherence_target = db.Column(db.Integer, default=80, nullable=False)  # percent
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    adherence_logs = db.relationship('SystemAdherence', backref='system', lazy='dynamic',
                                     cascade='all, delete-orphan',
                                     order_by='SystemAdherence.date.desc()')

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'adherence_target': self.adherence_target,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f'<LifeSystem {self.user_id} - {self.name}>'


class SystemAdherence(db.Model):
    __tablename__ = 'system_adherence'
    __table_args__ = (
        db.UniqueConstraint('system_id', 'date', name='uq_system_adherence_day'),
    )

    id = db.Column(db.Integer, primary_key=True)
    system_id = db.Column(db.Integer, db.ForeignKey('life_system.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    adhered = db.Column(db.Boolean, nullable=False)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'system_id': self.system_id,
            'date': self.date.isoformat() if self.date else None,
            'adhered': self.adhered,
            'notes': self.notes,
        }

    def __repr__(self) -> str:
        return f'<SystemAdherence {self.system_id} - {self.date}: {self.adhered}>'
