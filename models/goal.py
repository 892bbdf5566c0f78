"""Goal model definitions.
Financial goals track a saved amount toward a target; fitness goals track a
metric that may rise or fall toward its target. Milestones are shared by both
kinds and keyed by (goal_id, goal_type).
"""
from datetime import datetime, date
from extensions import db

GOAL_TYPE_FINANCIAL = 'FINANCIAL'
GOAL_TYPE_FITNESS = 'FITNESS'
GOAL_TYPES = (GOAL_TYPE_FINANCIAL, GOAL_TYPE_FITNESS)


class FinancialGoal(db.Model):
    __tablename__ = 'financial_goal'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    name = db.Column(db.String(100), nullable=False)
    goal_type = db.Column(db.String(30), default='SAVINGS')  # SAVINGS, EMERGENCY_FUND, INVESTMENT, DEBT_PAYOFF, ...
    target_amount = db.Column(db.Float, nullable=False)
    current_amount = db.Column(db.Float, default=0.0, nullable=False)
    monthly_contribution = db.Column(db.Float, default=0.0)

    start_date = db.Column(db.Date, default=date.today)
    target_date = db.Column(db.Date)
    notes = db.Column(db.Text)

    is_paused = db.Column(db.Boolean, default=False, nullable=False)
    is_archived = db.Column(db.Boolean, default=False, nullable=False)

    def to_dict(self) -> dict:
        # Progress and status are derived on read, never stored
        from services.goal_progress import compute_progress
        result = compute_progress(self)
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'goal_type': self.goal_type,
            'target_amount': self.target_amount,
            'current_amount': self.current_amount,
            'monthly_contribution': self.monthly_contribution,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'target_date': self.target_date.isoformat() if self.target_date else None,
            'notes': self.notes,
            'is_paused': self.is_paused,
            'is_archived': self.is_archived,
            'progress': result.progress,
            'status': result.status,
        }

    def __repr__(self) -> str:
        return f'<FinancialGoal {self.user_id} - {self.name}: {self.current_amount}/{self.target_amount}>'


class FitnessGoal(db.Model):
    __tablename__ = 'fitness_goal'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    name = db.Column(db.String(100), nullable=False)
    metric_type = db.Column(db.String(30), default='WEIGHT')  # WEIGHT, BODY_FAT, RUNNING_DISTANCE, ...
    unit = db.Column(db.String(20))

    start_value = db.Column(db.Float, nullable=False)
    current_value = db.Column(db.Float, nullable=False)
    target_value = db.Column(db.Float, nullable=False)

    start_date = db.Column(db.Date, default=date.today)
    target_date = db.Column(db.Date)
    notes = db.Column(db.Text)

    is_achieved = db.Column(db.Boolean, default=False, nullable=False)

    progress_history = db.relationship('FitnessProgress', backref='goal', lazy='dynamic',
                                       cascade='all, delete-orphan',
                                       order_by='FitnessProgress.recorded_at.desc()')

    def to_dict(self) -> dict:
        from services.goal_progress import compute_progress
        result = compute_progress(self)
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'metric_type': self.metric_type,
            'unit': self.unit,
            'start_value': self.start_value,
            'current_value': self.current_value,
            'target_value': self.target_value,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'target_date': self.target_date.isoformat() if self.target_date else None,
            'is_achieved': self.is_achieved,
            'direction': result.direction.value,
            'progress': result.progress,
            'status': result.status,
        }

    def __repr__(self) -> str:
        return f'<FitnessGoal {self.user_id} - {self.name}: {self.start_value} -> {self.target_value}>'


class FitnessProgress(db.Model):
    __tablename__ = 'fitness_progress'

    id = db.Column(db.Integer, primary_key=True)
    fitness_goal_id = db.Column(db.Integer, db.ForeignKey('fitness_goal.id'), nullable=False, index=True)
    value = db.Column(db.Float, nullable=False)
    notes = db.Column(db.Text)
    recorded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'fitness_goal_id': self.fitness_goal_id,
            'value': self.value,
            'notes': self.notes,
            'recorded_at': self.recorded_at.isoformat() if self.recorded_at else None,
        }

    def __repr__(self) -> str:
        return f'<FitnessProgress {self.fitness_goal_id}: {self.value}>'


class GoalMilestone(db.Model):
    __tablename__ = 'goal_milestone'
    __table_args__ = (
        db.Index('ix_goal_milestone_goal', 'goal_id', 'goal_type'),
    )

    id = db.Column(db.Integer, primary_key=True)
    goal_id = db.Column(db.Integer, nullable=False)
    goal_type = db.Column(db.String(20), nullable=False)  # FINANCIAL or FITNESS
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    name = db.Column(db.String(100), nullable=False)
    target_value = db.Column(db.Float, nullable=False)
    order = db.Column(db.Integer, nullable=False, default=0)

    # Completion is permanent once set
    is_completed = db.Column(db.Boolean, default=False, nullable=False)
    completed_at = db.Column(db.DateTime)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'goal_id': self.goal_id,
            'goal_type': self.goal_type,
            'name': self.name,
            'target_value': self.target_value,
            'order': self.order,
            'is_completed': self.is_completed,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

    def __repr__(self) -> str:
        return f'<GoalMilestone {self.goal_type}:{self.goal_id} #{self.order} - {self.target_value}>'
