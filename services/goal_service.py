"""Goal-related service functions.

These helpers create goals and apply the mutation events that move a goal's
current value (savings contributions, new fitness measurements). Each event
commits first, then checks milestones, then queues the best-effort
achievement check.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from extensions import db
from models import (
    FinancialGoal,
    FitnessGoal,
    FitnessProgress,
    GoalMilestone,
    GOAL_TYPE_FINANCIAL,
    GOAL_TYPE_FITNESS,
)
from services.achievement_service import queue_achievement_check
from services.exceptions import NotFoundError
from services.goal_progress import (
    GoalProgress,
    STATUS_BEHIND,
    STATUS_COMPLETED,
    STATUS_NEEDS_FOCUS,
    STATUS_ON_TRACK,
    compute_progress,
)
from services.milestone_service import check_milestones, generate_milestones

logger = logging.getLogger(__name__)


@dataclass
class GoalUpdateResult:
    goal: object
    progress: GoalProgress
    completed_milestones: List[GoalMilestone] = field(default_factory=list)


def create_financial_goal(user_id: int,
                          name: str,
                          target_amount: float,
                          current_amount: float = 0.0,
                          goal_type: str = 'SAVINGS',
                          monthly_contribution: float = 0.0,
                          start_date: date = None,
                          target_date: date = None,
                          milestone_count: Optional[int] = None) -> FinancialGoal:
    """Create and persist a financial goal, optionally with auto-generated milestones."""
    goal = FinancialGoal(
        user_id=user_id,
        name=name,
        goal_type=goal_type,
        target_amount=target_amount,
        current_amount=current_amount or 0.0,
        monthly_contribution=monthly_contribution,
        start_date=start_date or date.today(),
        target_date=target_date,
    )
    db.session.add(goal)
    db.session.commit()
    logger.info(f"Financial goal {goal.id} created for user {user_id}")

    if milestone_count:
        generate_milestones(goal.id, GOAL_TYPE_FINANCIAL, milestone_count)
        check_milestones(goal.id, GOAL_TYPE_FINANCIAL)

    queue_achievement_check(user_id)
    return goal


def create_fitness_goal(user_id: int,
                        name: str,
                        start_value: float,
                        target_value: float,
                        current_value: Optional[float] = None,
                        metric_type: str = 'WEIGHT',
                        unit: str = None,
                        start_date: date = None,
                        target_date: date = None,
                        milestone_count: Optional[int] = None) -> FitnessGoal:
    """Create and persist a fitness goal; the goal may rise or fall toward its target."""
    current_value = start_value if current_value is None else current_value
    goal = FitnessGoal(
        user_id=user_id,
        name=name,
        metric_type=metric_type,
        unit=unit,
        start_value=start_value,
        current_value=current_value,
        target_value=target_value,
        start_date=start_date or date.today(),
        target_date=target_date,
    )
    goal.is_achieved = compute_progress(goal).progress >= 100
    db.session.add(goal)
    db.session.commit()
    logger.info(f"Fitness goal {goal.id} created for user {user_id}")

    if milestone_count:
        generate_milestones(goal.id, GOAL_TYPE_FITNESS, milestone_count)
        check_milestones(goal.id, GOAL_TYPE_FITNESS)

    queue_achievement_check(user_id)
    return goal


def _get_user_goal(model, goal_id: int, user_id: int):
    goal = model.query.filter_by(id=goal_id, user_id=user_id).first()
    if goal is None:
        raise NotFoundError('Goal not found')
    return goal


def add_financial_contribution(goal_id: int, user_id: int, amount: float) -> GoalUpdateResult:
    """Add a contribution (negative for a withdrawal) to a financial goal's saved amount."""
    goal = _get_user_goal(FinancialGoal, goal_id, user_id)
    previous_amount = goal.current_amount
    goal.current_amount = (goal.current_amount or 0) + amount
    db.session.commit()
    logger.info(f"Goal {goal_id} amount updated: {previous_amount} -> {goal.current_amount}")

    # Milestones are checked against the committed value
    completed = check_milestones(goal_id, GOAL_TYPE_FINANCIAL)
    queue_achievement_check(user_id)

    return GoalUpdateResult(goal=goal, progress=compute_progress(goal), completed_milestones=completed)


def record_fitness_value(goal_id: int, user_id: int, value: float, notes: str = None) -> GoalUpdateResult:
    """Record a new measurement for a fitness goal."""
    goal = _get_user_goal(FitnessGoal, goal_id, user_id)

    if value != goal.current_value:
        db.session.add(FitnessProgress(fitness_goal_id=goal_id, value=value, notes=notes))

    goal.current_value = value
    progress = compute_progress(goal)
    goal.is_achieved = progress.progress >= 100
    db.session.commit()
    logger.info(f"Fitness goal {goal_id} value recorded: {value} ({progress.progress:.1f}%)")

    completed = check_milestones(goal_id, GOAL_TYPE_FITNESS)
    queue_achievement_check(user_id)

    return GoalUpdateResult(goal=goal, progress=progress, completed_milestones=completed)


def reset_fitness_goal(goal_id: int, user_id: int, new_start_value: Optional[float] = None,
                       new_target_date: date = None) -> FitnessGoal:
    """Restart a fitness goal from a new baseline (the current value by default)."""
    goal = _get_user_goal(FitnessGoal, goal_id, user_id)
    goal.start_value = goal.current_value if new_start_value is None else new_start_value
    goal.start_date = date.today()
    if new_target_date:
        goal.target_date = new_target_date
    goal.is_achieved = False
    db.session.commit()
    logger.info(f"Fitness goal {goal_id} reset to start at {goal.start_value}")
    return goal


def get_financial_summary(user_id: int) -> Dict:
    """Totals and status breakdown over the user's active financial goals."""
    goals = FinancialGoal.query.filter_by(user_id=user_id, is_archived=False, is_paused=False).all()
    total_target = sum(g.target_amount for g in goals)
    total_saved = sum(g.current_amount or 0 for g in goals)
    statuses = [compute_progress(g).status for g in goals]

    return {
        'total_goals': len(goals),
        'total_target': total_target,
        'total_saved': total_saved,
        'overall_progress': (total_saved / total_target) * 100 if total_target > 0 else 0,
        'goals_by_status': {
            'on_track': statuses.count(STATUS_ON_TRACK),
            'needs_focus': statuses.count(STATUS_NEEDS_FOCUS),
            'behind': statuses.count(STATUS_BEHIND),
            'completed': statuses.count(STATUS_COMPLETED),
        },
        'goals': [g.to_dict() for g in goals],
    }
