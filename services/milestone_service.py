"""Milestone service functions.

Milestones are fixed checkpoints along a goal's numeric range. They are
checked whenever the goal's current value changes, and once completed they
stay completed even if the metric later moves back across the threshold.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from flask import current_app

from extensions import db
from models import (
    FinancialGoal,
    FitnessGoal,
    GoalMilestone,
    GOAL_TYPE_FINANCIAL,
    GOAL_TYPE_FITNESS,
)
from services.exceptions import InvalidStateError, NotFoundError
from services.goal_progress import GoalDirection, round_half_up

logger = logging.getLogger(__name__)

GOAL_MODELS = {
    GOAL_TYPE_FINANCIAL: FinancialGoal,
    GOAL_TYPE_FITNESS: FitnessGoal,
}


@dataclass(frozen=True)
class MilestoneSpec:
    name: str
    target_value: float
    order: int


def generate_milestone_targets(start: float, target: float, count: int = 4) -> List[MilestoneSpec]:
    """
    Evenly spaced checkpoints from start to target.

    Milestone i of N sits at start + round(range / N * i) and is named after
    its percentage, e.g. "25% Complete". Works for decreasing ranges too.
    """
    if count < 1:
        raise InvalidStateError('Milestone count must be at least 1')

    step = (target - start) / count
    return [
        MilestoneSpec(
            name=f'{round_half_up(i / count * 100)}% Complete',
            target_value=start + round_half_up(step * i),
            order=i,
        )
        for i in range(1, count + 1)
    ]


def _load_goal(goal_id: int, goal_type: str, user_id: Optional[int] = None):
    model = GOAL_MODELS.get(goal_type)
    if model is None:
        raise InvalidStateError(f'Unknown goal type: {goal_type}')

    goal = db.session.get(model, goal_id)
    if goal is None or (user_id is not None and goal.user_id != user_id):
        raise NotFoundError('Goal not found')
    return goal


def _goal_range(goal):
    """(start, current, direction) for either goal kind."""
    if isinstance(goal, FinancialGoal):
        return 0.0, goal.current_amount or 0.0, GoalDirection.INCREASE
    return goal.start_value, goal.current_value, GoalDirection.from_range(goal.start_value, goal.target_value)


def get_milestones(goal_id: int, goal_type: str) -> List[GoalMilestone]:
    return GoalMilestone.query.filter_by(goal_id=goal_id, goal_type=goal_type).order_by(GoalMilestone.order).all()


def create_milestones(goal_id: int, goal_type: str, specs: Sequence[MilestoneSpec],
                      user_id: Optional[int] = None) -> List[GoalMilestone]:
    """Persist custom milestones for a goal."""
    _load_goal(goal_id, goal_type, user_id)

    for index, spec in enumerate(specs):
        db.session.add(GoalMilestone(
            goal_id=goal_id,
            goal_type=goal_type,
            name=spec.name,
            target_value=spec.target_value,
            order=spec.order if spec.order is not None else index,
        ))
    db.session.commit()

    logger.info(f"Created {len(specs)} milestones for {goal_type} goal {goal_id}")
    return get_milestones(goal_id, goal_type)


def generate_milestones(goal_id: int, goal_type: str, count: Optional[int] = None,
                        user_id: Optional[int] = None) -> List[GoalMilestone]:
    """
    Auto-generate evenly spaced milestones for a goal.

    Financial goals run from 0 to the target amount; fitness goals run from
    their start value to their target value in either direction.

    Raises:
        NotFoundError: goal missing or not owned by the user
        InvalidStateError: the goal already has milestones, or count < 1
    """
    goal = _load_goal(goal_id, goal_type, user_id)
    count = current_app.config.get('DEFAULT_MILESTONE_COUNT', 4) if count is None else count

    if GoalMilestone.query.filter_by(goal_id=goal_id, goal_type=goal_type).count() > 0:
        raise InvalidStateError('Milestones already exist for this goal')

    if isinstance(goal, FinancialGoal):
        specs = generate_milestone_targets(0, goal.target_amount, count)
    else:
        specs = generate_milestone_targets(goal.start_value, goal.target_value, count)

    for spec in specs:
        db.session.add(GoalMilestone(
            goal_id=goal_id,
            goal_type=goal_type,
            name=spec.name,
            target_value=spec.target_value,
            order=spec.order,
        ))
    db.session.commit()

    logger.info(f"Auto-generated {count} milestones for {goal_type} goal {goal_id}")
    return get_milestones(goal_id, goal_type)


def check_milestones(goal_id: int, goal_type: str) -> List[GoalMilestone]:
    """
    Complete every open milestone the goal's current value has reached.

    Must run after the goal mutation has committed. Already completed
    milestones are never re-evaluated.

    Returns:
        Milestones completed by this call, in ascending target order
    """
    goal = _load_goal(goal_id, goal_type)
    _, current, direction = _goal_range(goal)

    open_milestones = GoalMilestone.query.filter_by(
        goal_id=goal_id, goal_type=goal_type, is_completed=False
    ).order_by(GoalMilestone.target_value).all()

    now_completed = []
    for milestone in open_milestones:
        if direction.has_reached(current, milestone.target_value):
            milestone.is_completed = True
            milestone.completed_at = datetime.utcnow()
            now_completed.append(milestone)
            logger.info(f"Milestone {milestone.id} completed for {goal_type} goal {goal_id}")

    if now_completed:
        db.session.commit()
    return now_completed


def get_next_milestone(goal_id: int, goal_type: str) -> Optional[GoalMilestone]:
    """Lowest-order milestone not yet completed."""
    return GoalMilestone.query.filter_by(
        goal_id=goal_id, goal_type=goal_type, is_completed=False
    ).order_by(GoalMilestone.order).first()


def _progress_toward(start: float, current: float, threshold: float) -> float:
    span = threshold - start
    if span == 0:
        return 100.0
    return (current - start) / span * 100


def get_milestone_progress(goal_id: int, goal_type: str, user_id: Optional[int] = None) -> Dict:
    """Completed/remaining counts, the next milestone and per-milestone progress."""
    goal = _load_goal(goal_id, goal_type, user_id)
    start, current, direction = _goal_range(goal)
    milestones = get_milestones(goal_id, goal_type)

    completed = len([m for m in milestones if m.is_completed])
    next_milestone = next((m for m in milestones if not m.is_completed), None)

    next_info = None
    if next_milestone is not None:
        if direction is GoalDirection.DECREASE:
            amount_needed = current - next_milestone.target_value
        else:
            amount_needed = next_milestone.target_value - current
        next_info = {
            **next_milestone.to_dict(),
            'amount_needed': amount_needed,
            'progress_to_next': _progress_toward(start, current, next_milestone.target_value),
        }

    return {
        'total': len(milestones),
        'completed': completed,
        'remaining': len(milestones) - completed,
        'next_milestone': next_info,
        'all_milestones': [
            {
                **m.to_dict(),
                'progress': 100.0 if m.is_completed
                else max(0.0, min(100.0, _progress_toward(start, current, m.target_value))),
            }
            for m in milestones
        ],
    }
