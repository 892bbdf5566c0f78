"""Goal progress calculation.

Pure functions that turn a goal's numeric fields into a progress percentage
(always within [0, 100]) and a derived status tag. Degenerate inputs resolve to
a defined value instead of raising: a zero financial target scores 0, a
zero-range fitness goal scores 100.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from flask import current_app, has_app_context

from models import FinancialGoal, FitnessGoal

STATUS_COMPLETED = 'COMPLETED'
STATUS_ON_TRACK = 'ON_TRACK'
STATUS_NEEDS_FOCUS = 'NEEDS_FOCUS'
STATUS_BEHIND = 'BEHIND'


class GoalDirection(Enum):
    """Which way a goal's metric has to move to reach its target."""
    INCREASE = 'increase'
    DECREASE = 'decrease'
    NONE = 'none'

    @classmethod
    def from_range(cls, start: float, target: float) -> 'GoalDirection':
        if target > start:
            return cls.INCREASE
        if target < start:
            return cls.DECREASE
        return cls.NONE

    def has_reached(self, current: float, threshold: float) -> bool:
        """True when `current` is at or past `threshold` in this direction."""
        if self is GoalDirection.INCREASE:
            return current >= threshold
        if self is GoalDirection.DECREASE:
            return current <= threshold
        # A zero-range goal only counts the target value itself
        return current == threshold


@dataclass(frozen=True)
class StatusThresholds:
    on_track: float = 75.0
    needs_focus: float = 40.0

    @classmethod
    def from_config(cls, config) -> 'StatusThresholds':
        return cls(
            on_track=float(config.get('GOAL_STATUS_ON_TRACK', cls.on_track)),
            needs_focus=float(config.get('GOAL_STATUS_NEEDS_FOCUS', cls.needs_focus)),
        )


@dataclass(frozen=True)
class GoalProgress:
    progress: float
    status: str
    direction: GoalDirection


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity, so 2.5 -> 3 and -2.5 -> -2."""
    return int(math.floor(value + 0.5))


def clamp_percentage(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def financial_progress(current_amount: float, target_amount: float) -> float:
    """Percentage of a savings target reached, capped at 100."""
    if not target_amount or target_amount <= 0:
        return 0.0
    return clamp_percentage((current_amount or 0) / target_amount * 100)


def fitness_progress(start_value: float, current_value: float, target_value: float) -> float:
    """Percentage of the way from start to target, for goals that rise or fall."""
    total_change = target_value - start_value
    if total_change == 0:
        return 100.0
    return clamp_percentage((current_value - start_value) / total_change * 100)


def _default_thresholds() -> StatusThresholds:
    if has_app_context():
        return StatusThresholds.from_config(current_app.config)
    return StatusThresholds()


def derive_status(progress: float, thresholds: Optional[StatusThresholds] = None) -> str:
    thresholds = thresholds or _default_thresholds()
    if progress >= 100:
        return STATUS_COMPLETED
    if progress >= thresholds.on_track:
        return STATUS_ON_TRACK
    if progress >= thresholds.needs_focus:
        return STATUS_NEEDS_FOCUS
    return STATUS_BEHIND


def compute_progress(goal, thresholds: Optional[StatusThresholds] = None) -> GoalProgress:
    """Progress, status and direction for a financial or fitness goal."""
    if isinstance(goal, FinancialGoal):
        progress = financial_progress(goal.current_amount, goal.target_amount)
        direction = GoalDirection.INCREASE
    elif isinstance(goal, FitnessGoal):
        progress = fitness_progress(goal.start_value, goal.current_value, goal.target_value)
        direction = GoalDirection.from_range(goal.start_value, goal.target_value)
    else:
        raise TypeError(f'Unsupported goal type: {type(goal).__name__}')

    return GoalProgress(
        progress=progress,
        status=derive_status(progress, thresholds),
        direction=direction,
    )
