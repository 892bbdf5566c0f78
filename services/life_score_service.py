"""Life Score aggregation.

Each domain (finance, fitness, habits, systems) is scored as the average of
its components' progress or adherence, rounded and clamped to [0, 100]. An
empty domain scores 0 and still counts in the weighted sum. The weight table
is an immutable value passed in by the caller; it is never mutated globally.
"""
import logging
import math
from dataclasses import dataclass, asdict
from datetime import date
from typing import Dict, Iterable, Optional

from flask import current_app

from models import FinancialGoal, FitnessGoal, Habit, LifeSystem
from services.goal_progress import (
    clamp_percentage,
    financial_progress,
    fitness_progress,
    round_half_up,
)
from services.life_system_service import adherence_percentage, get_window_logs
from services.user_service import get_user_today

logger = logging.getLogger(__name__)

DOMAINS = ('finance', 'fitness', 'habits', 'systems')


@dataclass(frozen=True)
class ScoreWeights:
    """Per-domain weights; the weights present must sum to 1.0."""
    finance: float
    fitness: float
    habits: float
    systems: float = 0.0

    def __post_init__(self):
        weights = self.as_dict()
        if any(weight < 0 for weight in weights.values()):
            raise ValueError(f'Score weights must be non-negative: {weights}')
        if not math.isclose(sum(weights.values()), 1.0, abs_tol=1e-9):
            raise ValueError(f'Score weights must sum to 1.0, got {sum(weights.values())}')

    def as_dict(self) -> Dict[str, float]:
        return {domain: getattr(self, domain) for domain in DOMAINS}


DEFAULT_WEIGHTS = ScoreWeights(finance=0.40, fitness=0.30, habits=0.20, systems=0.10)
LIGHT_WEIGHTS = ScoreWeights(finance=0.45, fitness=0.30, habits=0.25)

WEIGHT_TABLES = {
    'default': DEFAULT_WEIGHTS,
    'light': LIGHT_WEIGHTS,
}


def weights_from_config(config) -> ScoreWeights:
    name = config.get('LIFE_SCORE_WEIGHTS', 'default')
    try:
        return WEIGHT_TABLES[name]
    except KeyError:
        raise ValueError(f"Unknown LIFE_SCORE_WEIGHTS table '{name}'")


@dataclass(frozen=True)
class DomainScores:
    finance: int = 0
    fitness: int = 0
    habits: int = 0
    systems: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class LifeScoreBreakdown:
    life_score: int
    scores: DomainScores
    weights: ScoreWeights
    total_saved: float = 0.0
    active_habits: int = 0
    active_goals: int = 0

    def to_dict(self) -> Dict:
        return {
            'life_score': self.life_score,
            'breakdown': {
                domain: {'score': getattr(self.scores, domain), 'weight': getattr(self.weights, domain)}
                for domain in DOMAINS
            },
            'total_saved': self.total_saved,
            'active_habits': self.active_habits,
            'active_goals': self.active_goals,
        }


def average_score(values: Iterable[float]) -> int:
    """Rounded mean of percentages, clamped to [0, 100]; 0 for an empty domain."""
    values = [clamp_percentage(value) for value in values]
    if not values:
        return 0
    return int(clamp_percentage(round_half_up(sum(values) / len(values))))


def finance_score(goals: Iterable[FinancialGoal]) -> int:
    return average_score(financial_progress(g.current_amount, g.target_amount) for g in goals)


def fitness_score(goals: Iterable[FitnessGoal]) -> int:
    return average_score(fitness_progress(g.start_value, g.current_value, g.target_value) for g in goals)


def habits_score(habits: Iterable[Habit], streak_target_days: int = 30) -> int:
    """A habit scores by how close its current streak is to the target streak length."""
    return average_score(
        min((habit.current_streak or 0) / streak_target_days * 100, 100) for habit in habits
    )


def systems_score(adherences: Iterable[float]) -> int:
    return average_score(adherences)


def aggregate_life_score(scores: DomainScores, weights: ScoreWeights) -> int:
    """Weighted sum of domain scores, rounded and kept within [0, 100]."""
    total = sum(
        clamp_percentage(getattr(scores, domain)) * getattr(weights, domain)
        for domain in DOMAINS
    )
    return int(clamp_percentage(round_half_up(total)))


def _default_weights() -> ScoreWeights:
    return weights_from_config(current_app.config)


def compute_life_score(user_id: int,
                       weights: Optional[ScoreWeights] = None,
                       today: Optional[date] = None) -> LifeScoreBreakdown:
    """
    Compute the user's current Life Score from live data.

    Args:
        user_id: User to score
        weights: Weight table to apply (defaults to the configured table)
        today: Day the adherence window ends on (defaults to the user's today)

    Returns:
        LifeScoreBreakdown with the aggregate, per-domain scores and counts
    """
    weights = weights or _default_weights()
    today = today or get_user_today(user_id)
    config = current_app.config

    financial_goals = FinancialGoal.query.filter_by(user_id=user_id, is_archived=False, is_paused=False).all()
    fitness_goals = FitnessGoal.query.filter_by(user_id=user_id, is_achieved=False).all()
    habits = Habit.query.filter_by(user_id=user_id, is_active=True).all()
    systems = LifeSystem.query.filter_by(user_id=user_id, is_active=True).all()

    window_days = config.get('ADHERENCE_WINDOW_DAYS', 30)
    adherences = [adherence_percentage(get_window_logs(system.id, today, window_days)) for system in systems]

    scores = DomainScores(
        finance=finance_score(financial_goals),
        fitness=fitness_score(fitness_goals),
        habits=habits_score(habits, config.get('HABIT_STREAK_TARGET_DAYS', 30)),
        systems=systems_score(adherences),
    )
    life_score = aggregate_life_score(scores, weights)

    logger.debug(f"Life score for user {user_id}: {life_score} {scores.as_dict()}")
    return LifeScoreBreakdown(
        life_score=life_score,
        scores=scores,
        weights=weights,
        total_saved=sum(goal.current_amount or 0 for goal in financial_goals),
        active_habits=len(habits),
        active_goals=len(financial_goals) + len(fitness_goals),
    )
