"""Achievement catalog and unlock evaluation.

The catalog is static and seeded into the database. Each achievement carries a
declarative (criteria_type, criteria_value) rule evaluated against a snapshot
of the user's state. Unlocks are insert-only and unique per (user,
achievement), so an achievement is awarded at most once even when two checks
race.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from flask import current_app

from extensions import db
from models import (
    Achievement,
    FinancialGoal,
    FitnessGoal,
    Habit,
    LifeSystem,
    UserAchievement,
)
from services.background_tasks import defer_best_effort
from services.goal_progress import financial_progress
from services.persistence import insert_ignore, upsert

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementRule:
    code: str
    name: str
    description: str
    icon: str
    category: str
    criteria_type: str
    criteria_value: float
    points: int

    def as_row(self) -> Dict:
        return {
            'code': self.code,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'category': self.category,
            'criteria_type': self.criteria_type,
            'criteria_value': self.criteria_value,
            'points': self.points,
        }


ACHIEVEMENTS = [
    # General
    AchievementRule('FIRST_GOAL', 'First Step', 'Create your first goal',
                    'target', 'GENERAL', 'goal_count', 1, 10),
    AchievementRule('GOAL_MASTER', 'Goal Master', 'Create 10 goals',
                    'trophy', 'GENERAL', 'goal_count', 10, 50),

    # Habits
    AchievementRule('STREAK_7', 'Week Warrior', 'Maintain a 7-day streak',
                    'flame', 'HABITS', 'streak', 7, 20),
    AchievementRule('STREAK_30', 'Monthly Master', 'Maintain a 30-day streak',
                    'dumbbell', 'HABITS', 'streak', 30, 50),
    AchievementRule('STREAK_100', 'Century Club', 'Maintain a 100-day streak',
                    'award', 'HABITS', 'streak', 100, 100),
    AchievementRule('HABIT_STARTER', 'Habit Starter', 'Create your first habit',
                    'check-circle', 'HABITS', 'habit_count', 1, 10),
    AchievementRule('HABIT_COLLECTOR', 'Habit Collector', 'Track 5 habits',
                    'clipboard-list', 'HABITS', 'habit_count', 5, 30),

    # Finance
    AchievementRule('FIRST_SAVE', 'First Savings', 'Save your first amount',
                    'piggy-bank', 'FINANCE', 'savings', 1, 10),
    AchievementRule('SAVER_10K', 'Smart Saver', 'Save 10,000 total',
                    'landmark', 'FINANCE', 'total_saved', 10000, 30),
    AchievementRule('SAVER_100K', 'Wealth Builder', 'Save 100,000 total',
                    'gem', 'FINANCE', 'total_saved', 100000, 100),
    AchievementRule('GOAL_COMPLETE', 'Goal Crusher', 'Complete your first financial goal',
                    'party-popper', 'FINANCE', 'goal_completed', 1, 50),
    AchievementRule('BUDGET_MASTER', 'Budget Master', 'Stay under budget for a month',
                    'bar-chart-3', 'FINANCE', 'under_budget', 1, 40),

    # Fitness
    AchievementRule('FITNESS_START', 'Fitness Journey', 'Create your first fitness goal',
                    'footprints', 'FITNESS', 'fitness_goal', 1, 10),
    AchievementRule('FITNESS_COMPLETE', 'Fit Achiever', 'Complete a fitness goal',
                    'medal', 'FITNESS', 'fitness_completed', 1, 50),

    # Systems
    AchievementRule('SYSTEM_START', 'Systems Thinker', 'Create your first life system',
                    'settings', 'SYSTEMS', 'system_count', 1, 10),
    AchievementRule('SYSTEM_ADHERENCE', 'System Follower', 'Maintain 80% adherence for 30 days',
                    'trending-up', 'SYSTEMS', 'system_adherence', 80, 50),

    # Life Score
    AchievementRule('SCORE_50', 'Balanced Life', 'Reach a Life Score of 50',
                    'star', 'GENERAL', 'life_score', 50, 30),
    AchievementRule('SCORE_75', 'Life Optimizer', 'Reach a Life Score of 75',
                    'sparkles', 'GENERAL', 'life_score', 75, 50),
    AchievementRule('SCORE_90', 'Life Master', 'Reach a Life Score of 90',
                    'crown', 'GENERAL', 'life_score', 90, 100),
]


@dataclass
class UserState:
    """Everything the unlock rules look at, gathered once per check."""
    goal_count: int = 0
    habit_count: int = 0
    max_streak: int = 0
    total_saved: float = 0.0
    completed_financial_goals: int = 0
    fitness_goal_count: int = 0
    completed_fitness_goals: int = 0
    system_count: int = 0
    # Adherence of systems with a full window of logs
    full_window_adherences: List[float] = field(default_factory=list)
    life_score: Optional[int] = None


CRITERIA: Dict[str, Callable[[UserState, float], bool]] = {
    'goal_count': lambda state, value: state.goal_count >= value,
    'streak': lambda state, value: state.max_streak >= value,
    'habit_count': lambda state, value: state.habit_count >= value,
    'savings': lambda state, value: state.total_saved > 0,
    'total_saved': lambda state, value: state.total_saved >= value,
    'goal_completed': lambda state, value: state.completed_financial_goals >= value,
    'fitness_goal': lambda state, value: state.fitness_goal_count >= value,
    'fitness_completed': lambda state, value: state.completed_fitness_goals >= value,
    'system_count': lambda state, value: state.system_count >= value,
    'system_adherence': lambda state, value: any(a >= value for a in state.full_window_adherences),
    'life_score': lambda state, value: state.life_score is not None and state.life_score >= value,
    # Budget bookkeeping is not tracked here
    'under_budget': lambda state, value: False,
}


def evaluate_rule(criteria_type: str, criteria_value: float, state: UserState) -> bool:
    predicate = CRITERIA.get(criteria_type)
    if predicate is None:
        logger.warning(f"Unknown achievement criteria type '{criteria_type}'")
        return False
    return predicate(state, criteria_value)


def seed_achievements(commit: bool = True) -> int:
    """Insert or refresh every catalog entry, keyed on its code."""
    logger.info('Seeding achievements')
    for rule in ACHIEVEMENTS:
        upsert(Achievement, ('code',), rule.as_row())
    if commit:
        db.session.commit()
    logger.info(f'{len(ACHIEVEMENTS)} achievements seeded')
    return len(ACHIEVEMENTS)


def load_user_state(user_id: int, include_life_score: bool = True) -> UserState:
    """Gather the counters the unlock rules need, over all of the user's goals and habits."""
    from services.life_system_service import adherence_percentage, get_window_logs
    from services.user_service import get_user_today

    financial_goals = FinancialGoal.query.filter_by(user_id=user_id).all()
    fitness_goals = FitnessGoal.query.filter_by(user_id=user_id).all()
    habits = Habit.query.filter_by(user_id=user_id).all()
    systems = LifeSystem.query.filter_by(user_id=user_id, is_active=True).all()

    window_days = current_app.config.get('ADHERENCE_WINDOW_DAYS', 30)
    today = get_user_today(user_id)
    full_window_adherences = []
    for system in systems:
        logs = get_window_logs(system.id, today, window_days)
        if len(logs) >= window_days:
            full_window_adherences.append(adherence_percentage(logs))

    state = UserState(
        goal_count=len(financial_goals) + len(fitness_goals),
        habit_count=len(habits),
        max_streak=max((h.current_streak or 0 for h in habits), default=0),
        total_saved=sum(g.current_amount or 0 for g in financial_goals),
        completed_financial_goals=len([
            g for g in financial_goals if financial_progress(g.current_amount, g.target_amount) >= 100
        ]),
        fitness_goal_count=len(fitness_goals),
        completed_fitness_goals=len([g for g in fitness_goals if g.is_achieved]),
        system_count=len(systems),
        full_window_adherences=full_window_adherences,
    )

    if include_life_score:
        from services.life_score_service import compute_life_score
        state.life_score = compute_life_score(user_id, today=today).life_score

    return state


def _unlocked_achievement_ids(user_id: int) -> set:
    return set(db.session.execute(
        db.select(UserAchievement.achievement_id).filter_by(user_id=user_id)
    ).scalars().all())


def check_and_unlock(user_id: int) -> List[UserAchievement]:
    """
    Evaluate every locked achievement for the user and unlock those now satisfied.

    Returns:
        UserAchievement rows created by this call; empty when nothing new unlocked
    """
    if Achievement.query.count() == 0:
        seed_achievements(commit=False)

    unlocked_ids = _unlocked_achievement_ids(user_id)
    pending = [a for a in Achievement.query.order_by(Achievement.id).all() if a.id not in unlocked_ids]
    if not pending:
        return []

    needs_score = any(a.criteria_type == 'life_score' for a in pending)
    state = load_user_state(user_id, include_life_score=needs_score)

    newly_unlocked_ids = []
    for achievement in pending:
        if not evaluate_rule(achievement.criteria_type, achievement.criteria_value, state):
            continue
        inserted = insert_ignore(
            UserAchievement,
            ('user_id', 'achievement_id'),
            {
                'user_id': user_id,
                'achievement_id': achievement.id,
                'unlocked_at': datetime.utcnow(),
                'notified': False,
            },
        )
        # A concurrent check may already have inserted it
        if inserted:
            newly_unlocked_ids.append(achievement.id)
            logger.info(f"Achievement {achievement.code} unlocked for user {user_id}")

    db.session.commit()

    if not newly_unlocked_ids:
        return []
    return UserAchievement.query.filter(
        UserAchievement.user_id == user_id,
        UserAchievement.achievement_id.in_(newly_unlocked_ids),
    ).all()


def queue_achievement_check(user_id: int):
    """Run check_and_unlock after the caller's commit; failures are logged, never raised."""
    return defer_best_effort(check_and_unlock, user_id)


def get_total_points(user_id: int) -> int:
    total = db.session.execute(
        db.select(db.func.coalesce(db.func.sum(Achievement.points), 0))
        .select_from(Achievement)
        .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
    ).scalar_one()
    return int(total)


def get_all_for_user(user_id: int) -> List[Dict]:
    """Whole catalog with each entry's unlock status for the user."""
    achievements = Achievement.query.order_by(Achievement.category, Achievement.points).all()
    unlocks = {ua.achievement_id: ua for ua in UserAchievement.query.filter_by(user_id=user_id).all()}

    result = []
    for achievement in achievements:
        unlock = unlocks.get(achievement.id)
        result.append({
            **achievement.to_dict(),
            'unlocked': unlock is not None,
            'unlocked_at': unlock.unlocked_at.isoformat() if unlock else None,
        })
    return result


def get_user_achievements(user_id: int) -> List[UserAchievement]:
    return UserAchievement.query.filter_by(user_id=user_id).order_by(UserAchievement.unlocked_at.desc()).all()


def get_unnotified(user_id: int) -> List[UserAchievement]:
    return UserAchievement.query.filter_by(user_id=user_id, notified=False).all()


def mark_notified(ids: Iterable[int]) -> int:
    ids = list(ids)
    if not ids:
        return 0
    updated = UserAchievement.query.filter(UserAchievement.id.in_(ids)).update(
        {'notified': True}, synchronize_session=False
    )
    db.session.commit()
    return updated
