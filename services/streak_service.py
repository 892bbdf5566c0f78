"""Habit streak service functions.

Streaks are always recomputed from the complete completed check-in history of
a habit. The longest streak only ever grows.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import Habit, HabitCheckIn, UserPreferences, STREAK_FREEZE_NOTE
from services.achievement_service import queue_achievement_check
from services.exceptions import AlreadyLoggedError, NotFoundError, OutOfFreezesError
from services.persistence import upsert
from services.timezone_service import get_user_today
from services.user_service import get_or_create_preferences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakResult:
    current_streak: int
    longest_streak: int


def calculate_current_streak(completed_dates: Iterable[date], today: date) -> int:
    """
    Count consecutive days ending at today (or yesterday).

    Walks the completed days newest first with a cursor starting at today; a
    day within one day of the cursor extends the streak and becomes the new
    cursor, anything further back ends the walk.
    """
    streak = 0
    cursor = today
    for day in sorted(set(completed_dates), reverse=True):
        if (cursor - day).days <= 1:
            streak += 1
            cursor = day
        else:
            break
    return streak


def _get_user_habit(habit_id: int, user_id: int) -> Habit:
    habit = Habit.query.filter_by(id=habit_id, user_id=user_id).first()
    if habit is None:
        raise NotFoundError('Habit not found')
    return habit


def _habit_today(habit: Habit) -> date:
    return get_user_today(habit.user.timezone if habit.user else 'UTC')


def create_habit(user_id: int, name: str, description: str = None, frequency: str = 'DAILY',
                 target_count: int = 1, is_quantity: bool = False, quantity_target: float = None,
                 quantity_unit: str = None) -> Habit:
    """Create and persist a habit for the user."""
    habit = Habit(
        user_id=user_id,
        name=name,
        description=description,
        frequency=frequency,
        target_count=target_count,
        is_quantity=is_quantity,
        quantity_target=quantity_target,
        quantity_unit=quantity_unit,
    )
    db.session.add(habit)
    db.session.commit()
    logger.info(f"Habit {habit.id} created for user {user_id}")

    queue_achievement_check(user_id)
    return habit


def recompute_streak(habit_id: int, today: Optional[date] = None, commit: bool = True) -> StreakResult:
    """Recompute and store a habit's current and longest streak."""
    habit = db.session.get(Habit, habit_id)
    if habit is None:
        raise NotFoundError('Habit not found')

    # The full history is required; a partial read yields a wrong streak
    db.session.flush()
    completed_dates = db.session.execute(
        db.select(HabitCheckIn.date)
        .filter_by(habit_id=habit_id, completed=True)
        .order_by(HabitCheckIn.date.desc())
    ).scalars().all()

    current = calculate_current_streak(completed_dates, today or _habit_today(habit))
    habit.current_streak = current
    habit.longest_streak = max(habit.longest_streak or 0, current)

    if commit:
        db.session.commit()
    logger.debug(f"Habit {habit_id} streak recomputed: current={current}, longest={habit.longest_streak}")
    return StreakResult(current_streak=current, longest_streak=habit.longest_streak)


def log_check_in(habit_id: int,
                 user_id: int,
                 day: Optional[date] = None,
                 completed: bool = True,
                 quantity: Optional[float] = None,
                 notes: Optional[str] = None,
                 skipped: bool = False) -> HabitCheckIn:
    """
    Record (or overwrite) the check-in for one habit on one day.

    Args:
        habit_id: Habit being checked in
        user_id: Owner of the habit
        day: Calendar day of the check-in (defaults to today in the user's timezone)
        completed: Whether the habit was performed
        quantity: Amount for quantity habits
        notes: Free-form notes
        skipped: Marks a deliberately skipped day

    Returns:
        The stored HabitCheckIn
    """
    habit = _get_user_habit(habit_id, user_id)
    today = _habit_today(habit)
    day = day or today

    check_in = upsert(
        HabitCheckIn,
        ('habit_id', 'date'),
        {
            'habit_id': habit_id,
            'date': day,
            'completed': completed,
            'quantity': quantity,
            'notes': notes,
            'skipped': skipped,
        },
    )
    recompute_streak(habit_id, today=today, commit=False)
    db.session.commit()

    logger.info(f"Habit {habit_id} logged for {day}: completed={check_in.completed}")
    queue_achievement_check(user_id)
    return check_in


def log_quantity(habit_id: int, user_id: int, quantity: float, day: Optional[date] = None) -> HabitCheckIn:
    """Record a quantity for a quantity habit; the day counts as completed once the target is met."""
    habit = _get_user_habit(habit_id, user_id)
    if not habit.is_quantity:
        raise NotFoundError('Habit not found or not a quantity habit')

    if habit.quantity_target:
        completed = quantity >= habit.quantity_target
    else:
        completed = quantity > 0

    today = _habit_today(habit)
    check_in = upsert(
        HabitCheckIn,
        ('habit_id', 'date'),
        {'habit_id': habit_id, 'date': day or today, 'quantity': quantity, 'completed': completed},
    )
    recompute_streak(habit_id, today=today, commit=False)
    db.session.commit()

    queue_achievement_check(user_id)
    return check_in


def use_streak_freeze(habit_id: int, user_id: int, day: Optional[date] = None) -> HabitCheckIn:
    """
    Spend one streak freeze to mark a day as completed without performing the habit.

    The synthetic check-in, the quota decrement and the habit's freeze stamp
    are committed together or not at all.

    Raises:
        NotFoundError: habit missing or not owned by the user
        OutOfFreezesError: no freezes left
        AlreadyLoggedError: the day already has a check-in
    """
    habit = _get_user_habit(habit_id, user_id)
    today = _habit_today(habit)
    freeze_day = day or today

    preferences = get_or_create_preferences(user_id)
    if preferences.streak_freeze_count <= 0:
        raise OutOfFreezesError('No streak freezes available')

    existing = HabitCheckIn.query.filter_by(habit_id=habit_id, date=freeze_day).first()
    if existing is not None:
        raise AlreadyLoggedError('Already logged for this date')

    try:
        check_in = HabitCheckIn(
            habit_id=habit_id,
            date=freeze_day,
            completed=True,
            notes=STREAK_FREEZE_NOTE,
            skipped=False,
        )
        db.session.add(check_in)

        # Conditional decrement so two concurrent freezes cannot overdraw the quota
        result = db.session.execute(
            update(UserPreferences)
            .where(UserPreferences.user_id == user_id, UserPreferences.streak_freeze_count > 0)
            .values(streak_freeze_count=UserPreferences.streak_freeze_count - 1)
        )
        if result.rowcount == 0:
            raise OutOfFreezesError('No streak freezes available')

        habit.streak_freeze_used = freeze_day
        db.session.flush()
        recompute_streak(habit_id, today=today, commit=False)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AlreadyLoggedError('Already logged for this date')
    except Exception:
        db.session.rollback()
        raise

    db.session.refresh(preferences)
    logger.info(f"Streak freeze used for habit {habit_id} on {freeze_day}; "
                f"{preferences.streak_freeze_count} freezes left")

    queue_achievement_check(user_id)
    return check_in


def get_habit_stats(habit_id: int, user_id: int) -> Dict:
    """Completion rate, weekly breakdown and quantity statistics for a habit."""
    habit = _get_user_habit(habit_id, user_id)
    check_ins = habit.check_ins.all()  # newest first

    total_days = len(check_ins)
    completed_days = len([c for c in check_ins if c.completed])
    completion_rate = (completed_days / total_days) * 100 if total_days > 0 else 0

    # Weeks start on Sunday
    weekly_stats = {}
    for check_in in check_ins:
        week_start = check_in.date - timedelta(days=(check_in.date.weekday() + 1) % 7)
        stats = weekly_stats.setdefault(week_start.isoformat(), {'completed': 0, 'total': 0})
        stats['total'] += 1
        if check_in.completed:
            stats['completed'] += 1

    quantity_stats = None
    if habit.is_quantity:
        quantities = [c.quantity or 0 for c in check_ins]
        quantity_stats = {
            'total': sum(quantities),
            'average': sum(quantities) / len(quantities) if quantities else 0,
            'max': max(quantities, default=0),
            'min': min(quantities) if quantities else 0,
        }

    return {
        'habit': habit.to_dict(),
        'current_streak': habit.current_streak,
        'longest_streak': habit.longest_streak,
        'total_days': total_days,
        'completed_days': completed_days,
        'completion_rate': completion_rate,
        'weekly_stats': [
            {
                'week': week,
                **stats,
                'rate': (stats['completed'] / stats['total']) * 100 if stats['total'] > 0 else 0,
            }
            for week, stats in list(weekly_stats.items())[:8]
        ],
        'quantity_stats': quantity_stats,
    }


def deactivate_habit(habit_id: int, user_id: int) -> Habit:
    """Soft-deactivate a habit; its history and streaks are kept."""
    habit = _get_user_habit(habit_id, user_id)
    habit.is_active = False
    db.session.commit()
    logger.info(f"Habit {habit_id} deactivated")
    return habit


def reactivate_habit(habit_id: int, user_id: int) -> Habit:
    habit = _get_user_habit(habit_id, user_id)
    habit.is_active = True
    db.session.commit()
    logger.info(f"Habit {habit_id} reactivated")
    return habit
