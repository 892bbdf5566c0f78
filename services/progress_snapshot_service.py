"""Daily Life Score snapshots and the trend views built on them."""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from extensions import db
from models import ProgressSnapshot
from models.progress_snapshot import SCORE_FIELDS
from services.goal_progress import round_half_up
from services.life_score_service import compute_life_score
from services.persistence import upsert
from services.user_service import get_user_today

logger = logging.getLogger(__name__)


def create_snapshot(user_id: int, today: Optional[date] = None) -> ProgressSnapshot:
    """
    Compute the user's Life Score and store it as the snapshot for the day.

    Calling this again on the same day overwrites the existing row, so the
    table never holds more than one snapshot per user per day.
    """
    today = today or get_user_today(user_id)
    breakdown = compute_life_score(user_id, today=today)
    scores = breakdown.scores

    snapshot = upsert(
        ProgressSnapshot,
        ('user_id', 'date'),
        {
            'user_id': user_id,
            'date': today,
            'life_score': breakdown.life_score,
            'finance_score': scores.finance,
            'fitness_score': scores.fitness,
            'habits_score': scores.habits,
            'systems_score': scores.systems,
            'total_saved': breakdown.total_saved,
            'active_habits': breakdown.active_habits,
            'active_goals': breakdown.active_goals,
            'updated_at': datetime.utcnow(),
        },
    )
    db.session.commit()

    logger.info(f"Snapshot for user {user_id} on {today}: life score {breakdown.life_score}")
    return snapshot


def get_snapshot_for_day(user_id: int, day: date) -> Optional[ProgressSnapshot]:
    return ProgressSnapshot.query.filter_by(user_id=user_id, date=day).first()


def get_history(user_id: int, days: int = 30, today: Optional[date] = None) -> List[ProgressSnapshot]:
    """Snapshots from `days` days ago up to now, oldest first."""
    today = today or get_user_today(user_id)
    start = today - timedelta(days=days)
    return ProgressSnapshot.query.filter(
        ProgressSnapshot.user_id == user_id,
        ProgressSnapshot.date >= start,
    ).order_by(ProgressSnapshot.date.asc()).all()


def _average(snapshots: List[ProgressSnapshot], attr: str) -> int:
    if not snapshots:
        return 0
    return round_half_up(sum(getattr(s, attr) for s in snapshots) / len(snapshots))


def get_trends(user_id: int, days: int = 30, today: Optional[date] = None) -> Dict:
    """Direction and size of the Life Score change over the window."""
    snapshots = get_history(user_id, days, today)
    if len(snapshots) < 2:
        return {'trend': 'insufficient_data', 'change': 0}

    current_score = snapshots[-1].life_score
    change = current_score - snapshots[0].life_score

    if change > 0:
        trend = 'up'
    elif change < 0:
        trend = 'down'
    else:
        trend = 'stable'

    return {
        'trend': trend,
        'change': change,
        'current_score': current_score,
        'weekly_average': _average(snapshots[-7:], 'life_score'),
        'monthly_average': _average(snapshots, 'life_score'),
        'data_points': len(snapshots),
    }


def _period_snapshots(user_id: int, start: date, end: date) -> List[ProgressSnapshot]:
    return ProgressSnapshot.query.filter(
        ProgressSnapshot.user_id == user_id,
        ProgressSnapshot.date >= start,
        ProgressSnapshot.date <= end,
    ).order_by(ProgressSnapshot.date.asc()).all()


def compare_periods(user_id: int, period1_start: date, period1_end: date,
                    period2_start: date, period2_end: date) -> Dict:
    """Average scores over two date ranges (inclusive) and the change from the first to the second."""
    period1 = _period_snapshots(user_id, period1_start, period1_end)
    period2 = _period_snapshots(user_id, period2_start, period2_end)

    period1_averages = {attr: _average(period1, attr) for attr in SCORE_FIELDS}
    period2_averages = {attr: _average(period2, attr) for attr in SCORE_FIELDS}

    return {
        'period1': {
            'start': period1_start.isoformat(),
            'end': period1_end.isoformat(),
            'data_points': len(period1),
            'averages': period1_averages,
        },
        'period2': {
            'start': period2_start.isoformat(),
            'end': period2_end.isoformat(),
            'data_points': len(period2),
            'averages': period2_averages,
        },
        'comparison': {
            attr: period2_averages[attr] - period1_averages[attr] for attr in SCORE_FIELDS
        },
    }
