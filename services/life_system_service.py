"""Life system service functions.

Adherence is logged once per (system, day) and the rolling adherence
percentage is recomputed on read over a trailing window.
"""
import logging
from datetime import date, timedelta
from typing import Dict, Iterable, Optional

from flask import current_app

from extensions import db
from models import LifeSystem, SystemAdherence
from services.exceptions import NotFoundError
from services.persistence import upsert
from services.timezone_service import get_user_today

logger = logging.getLogger(__name__)


def adherence_percentage(logs: Iterable[SystemAdherence]) -> float:
    """Share of logs marked adhered, as an unrounded percentage (0 when empty)."""
    logs = list(logs)
    if not logs:
        return 0.0
    adhered = len([log for log in logs if log.adhered])
    return adhered / len(logs) * 100


def calculate_adherence(logs: Iterable[SystemAdherence]) -> int:
    return round(adherence_percentage(logs))


def _window_days() -> int:
    return current_app.config.get('ADHERENCE_WINDOW_DAYS', 30)


def get_window_logs(system_id: int, today: date, window_days: Optional[int] = None):
    """Adherence logs inside the trailing window ending today, newest first."""
    since = today - timedelta(days=window_days or _window_days())
    return SystemAdherence.query.filter(
        SystemAdherence.system_id == system_id,
        SystemAdherence.date >= since,
        SystemAdherence.date <= today,
    ).order_by(SystemAdherence.date.desc()).all()


def _get_user_system(system_id: int, user_id: int) -> LifeSystem:
    system = LifeSystem.query.filter_by(id=system_id, user_id=user_id).first()
    if system is None:
        raise NotFoundError('System not found')
    return system


def create_life_system(user_id: int, name: str, description: str = None,
                       category: str = 'PRODUCTIVITY', adherence_target: int = 80) -> LifeSystem:
    """Create and persist a life system for the user."""
    system = LifeSystem(
        user_id=user_id,
        name=name,
        description=description,
        category=category,
        adherence_target=adherence_target or 80,
    )
    db.session.add(system)
    db.session.commit()

    from services.achievement_service import queue_achievement_check
    queue_achievement_check(user_id)
    return system


def log_adherence(system_id: int, user_id: int, adhered: bool,
                  day: Optional[date] = None, notes: str = None) -> Dict:
    """Record (or overwrite) whether the system was followed on a day."""
    system = _get_user_system(system_id, user_id)
    today = get_user_today(system.user.timezone)

    adherence_log = upsert(
        SystemAdherence,
        ('system_id', 'date'),
        {'system_id': system_id, 'date': day or today, 'adhered': adhered, 'notes': notes},
    )
    db.session.commit()
    logger.info(f"Adherence logged for system {system_id} on {adherence_log.date}: {adhered}")

    from services.achievement_service import queue_achievement_check
    queue_achievement_check(user_id)

    return {
        'adherence_log': adherence_log,
        'current_adherence': calculate_adherence(get_window_logs(system_id, today)),
    }


def get_current_adherence(system_id: int, today: Optional[date] = None) -> int:
    """Rounded adherence percentage over the trailing window."""
    system = db.session.get(LifeSystem, system_id)
    if system is None:
        raise NotFoundError('System not found')
    today = today or get_user_today(system.user.timezone)
    return calculate_adherence(get_window_logs(system_id, today))
