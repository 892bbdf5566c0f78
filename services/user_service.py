"""User-related service functions."""
from datetime import date
from typing import Optional

from flask import current_app

from extensions import db
from models import User, UserPreferences
from services.exceptions import NotFoundError
from services.timezone_service import get_user_today as get_today_in_timezone


def create_user(email: str, name: Optional[str] = None, timezone: str = 'UTC', **profile_data) -> User:
    """Create a new user."""
    user = User(
        email=email,
        name=name,
        timezone=timezone,
        **{k: v for k, v in profile_data.items() if v is not None}
    )
    db.session.add(user)
    db.session.commit()
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f'User {user_id} not found')
    return user


def get_user_today(user_id: int) -> date:
    """Today's date in the user's timezone."""
    user = get_user(user_id)
    return get_today_in_timezone(user.timezone)


def get_or_create_preferences(user_id: int) -> UserPreferences:
    """Get user preferences or create default ones (flushed, not committed)."""
    preferences = UserPreferences.query.filter_by(user_id=user_id).first()
    if preferences is None:
        preferences = UserPreferences(
            user_id=user_id,
            streak_freeze_count=current_app.config.get('DEFAULT_STREAK_FREEZES', 2),
        )
        db.session.add(preferences)
        db.session.flush()
        current_app.logger.info(f'Created default preferences for user {user_id}')
    return preferences
