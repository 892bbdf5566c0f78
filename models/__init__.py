"""Database models package.

This package contains the SQLAlchemy ORM model definitions for the application.
Each model family lives in its own module (user, habit, goal, life_system,
progress_snapshot, achievement) and is re-exported here for convenience.
"""

# Re-export model classes from individual modules
from .user import User  # noqa: F401
from .user_preferences import UserPreferences  # noqa: F401
from .habit import Habit, HabitCheckIn, STREAK_FREEZE_NOTE  # noqa: F401
from .goal import (  # noqa: F401
    FinancialGoal,
    FitnessGoal,
    FitnessProgress,
    GoalMilestone,
    GOAL_TYPE_FINANCIAL,
    GOAL_TYPE_FITNESS,
    GOAL_TYPES,
)
from .life_system import LifeSystem, SystemAdherence  # noqa: F401
from .progress_snapshot import ProgressSnapshot  # noqa: F401
from .achievement import Achievement, UserAchievement  # noqa: F401

__all__ = [
    "User",
    "UserPreferences",
    "Habit",
    "HabitCheckIn",
    "STREAK_FREEZE_NOTE",
    "FinancialGoal",
    "FitnessGoal",
    "FitnessProgress",
    "GoalMilestone",
    "GOAL_TYPE_FINANCIAL",
    "GOAL_TYPE_FITNESS",
    "GOAL_TYPES",
    "LifeSystem",
    "SystemAdherence",
    "ProgressSnapshot",
    "Achievement",
    "UserAchievement",
]
