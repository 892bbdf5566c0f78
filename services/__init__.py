"""Business logic service layer.

This package groups the scoring engine: goal progress, streaks, milestones,
the Life Score aggregate, daily snapshots and achievements. Every mutating
operation commits its own change and then queues the achievement check.
"""

from services.exceptions import (  # noqa: F401
    LifeScoreError,
    NotFoundError,
    InvalidStateError,
    OutOfFreezesError,
    AlreadyLoggedError,
)
from services.user_service import create_user, get_user_today  # noqa: F401
from services.goal_progress import compute_progress, GoalDirection, GoalProgress  # noqa: F401
from services.streak_service import (  # noqa: F401
    create_habit,
    log_check_in,
    log_quantity,
    recompute_streak,
    use_streak_freeze,
)
from services.milestone_service import generate_milestones, check_milestones  # noqa: F401
from services.goal_service import (  # noqa: F401
    create_financial_goal,
    create_fitness_goal,
    add_financial_contribution,
    record_fitness_value,
)
from services.life_system_service import create_life_system, log_adherence  # noqa: F401
from services.life_score_service import compute_life_score, ScoreWeights  # noqa: F401
from services.progress_snapshot_service import create_snapshot, get_trends  # noqa: F401
from services.achievement_service import (  # noqa: F401
    check_and_unlock,
    get_total_points,
    queue_achievement_check,
    seed_achievements,
)


__all__ = [
    "LifeScoreError",
    "NotFoundError",
    "InvalidStateError",
    "OutOfFreezesError",
    "AlreadyLoggedError",
    "create_user",
    "get_user_today",
    "compute_progress",
    "GoalDirection",
    "GoalProgress",
    "create_habit",
    "log_check_in",
    "log_quantity",
    "recompute_streak",
    "use_streak_freeze",
    "generate_milestones",
    "check_milestones",
    "create_financial_goal",
    "create_fitness_goal",
    "add_financial_contribution",
    "record_fitness_value",
    "create_life_system",
    "log_adherence",
    "compute_life_score",
    "ScoreWeights",
    "create_snapshot",
    "get_trends",
    "check_and_unlock",
    "get_total_points",
    "queue_achievement_check",
    "seed_achievements",
]
