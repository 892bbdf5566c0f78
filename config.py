import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    # Security settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///life_score.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Life Score weights table: 'default' (finance/fitness/habits/systems) or 'light' (no systems)
    LIFE_SCORE_WEIGHTS = os.environ.get('LIFE_SCORE_WEIGHTS', 'default').lower()

    # Scoring windows
    HABIT_STREAK_TARGET_DAYS = int(os.environ.get('HABIT_STREAK_TARGET_DAYS', 30))  # streak that scores 100%
    ADHERENCE_WINDOW_DAYS = int(os.environ.get('ADHERENCE_WINDOW_DAYS', 30))

    # Goal status thresholds (percent)
    GOAL_STATUS_ON_TRACK = float(os.environ.get('GOAL_STATUS_ON_TRACK', 75))
    GOAL_STATUS_NEEDS_FOCUS = float(os.environ.get('GOAL_STATUS_NEEDS_FOCUS', 40))

    # Milestones and streak freezes
    DEFAULT_MILESTONE_COUNT = int(os.environ.get('DEFAULT_MILESTONE_COUNT', 4))
    DEFAULT_STREAK_FREEZES = int(os.environ.get('DEFAULT_STREAK_FREEZES', 2))

    # Achievement evaluation runs after the triggering commit
    ACHIEVEMENT_CHECK_ASYNC = os.environ.get('ACHIEVEMENT_CHECK_ASYNC', 'True').lower() == 'true'
    ACHIEVEMENT_WORKERS = int(os.environ.get('ACHIEVEMENT_WORKERS', 2))

    # Daily snapshot schedule (server local time, HH:MM)
    SNAPSHOT_TIME = os.environ.get('SNAPSHOT_TIME', '23:55')

    # Logging
    LOG_TO_STDOUT = os.environ.get('LOG_TO_STDOUT', 'False').lower() == 'true'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Debug mode - automatically set based on environment
    @property
    def DEBUG(self):
        env = os.environ.get('FLASK_ENV', 'development').lower()
        return env == 'development'

    # Testing mode
    TESTING = False

class ProductionConfig(Config):
    DEBUG = False


class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    ACHIEVEMENT_CHECK_ASYNC = False
    LIFE_SCORE_WEIGHTS = 'default'

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': Config
}

def get_config():
    """Get configuration based on environment variable"""
    env = os.environ.get('FLASK_ENV', 'development').lower()
    return config.get(env, config['default'])
