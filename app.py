from flask import Flask
from config import get_config
from extensions import db, migrate
import logging
from logging.handlers import RotatingFileHandler
import os
import sys


def _configure_logging(app):
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    formatter = logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    if app.config.get('LOG_TO_STDOUT'):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(level)
        app.logger.addHandler(stream_handler)
    elif not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = RotatingFileHandler('logs/life_score.log', maxBytes=10240, backupCount=10)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        # Service modules log through their own loggers
        for name in ('services', 'background_tasks'):
            logging.getLogger(name).addHandler(file_handler)

    app.logger.setLevel(level)
    logging.getLogger('services').setLevel(level)


def create_app(config_name=None):
    app = Flask(__name__)

    # Get configuration based on environment or passed parameter
    if config_name:
        from config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models to register them with SQLAlchemy
    import models  # noqa: F401

    _configure_logging(app)
    app.logger.info('Life Score engine startup')

    return app
