"""Background Tasks Service.
Runs best-effort side effects after a primary change has committed, and the
scheduled daily Life Score snapshot.
"""
import atexit
import logging
import threading
import time
import weakref
from concurrent.futures import ThreadPoolExecutor

import schedule
from flask import current_app

from extensions import db


logger = logging.getLogger('background_tasks')

EXECUTOR_KEY = 'best_effort_executor'

_executor_lock = threading.Lock()
# Apps holding an executor, weakly referenced
_apps_with_executor = weakref.WeakSet()


def run_best_effort(task, *args, **kwargs):
    """
    Run a side effect whose failure must not affect the caller.

    The primary operation has already committed; any exception raised here is
    logged, the session's pending changes are discarded, and None is returned.
    """
    task_name = getattr(task, '__name__', repr(task))
    try:
        return task(*args, **kwargs)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Best-effort task {task_name} failed: {e}", exc_info=True)
        return None


def _get_executor(app) -> ThreadPoolExecutor:
    executor = app.extensions.get(EXECUTOR_KEY)
    if executor is not None:
        return executor
    with _executor_lock:
        executor = app.extensions.get(EXECUTOR_KEY)
        if executor is None:
            executor = ThreadPoolExecutor(
                max_workers=app.config.get('ACHIEVEMENT_WORKERS', 2),
                thread_name_prefix='best-effort',
            )
            app.extensions[EXECUTOR_KEY] = executor
            _apps_with_executor.add(app)
    return executor


def defer_best_effort(task, *args, **kwargs):
    """
    Queue a best-effort task to run after the current request's commit.

    With ACHIEVEMENT_CHECK_ASYNC the task runs on a worker thread inside a fresh
    application context and is never awaited; otherwise it runs inline. Either
    way failures are only logged.
    """
    app = current_app._get_current_object()
    if not app.config.get('ACHIEVEMENT_CHECK_ASYNC', False):
        run_best_effort(task, *args, **kwargs)
        return None

    def _run_in_context():
        with app.app_context():
            run_best_effort(task, *args, **kwargs)

    try:
        return _get_executor(app).submit(_run_in_context)
    except RuntimeError as e:
        # Executor already shut down
        logger.error(f"Could not queue best-effort task: {e}", exc_info=True)
        return None


def shutdown_executor(app, wait: bool = True) -> None:
    _apps_with_executor.discard(app)
    executor = app.extensions.pop(EXECUTOR_KEY, None)
    if executor is not None:
        executor.shutdown(wait=wait)


@atexit.register
def _shutdown_all_executors() -> None:
    for app in list(_apps_with_executor):
        shutdown_executor(app)


class BackgroundTaskProcessor:

    def __init__(self, app=None):
        self.app = app

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize with Flask app"""
        self.app = app

        # Schedule tasks
        schedule.every().day.at(app.config.get('SNAPSHOT_TIME', '23:55')).do(self.create_daily_snapshots)
        schedule.every().sunday.at("03:00").do(self.sweep_achievements)

    def run_scheduler(self):
        """Run the background scheduler (should be called in a separate process/thread)"""
        with self.app.app_context():
            logger.info("Background task scheduler started")

            while True:
                try:
                    schedule.run_pending()
                    time.sleep(30)
                except Exception as e:
                    logger.error(f"Background scheduler error: {e}", exc_info=True)
                    time.sleep(30)

    def create_daily_snapshots(self):
        """Persist today's Life Score snapshot for every user."""
        from models import User
        from services.progress_snapshot_service import create_snapshot

        logger.info("Running daily snapshot job...")
        created = 0
        with self.app.app_context():
            user_ids = [user_id for (user_id,) in db.session.execute(db.select(User.id)).all()]
            logger.debug(f"Found {len(user_ids)} users to snapshot.")

            for user_id in user_ids:
                try:
                    create_snapshot(user_id)
                    created += 1
                except Exception as e:
                    db.session.rollback()
                    logger.error(f"Error creating snapshot for user {user_id}: {e}", exc_info=True)

        logger.info(f"Created {created} daily snapshots")
        return created

    def sweep_achievements(self):
        """Re-evaluate achievements for every user, catching unlocks missed by failed checks."""
        from models import User
        from services.achievement_service import check_and_unlock

        logger.info("Running achievement sweep...")
        unlocked = 0
        with self.app.app_context():
            user_ids = [user_id for (user_id,) in db.session.execute(db.select(User.id)).all()]
            for user_id in user_ids:
                result = run_best_effort(check_and_unlock, user_id)
                unlocked += len(result or [])

        if unlocked > 0:
            logger.info(f"Achievement sweep unlocked {unlocked} achievement(s)")
        else:
            logger.debug("Achievement sweep unlocked nothing.")
        return unlocked


# Standalone function to run the background processor
def run_background_tasks(app):
    """Run background tasks - should be called in a separate process"""
    processor = BackgroundTaskProcessor(app)
    processor.run_scheduler()
