"""
Unit tests for best-effort side effects and the snapshot scheduler.
"""
import logging
import threading

import pytest
import schedule
from models import HabitCheckIn, ProgressSnapshot
from services import achievement_service, background_tasks, streak_service
from services.background_tasks import BackgroundTaskProcessor, defer_best_effort, run_best_effort


def _boom(*args):
    raise RuntimeError('evaluator unavailable')


class TestRunBestEffort:

    def test_returns_result(self, app):
        assert run_best_effort(lambda x: x * 2, 21) == 42

    def test_failure_is_logged_and_suppressed(self, app, caplog):
        with caplog.at_level(logging.ERROR, logger='background_tasks'):
            assert run_best_effort(_boom, 1) is None
        assert 'evaluator unavailable' in caplog.text


class TestDeferBestEffort:

    def test_inline_when_sync(self, app):
        calls = []
        assert defer_best_effort(calls.append, 'ran') is None
        assert calls == ['ran']

    def test_async_runs_on_executor(self, app):
        app.config['ACHIEVEMENT_CHECK_ASYNC'] = True
        calls = []
        try:
            future = defer_best_effort(calls.append, 'ran')
            future.result(timeout=5)
            assert calls == ['ran']

            # Failures on the worker are swallowed too
            assert defer_best_effort(_boom).result(timeout=5) is None
        finally:
            background_tasks.shutdown_executor(app)

    def test_executor_created_once_across_threads(self, app):
        start = threading.Barrier(8)
        seen = []

        def grab():
            start.wait()
            seen.append(background_tasks._get_executor(app))

        threads = [threading.Thread(target=grab) for _ in range(8)]
        try:
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=5)

            assert len(seen) == 8
            assert all(executor is seen[0] for executor in seen)
        finally:
            background_tasks.shutdown_executor(app)

        assert background_tasks.EXECUTOR_KEY not in app.extensions

    def test_failed_achievement_check_keeps_check_in(self, db_session, test_user, test_habit, monkeypatch, caplog):
        monkeypatch.setattr(achievement_service, 'check_and_unlock', _boom)

        with caplog.at_level(logging.ERROR, logger='background_tasks'):
            check_in = streak_service.log_check_in(test_habit.id, test_user.id)

        assert check_in.completed is True
        assert HabitCheckIn.query.filter_by(habit_id=test_habit.id).count() == 1
        assert 'evaluator unavailable' in caplog.text


class TestBackgroundTaskProcessor:

    @pytest.fixture
    def processor(self, app):
        processor = BackgroundTaskProcessor(app)
        yield processor
        schedule.clear()

    def test_jobs_are_scheduled(self, processor):
        assert len(schedule.get_jobs()) == 2

    def test_daily_snapshots(self, db_session, processor, test_user, other_user, financial_goal):
        assert processor.create_daily_snapshots() == 2
        assert ProgressSnapshot.query.count() == 2

        # Running again the same day overwrites
        assert processor.create_daily_snapshots() == 2
        assert ProgressSnapshot.query.count() == 2

    def test_achievement_sweep(self, db_session, processor, test_user, financial_goal):
        assert processor.sweep_achievements() == 2
        assert processor.sweep_achievements() == 0
