"""
Integration tests for complete user workflows through the service layer.
"""
import pytest
from datetime import timedelta
from models import ProgressSnapshot, UserAchievement
from services import (
    achievement_service,
    goal_service,
    life_system_service,
    progress_snapshot_service,
    streak_service,
    user_service,
)


class TestLifeScoreWorkflow:
    """Walks one user through habits, goals, systems, a snapshot and achievements."""

    def test_full_day(self, db_session, today):
        user = user_service.create_user('flow@example.com', name='Flow', timezone='UTC')

        # Step 1: A week of check-ins
        habit = streak_service.create_habit(user.id, 'Meditate')
        for offset in range(6, -1, -1):
            streak_service.log_check_in(habit.id, user.id, day=today - timedelta(days=offset))
        db_session.refresh(habit)
        assert habit.current_streak == 7
        assert habit.longest_streak == 7

        # Step 2: A savings goal with milestones, then a contribution
        goal = goal_service.create_financial_goal(user.id, 'Car', 20000, milestone_count=4)
        result = goal_service.add_financial_contribution(goal.id, user.id, 10000)
        assert [m.target_value for m in result.completed_milestones] == [5000, 10000]
        assert result.progress.progress == pytest.approx(50.0)

        # Step 3: A fitness goal reached in one measurement
        fitness = goal_service.create_fitness_goal(user.id, 'Run 10k', start_value=5, target_value=10, unit='km')
        result = goal_service.record_fitness_value(fitness.id, user.id, 10)
        assert result.goal.is_achieved is True

        # Step 4: A life system followed today
        system = life_system_service.create_life_system(user.id, 'Inbox zero')
        assert life_system_service.log_adherence(system.id, user.id, True)['current_adherence'] == 100

        # Step 5: The daily snapshot
        snapshot = progress_snapshot_service.create_snapshot(user.id)
        assert snapshot.finance_score == 50
        assert snapshot.fitness_score == 0  # achieved goals leave the domain
        assert snapshot.habits_score == 23
        assert snapshot.systems_score == 100
        assert snapshot.life_score == 35  # 20 + 0 + 4.6 + 10
        assert snapshot.total_saved == 10000
        assert snapshot.active_habits == 1
        assert snapshot.active_goals == 1

        # Step 6: Achievements were unlocked along the way, once each
        codes = {ua.achievement.code for ua in achievement_service.get_user_achievements(user.id)}
        assert codes == {
            'HABIT_STARTER', 'STREAK_7', 'FIRST_GOAL', 'FIRST_SAVE', 'SAVER_10K',
            'FITNESS_START', 'FITNESS_COMPLETE', 'SYSTEM_START',
        }
        assert achievement_service.get_total_points(user.id) == 150
        assert achievement_service.check_and_unlock(user.id) == []

    def test_freeze_saves_streak(self, db_session, today):
        user = user_service.create_user('freeze@example.com')
        habit = streak_service.create_habit(user.id, 'Journal')

        streak_service.log_check_in(habit.id, user.id, day=today - timedelta(days=3))
        streak_service.log_check_in(habit.id, user.id, day=today - timedelta(days=2))
        streak_service.log_check_in(habit.id, user.id, day=today)
        db_session.refresh(habit)
        assert habit.current_streak == 1

        streak_service.use_streak_freeze(habit.id, user.id, day=today - timedelta(days=1))
        db_session.refresh(habit)
        assert habit.current_streak == 4
        assert habit.longest_streak == 4

    def test_snapshot_history_builds_trend(self, db_session, test_user, financial_goal, today):
        progress_snapshot_service.create_snapshot(test_user.id, today=today - timedelta(days=1))
        goal_service.add_financial_contribution(financial_goal.id, test_user.id, 5000)
        progress_snapshot_service.create_snapshot(test_user.id, today=today)

        trends = progress_snapshot_service.get_trends(test_user.id)
        assert trends['trend'] == 'up'
        assert trends['change'] == 20  # finance 25% -> 75%
        assert ProgressSnapshot.query.filter_by(user_id=test_user.id).count() == 2


class TestBestEffortAchievements:

    def test_evaluator_failure_does_not_undo_progress(self, db_session, test_user, financial_goal, monkeypatch):
        def broken_check(user_id):
            raise RuntimeError('catalog unavailable')

        monkeypatch.setattr(achievement_service, 'check_and_unlock', broken_check)

        result = goal_service.add_financial_contribution(financial_goal.id, test_user.id, 7500)
        assert result.progress.progress == 100.0

        db_session.expire_all()
        assert financial_goal.current_amount == 10000
        assert UserAchievement.query.count() == 0
