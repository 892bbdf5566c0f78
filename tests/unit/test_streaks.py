"""
Unit tests for habit check-ins, streaks and streak freezes.
"""
import pytest
from datetime import timedelta
from models import HabitCheckIn, UserPreferences, STREAK_FREEZE_NOTE
from services import achievement_service, streak_service
from services.exceptions import AlreadyLoggedError, NotFoundError, OutOfFreezesError
from services.streak_service import calculate_current_streak


def _days(today, *offsets):
    return [today - timedelta(days=offset) for offset in offsets]


class TestCalculateCurrentStreak:
    """Test cases for the streak walk."""

    def test_gap_ends_streak(self, today):
        assert calculate_current_streak(_days(today, 0, 1, 3), today) == 2

    def test_no_check_ins(self, today):
        assert calculate_current_streak([], today) == 0

    def test_streak_ending_yesterday_is_live(self, today):
        assert calculate_current_streak(_days(today, 1, 2, 3), today) == 3

    def test_streak_ending_two_days_ago_is_broken(self, today):
        assert calculate_current_streak(_days(today, 2, 3, 4), today) == 0

    def test_duplicate_days_count_once(self, today):
        assert calculate_current_streak(_days(today, 0, 0, 1), today) == 2


class TestLogCheckIn:
    """Test cases for logging check-ins."""

    def test_first_check_in(self, db_session, test_user, test_habit, today):
        check_in = streak_service.log_check_in(test_habit.id, test_user.id)
        assert check_in.date == today
        assert check_in.completed is True

        db_session.refresh(test_habit)
        assert test_habit.current_streak == 1
        assert test_habit.longest_streak == 1

    def test_extends_existing_run(self, db_session, test_user, test_habit, today, add_check_ins):
        add_check_ins(test_habit, _days(today, 1, 2))
        streak_service.log_check_in(test_habit.id, test_user.id, day=today)

        db_session.refresh(test_habit)
        assert test_habit.current_streak == 3

    def test_same_day_overwrites(self, db_session, test_user, test_habit, today):
        streak_service.log_check_in(test_habit.id, test_user.id, notes='done')
        streak_service.log_check_in(test_habit.id, test_user.id, completed=False, notes='missed')

        check_ins = HabitCheckIn.query.filter_by(habit_id=test_habit.id).all()
        assert len(check_ins) == 1
        assert check_ins[0].completed is False
        assert check_ins[0].notes == 'missed'

        db_session.refresh(test_habit)
        assert test_habit.current_streak == 0
        assert test_habit.longest_streak == 1

    def test_longest_streak_never_decreases(self, db_session, test_user, test_habit):
        test_habit.longest_streak = 10
        db_session.commit()

        streak_service.log_check_in(test_habit.id, test_user.id)

        db_session.refresh(test_habit)
        assert test_habit.current_streak == 1
        assert test_habit.longest_streak == 10

    def test_other_users_habit(self, db_session, other_user, test_habit):
        with pytest.raises(NotFoundError):
            streak_service.log_check_in(test_habit.id, other_user.id)

    def test_missing_habit(self, db_session, test_user):
        with pytest.raises(NotFoundError):
            streak_service.log_check_in(9999, test_user.id)


class TestLogQuantity:

    def test_target_met(self, db_session, test_user, quantity_habit):
        check_in = streak_service.log_quantity(quantity_habit.id, test_user.id, 8)
        assert check_in.completed is True
        assert check_in.quantity == 8

    def test_target_not_met(self, db_session, test_user, quantity_habit):
        check_in = streak_service.log_quantity(quantity_habit.id, test_user.id, 3)
        assert check_in.completed is False

        db_session.refresh(quantity_habit)
        assert quantity_habit.current_streak == 0

    def test_not_a_quantity_habit(self, db_session, test_user, test_habit):
        with pytest.raises(NotFoundError):
            streak_service.log_quantity(test_habit.id, test_user.id, 3)


class TestStreakFreeze:
    """Test cases for streak freezes."""

    def test_freeze_bridges_gap(self, db_session, test_user, test_habit, today, add_check_ins):
        add_check_ins(test_habit, _days(today, 0, 2))
        streak_service.recompute_streak(test_habit.id, today=today)
        assert test_habit.current_streak == 1

        check_in = streak_service.use_streak_freeze(test_habit.id, test_user.id, day=today - timedelta(days=1))

        assert check_in.completed is True
        assert check_in.notes == STREAK_FREEZE_NOTE
        assert check_in.is_freeze

        db_session.refresh(test_habit)
        assert test_habit.current_streak == 3
        assert test_habit.streak_freeze_used == today - timedelta(days=1)

        preferences = UserPreferences.query.filter_by(user_id=test_user.id).one()
        assert preferences.streak_freeze_count == 1

    def test_freeze_unlocks_streak_achievement(self, db_session, test_user, test_habit, today, add_check_ins):
        add_check_ins(test_habit, _days(today, 0, 2, 3, 4, 5, 6))
        streak_service.recompute_streak(test_habit.id, today=today)

        streak_service.use_streak_freeze(test_habit.id, test_user.id, day=today - timedelta(days=1))

        codes = {ua.achievement.code for ua in achievement_service.get_user_achievements(test_user.id)}
        assert 'STREAK_7' in codes

    def test_day_already_logged(self, db_session, test_user, test_habit, today, add_check_ins):
        add_check_ins(test_habit, [today])

        with pytest.raises(AlreadyLoggedError):
            streak_service.use_streak_freeze(test_habit.id, test_user.id, day=today)

        preferences = UserPreferences.query.filter_by(user_id=test_user.id).one()
        assert preferences.streak_freeze_count == 2

    def test_out_of_freezes(self, db_session, test_user, test_habit, today):
        db_session.add(UserPreferences(user_id=test_user.id, streak_freeze_count=0))
        db_session.commit()

        with pytest.raises(OutOfFreezesError):
            streak_service.use_streak_freeze(test_habit.id, test_user.id)

        assert HabitCheckIn.query.filter_by(habit_id=test_habit.id).count() == 0
        db_session.refresh(test_habit)
        assert test_habit.streak_freeze_used is None

    def test_out_of_freezes_is_invalid_state(self):
        from services.exceptions import InvalidStateError
        assert issubclass(OutOfFreezesError, InvalidStateError)
        assert issubclass(AlreadyLoggedError, InvalidStateError)

    def test_quota_runs_out(self, db_session, test_user, test_habit, today):
        streak_service.use_streak_freeze(test_habit.id, test_user.id, day=today)
        streak_service.use_streak_freeze(test_habit.id, test_user.id, day=today - timedelta(days=1))

        with pytest.raises(OutOfFreezesError):
            streak_service.use_streak_freeze(test_habit.id, test_user.id, day=today - timedelta(days=2))

        preferences = UserPreferences.query.filter_by(user_id=test_user.id).one()
        assert preferences.streak_freeze_count == 0


class TestHabitStats:

    def test_stats(self, db_session, test_user, test_habit, today, add_check_ins):
        add_check_ins(test_habit, _days(today, 0, 1))
        add_check_ins(test_habit, _days(today, 2), completed=False)

        stats = streak_service.get_habit_stats(test_habit.id, test_user.id)
        assert stats['total_days'] == 3
        assert stats['completed_days'] == 2
        assert stats['completion_rate'] == pytest.approx(200 / 3)
        assert sum(week['total'] for week in stats['weekly_stats']) == 3
        assert stats['quantity_stats'] is None

    def test_quantity_stats(self, db_session, test_user, quantity_habit, today):
        streak_service.log_quantity(quantity_habit.id, test_user.id, 8, day=today)
        streak_service.log_quantity(quantity_habit.id, test_user.id, 4, day=today - timedelta(days=1))

        stats = streak_service.get_habit_stats(quantity_habit.id, test_user.id)
        assert stats['quantity_stats'] == {'total': 12, 'average': 6, 'max': 8, 'min': 4}


class TestHabitLifecycle:

    def test_create_habit(self, db_session, test_user):
        habit = streak_service.create_habit(test_user.id, 'Stretch')
        assert habit.id is not None
        assert habit.is_active is True
        assert habit.current_streak == 0

    def test_deactivate_keeps_history(self, db_session, test_user, test_habit, today, add_check_ins):
        add_check_ins(test_habit, [today])
        streak_service.recompute_streak(test_habit.id, today=today)

        habit = streak_service.deactivate_habit(test_habit.id, test_user.id)
        assert habit.is_active is False
        assert habit.longest_streak == 1
        assert HabitCheckIn.query.filter_by(habit_id=test_habit.id).count() == 1

        habit = streak_service.reactivate_habit(test_habit.id, test_user.id)
        assert habit.is_active is True
