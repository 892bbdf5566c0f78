"""
Unit tests for Life Score aggregation and life system adherence.
"""
import pytest
from datetime import timedelta
from models import FinancialGoal, FitnessGoal, Habit, SystemAdherence
from services import life_score_service, life_system_service
from services.exceptions import NotFoundError
from services.life_score_service import (
    DEFAULT_WEIGHTS,
    LIGHT_WEIGHTS,
    DomainScores,
    ScoreWeights,
    aggregate_life_score,
    average_score,
    habits_score,
    weights_from_config,
)


class TestScoreWeights:
    """Test cases for weight tables."""

    def test_tables_sum_to_one(self):
        assert sum(DEFAULT_WEIGHTS.as_dict().values()) == pytest.approx(1.0)
        assert sum(LIGHT_WEIGHTS.as_dict().values()) == pytest.approx(1.0)
        assert LIGHT_WEIGHTS.systems == 0.0

    def test_rejects_bad_sum(self):
        with pytest.raises(ValueError):
            ScoreWeights(finance=0.5, fitness=0.5, habits=0.5)

    def test_rejects_negative_weight(self):
        with pytest.raises(ValueError):
            ScoreWeights(finance=1.2, fitness=-0.2, habits=0.0)

    def test_weights_are_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_WEIGHTS.finance = 1.0

    def test_from_config(self):
        assert weights_from_config({'LIFE_SCORE_WEIGHTS': 'light'}) is LIGHT_WEIGHTS
        assert weights_from_config({}) is DEFAULT_WEIGHTS
        with pytest.raises(ValueError):
            weights_from_config({'LIFE_SCORE_WEIGHTS': 'heavy'})


class TestAggregation:

    def test_uniform_scores(self):
        assert aggregate_life_score(DomainScores(50, 50, 50, 50), DEFAULT_WEIGHTS) == 50

    def test_single_domain(self):
        scores = DomainScores(finance=100)
        assert aggregate_life_score(scores, DEFAULT_WEIGHTS) == 40
        assert aggregate_life_score(scores, LIGHT_WEIGHTS) == 45

    def test_empty_domains_still_weigh(self):
        assert aggregate_life_score(DomainScores(), DEFAULT_WEIGHTS) == 0

    def test_out_of_range_scores_are_clamped(self):
        assert aggregate_life_score(DomainScores(250, 250, 250, 250), DEFAULT_WEIGHTS) == 100

    def test_average_score(self):
        assert average_score([]) == 0
        assert average_score([50, 51]) == 51
        assert average_score([33.3, 33.3, 33.4]) == 33

    def test_habits_score(self):
        assert habits_score([Habit(current_streak=15)]) == 50
        assert habits_score([Habit(current_streak=45), Habit(current_streak=0)]) == 50
        assert habits_score([Habit(current_streak=7)], streak_target_days=7) == 100


class TestComputeLifeScore:
    """Test cases for the live Life Score."""

    def test_empty_user(self, db_session, test_user):
        breakdown = life_score_service.compute_life_score(test_user.id)
        assert breakdown.life_score == 0
        assert breakdown.scores == DomainScores()

    def test_mixed_domains(self, db_session, test_user, financial_goal, weight_loss_goal, test_habit):
        breakdown = life_score_service.compute_life_score(test_user.id)

        assert breakdown.scores.finance == 25
        assert breakdown.scores.fitness == 50
        assert breakdown.scores.habits == 0
        assert breakdown.life_score == 25  # 25*.4 + 50*.3
        assert breakdown.total_saved == 2500
        assert breakdown.active_habits == 1
        assert breakdown.active_goals == 2

    def test_light_weights(self, db_session, test_user, financial_goal, weight_loss_goal):
        breakdown = life_score_service.compute_life_score(test_user.id, weights=LIGHT_WEIGHTS)
        assert breakdown.life_score == 26  # 25*.45 + 50*.3 = 26.25

    def test_configured_weights(self, app, db_session, test_user, financial_goal):
        app.config['LIFE_SCORE_WEIGHTS'] = 'light'
        breakdown = life_score_service.compute_life_score(test_user.id)
        assert breakdown.weights is LIGHT_WEIGHTS
        assert breakdown.life_score == 11

    def test_inactive_inputs_are_skipped(self, db_session, test_user):
        db_session.add_all([
            FinancialGoal(user_id=test_user.id, name='Paused', target_amount=100, current_amount=100, is_paused=True),
            FinancialGoal(user_id=test_user.id, name='Old', target_amount=100, current_amount=100, is_archived=True),
            FitnessGoal(user_id=test_user.id, name='Done', start_value=0, current_value=10,
                        target_value=10, is_achieved=True),
            Habit(user_id=test_user.id, name='Dropped', current_streak=30, is_active=False),
        ])
        db_session.commit()

        breakdown = life_score_service.compute_life_score(test_user.id)
        assert breakdown.life_score == 0
        assert breakdown.active_goals == 0

    def test_systems_domain(self, db_session, test_user, test_system, today):
        for offset in range(10):
            db_session.add(SystemAdherence(system_id=test_system.id, date=today - timedelta(days=offset),
                                           adhered=offset < 8))
        db_session.commit()

        breakdown = life_score_service.compute_life_score(test_user.id, today=today)
        assert breakdown.scores.systems == 80
        assert breakdown.life_score == 8

    def test_breakdown_dict(self, db_session, test_user, financial_goal):
        data = life_score_service.compute_life_score(test_user.id).to_dict()
        assert data['life_score'] == 10
        assert data['breakdown']['finance'] == {'score': 25, 'weight': 0.40}
        assert set(data['breakdown']) == {'finance', 'fitness', 'habits', 'systems'}


class TestLifeSystemAdherence:
    """Test cases for adherence logs."""

    def test_log_adherence(self, db_session, test_user, test_system, today):
        result = life_system_service.log_adherence(test_system.id, test_user.id, True)
        assert result['adherence_log'].date == today
        assert result['current_adherence'] == 100

        result = life_system_service.log_adherence(test_system.id, test_user.id, False,
                                                   day=today - timedelta(days=1))
        assert result['current_adherence'] == 50

    def test_same_day_overwrites(self, db_session, test_user, test_system, today):
        life_system_service.log_adherence(test_system.id, test_user.id, True)
        result = life_system_service.log_adherence(test_system.id, test_user.id, False, notes='slipped')

        assert SystemAdherence.query.filter_by(system_id=test_system.id).count() == 1
        assert result['adherence_log'].adhered is False
        assert result['current_adherence'] == 0

    def test_window_bounds(self, db_session, test_system, today):
        db_session.add_all([
            SystemAdherence(system_id=test_system.id, date=today - timedelta(days=30), adhered=True),
            SystemAdherence(system_id=test_system.id, date=today - timedelta(days=31), adhered=False),
        ])
        db_session.commit()

        logs = life_system_service.get_window_logs(test_system.id, today, 30)
        assert len(logs) == 1
        assert life_system_service.get_current_adherence(test_system.id, today=today) == 100

    def test_empty_adherence(self):
        assert life_system_service.calculate_adherence([]) == 0

    def test_other_users_system(self, db_session, other_user, test_system):
        with pytest.raises(NotFoundError):
            life_system_service.log_adherence(test_system.id, other_user.id, True)
