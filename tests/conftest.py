"""
Pytest configuration and shared fixtures for the test suite.
"""
import pytest
from app import create_app, db
from models import (
    User,
    Habit,
    HabitCheckIn,
    FinancialGoal,
    FitnessGoal,
    LifeSystem,
)
from services.timezone_service import get_user_today


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app('testing')
    app.config.update({
        'SECRET_KEY': 'test-secret-key',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def db_session(app):
    """Create database session."""
    with app.app_context():
        yield db.session


@pytest.fixture
def today():
    """Today's date for a UTC user."""
    return get_user_today('UTC')


@pytest.fixture
def test_user(db_session):
    """Create test user."""
    user = User(email='test@example.com', name='Test User', timezone='UTC')
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def other_user(db_session):
    user = User(email='other@example.com', timezone='UTC')
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def test_habit(db_session, test_user):
    """Create a daily habit."""
    habit = Habit(user_id=test_user.id, name='Read 20 pages', frequency='DAILY')
    db_session.add(habit)
    db_session.commit()
    return habit


@pytest.fixture
def quantity_habit(db_session, test_user):
    habit = Habit(
        user_id=test_user.id,
        name='Drink water',
        is_quantity=True,
        quantity_target=8,
        quantity_unit='glasses',
    )
    db_session.add(habit)
    db_session.commit()
    return habit


@pytest.fixture
def financial_goal(db_session, test_user):
    """Create a savings goal 2,500 of the way to 10,000."""
    goal = FinancialGoal(
        user_id=test_user.id,
        name='Emergency fund',
        goal_type='EMERGENCY_FUND',
        target_amount=10000,
        current_amount=2500,
    )
    db_session.add(goal)
    db_session.commit()
    return goal


@pytest.fixture
def weight_loss_goal(db_session, test_user):
    """Create a decreasing fitness goal: 90kg down to 80kg, currently 85kg."""
    goal = FitnessGoal(
        user_id=test_user.id,
        name='Lose weight',
        metric_type='WEIGHT',
        unit='kg',
        start_value=90,
        current_value=85,
        target_value=80,
    )
    db_session.add(goal)
    db_session.commit()
    return goal


@pytest.fixture
def test_system(db_session, test_user):
    """Create a life system."""
    system = LifeSystem(user_id=test_user.id, name='No phone after 10pm', category='HEALTH')
    db_session.add(system)
    db_session.commit()
    return system


@pytest.fixture
def add_check_ins(db_session):
    """Factory inserting completed check-ins for a habit on the given days."""
    def _add(habit, days, completed=True):
        for day in days:
            db_session.add(HabitCheckIn(habit_id=habit.id, date=day, completed=completed))
        db_session.commit()
    return _add
