"""
Pytest configuration and fixtures for registration service tests.
"""
import os
import sys
from datetime import date

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Set testing environment before importing app
os.environ['FLASK_ENV'] = 'testing'
os.environ['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'

from registration.app import create_app
from registration.business_rules import TournamentType
from registration.fig_api import GymnastView
from registration.models import db, Tournament


class StubFigRegistry:
    """In-memory stand-in for FigApiClient."""

    def __init__(self, gymnasts=None):
        self.gymnasts = {g.fig_id: g for g in (gymnasts or [])}
        self.cleared = 0

    def add(self, fig_id, first_name='Ana', last_name='Gomez', country='USA',
            gender='F', birth_date='2000-01-01', is_licensed=True):
        gymnast = GymnastView(
            fig_id=fig_id,
            first_name=first_name,
            last_name=last_name,
            gender=gender,
            country=country,
            birth_date=birth_date,
            is_licensed=is_licensed
        )
        self.gymnasts[fig_id] = gymnast
        return gymnast

    def get_gymnasts(self):
        return list(self.gymnasts.values())

    def get_gymnasts_by_country(self, country):
        return [g for g in self.gymnasts.values() if g.country.upper() == country.upper()]

    def get_gymnast_by_fig_id(self, fig_id):
        return self.gymnasts.get(fig_id)

    def clear_cache(self):
        self.cleared += 1


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create database session for testing."""
    with app.app_context():
        # Clear all tables before each test
        db.session.remove()

        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture(autouse=True)
def fig_registry(app):
    """Registry with ten licensed USA gymnasts (FIG001..FIG010) and one unlicensed."""
    registry = StubFigRegistry()
    surnames = ['SMITH', 'JONES', 'BROWN', 'TAYLOR', 'WILSON',
                'DAVIS', 'CLARK', 'LEWIS', 'WALKER', 'HALL']
    for i, surname in enumerate(surnames, start=1):
        registry.add(f'FIG{i:03d}', first_name=f'Gymnast{i}', last_name=surname)
    registry.add('FIG999', first_name='Paula', last_name='Expired', is_licensed=False)

    original = app.gymnast_service.registry
    app.gymnast_service.registry = registry
    yield registry
    app.gymnast_service.registry = original


def _make_tournament(tournament_type: TournamentType, name: str, short_name: str) -> str:
    tournament = Tournament(
        name=name,
        short_name=short_name,
        type=tournament_type.value,
        start_date=date(2024, 7, 15),
        end_date=date(2024, 7, 21),
        location='Lima, Peru',
        is_active=True
    )
    db.session.add(tournament)
    db.session.commit()
    return tournament.id


@pytest.fixture
def campeonato_id(db_session):
    """Campeonato Panamericano: 2 per country per category, Pan-American only."""
    return _make_tournament(
        TournamentType.CAMPEONATO_PANAMERICANO,
        'Campeonato Panamericano de Gimnasia Aeróbica',
        'Campeonato Panamericano'
    )


@pytest.fixture
def copa_id(db_session):
    """Copa Panamericana: 4 per country per category, guests allowed."""
    return _make_tournament(
        TournamentType.COPA_PANAMERICANA,
        'Copa Panamericana de Gimnasia Aeróbica',
        'Copa Panamericana'
    )


@pytest.fixture
def choreography_payload():
    """Build a camelCase choreography payload; keyword overrides win."""
    def build(tournament_id, **overrides):
        payload = {
            'name': 'SMITH-JONES-BROWN',
            'country': 'USA',
            'category': 'SENIOR',
            'type': 'TRIO',
            'gymnastCount': 3,
            'oldestGymnastAge': 24,
            'gymnastFigIds': ['FIG001', 'FIG002', 'FIG003'],
            'tournamentId': tournament_id,
        }
        payload.update(overrides)
        return payload
    return build


@pytest.fixture
def coach_payload():
    def build(tournament_id, fig_id='C-1001', **overrides):
        payload = {
            'figId': fig_id,
            'firstName': 'Maria',
            'lastName': 'Lopez',
            'gender': 'F',
            'country': 'USA',
            'level': 'L3',
            'levelDescription': 'Level 3 coach',
            'tournamentId': tournament_id,
        }
        payload.update(overrides)
        return payload
    return build


@pytest.fixture
def judge_payload():
    def build(tournament_id, fig_id='J-2001', **overrides):
        payload = {
            'figId': fig_id,
            'firstName': 'Carlos',
            'lastName': 'Ruiz',
            'gender': 'M',
            'country': 'USA',
            'birth': '1975-03-02',
            'category': '2',
            'categoryDescription': 'Category 2',
            'tournamentId': tournament_id,
        }
        payload.update(overrides)
        return payload
    return build


@pytest.fixture
def support_payload():
    def build(tournament_id, **overrides):
        payload = {
            'firstName': 'Elena',
            'lastName': 'Vargas',
            'role': 'MEDIC',
            'country': 'USA',
            'email': 'elena.vargas@usagym.org',
            'tournamentId': tournament_id,
        }
        payload.update(overrides)
        return payload
    return build


@pytest.fixture
def services(app):
    """The service graph wired by create_app."""
    return {
        'choreographies': app.choreography_service,
        'coaches': app.registration_services['coaches'],
        'judges': app.registration_services['judges'],
        'support': app.registration_services['support'],
        'batch': app.batch_service,
        'gymnasts': app.gymnast_service,
        'coach_directory': app.coach_directory,
    }
