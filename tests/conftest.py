"""Pytest configuration and fixtures."""
import os

# Must be set before reviewer_core modules read their settings
os.environ.setdefault("REVIEWER_DATABASE_URL", "sqlite://")
os.environ.setdefault("REVIEWER_REQUEST_TIMEOUT_SECONDS", "10")

import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from reviewer_core import schemas
from reviewer_core.api.dependencies import get_random_source
from reviewer_core.api.main import app
from reviewer_core.database import get_db
from reviewer_core.models import Base
from reviewer_core.repositories import PullRequestRepository, TeamRepository, UserRepository
from reviewer_core.services import PullRequestService, StatsService, TeamService, UserService


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session in a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def rng():
    """Seeded randomness so selection is reproducible."""
    return random.Random(1234)


@pytest.fixture
def team_service(db):
    return TeamService(TeamRepository(db), UserRepository(db))


@pytest.fixture
def user_service(db):
    return UserService(UserRepository(db), PullRequestRepository(db))


@pytest.fixture
def pr_service(db, rng):
    return PullRequestService(PullRequestRepository(db), UserRepository(db), rng)


@pytest.fixture
def stats_service(db):
    return StatsService(PullRequestRepository(db))


@pytest.fixture
def make_team(team_service):
    """Create a team from ``(user_id, is_active)`` pairs."""
    def _make(team_name, members):
        return team_service.create_team(
            team_name,
            [
                schemas.TeamMember(user_id=user_id, username=user_id.upper(), is_active=is_active)
                for user_id, is_active in members
            ],
        )
    return _make


@pytest.fixture
def client(session_factory, rng):
    """HTTP test client bound to the test database and seeded randomness."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_random_source] = lambda: rng
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
