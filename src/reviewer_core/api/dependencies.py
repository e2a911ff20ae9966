"""FastAPI dependency providers wiring sessions, repositories and services."""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..repositories import PullRequestRepository, TeamRepository, UserRepository
from ..selection import RandomSource, new_random_source
from ..services import PullRequestService, StatsService, TeamService, UserService


@lru_cache()
def get_random_source() -> RandomSource:
    """Randomness source for reviewer selection (overridden in tests)."""
    return new_random_source()


def get_team_service(db: Session = Depends(get_db)) -> TeamService:
    return TeamService(TeamRepository(db), UserRepository(db))


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db), PullRequestRepository(db))


def get_pull_request_service(
    db: Session = Depends(get_db),
    rng: RandomSource = Depends(get_random_source),
) -> PullRequestService:
    return PullRequestService(
        PullRequestRepository(db),
        UserRepository(db),
        rng,
        reviewers_per_pr=get_settings().reviewers_per_pr,
    )


def get_stats_service(db: Session = Depends(get_db)) -> StatsService:
    return StatsService(PullRequestRepository(db))
