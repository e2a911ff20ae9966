"""Persistence layer for teams, users and pull requests.

Repositories share one SQLAlchemy session per request. Multi-write
operations are wrapped in ``run_atomically`` so they commit or roll back as
a unit. Races with concurrent requests are detected after the fact from
affected row counts and reported as domain conflicts; no explicit locks
are taken.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import DomainError, ErrorCode

logger = logging.getLogger("reviewer-core.repositories")

R = TypeVar("R")


@dataclass
class TeamView:
    """Team reconstructed from its members' back reference."""

    name: str
    members: list[models.User] = field(default_factory=list)


class SqlRepository:
    """Base class holding the request-scoped session."""

    def __init__(self, db: Session):
        self.db = db

    def run_atomically(self, work: Callable[[], R]) -> R:
        """
        Run ``work`` inside one transaction.

        Commits when ``work`` returns and rolls back on any exception, which
        is re-raised unchanged. The commit happens even if the caller has
        stopped waiting for the result.

        Returns:
            Whatever ``work`` returns
        """
        try:
            result = work()
            self.db.commit()
            return result
        except Exception:
            self.db.rollback()
            raise


class TeamRepository(SqlRepository):
    """Team persistence."""

    def create_team(self, name: str) -> models.Team:
        """
        Insert a team row.

        Raises:
            DomainError: TEAM_EXISTS if the name is already taken
        """
        team = models.Team(team_name=name)
        self.db.add(team)
        try:
            self.db.flush()
        except IntegrityError:
            logger.info(f"Team '{name}' already exists (insert conflict)")
            raise DomainError(ErrorCode.TEAM_EXISTS, f"team '{name}' already exists")
        return team

    def get_team_with_members(self, name: str) -> Optional[TeamView]:
        """Get a team and its current members, or None if the team does not exist."""
        team = self.db.query(models.Team).filter(models.Team.team_name == name).first()
        if not team:
            return None

        members = (
            self.db.query(models.User)
            .filter(models.User.team_name == name)
            .order_by(models.User.user_id)
            .all()
        )
        return TeamView(name=team.team_name, members=members)

    def team_exists(self, name: str) -> bool:
        return self.db.query(models.Team.team_name).filter(models.Team.team_name == name).first() is not None


class UserRepository(SqlRepository):
    """User persistence."""

    def get_by_id(self, user_id: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.user_id == user_id).first()

    def upsert_users(self, team_name: str, members: Iterable[schemas.TeamMember]) -> None:
        """
        Insert or update users as members of ``team_name``.

        Existing users are moved to the team and get their username and
        active flag overwritten.
        """
        for member in members:
            user = self.db.get(models.User, member.user_id)
            if user is None:
                user = models.User(user_id=member.user_id)
                self.db.add(user)
            user.username = member.username
            user.team_name = team_name
            user.is_active = member.is_active
            self.db.flush()

    def set_active(self, user_id: str, is_active: bool) -> Optional[models.User]:
        """Set a user's active flag. Returns the updated user or None if missing."""
        user = self.get_by_id(user_id)
        if not user:
            return None

        user.is_active = is_active
        self.db.flush()
        return user

    def get_active_team_members_except(self, team_name: str, exclude_user_id: str) -> list[models.User]:
        """Active members of a team other than ``exclude_user_id``, ordered by id."""
        return (
            self.db.query(models.User)
            .filter(
                models.User.team_name == team_name,
                models.User.is_active.is_(True),
                models.User.user_id != exclude_user_id,
            )
            .order_by(models.User.user_id)
            .all()
        )

    def get_team_by_user_id(self, user_id: str) -> Optional[str]:
        """Current team of a user; None if the user is missing or has no team."""
        row = self.db.query(models.User.team_name).filter(models.User.user_id == user_id).first()
        if row is None:
            return None
        return row.team_name or None


class PullRequestRepository(SqlRepository):
    """Pull request and reviewer-link persistence."""

    def create(
        self,
        pr_id: str,
        name: str,
        author_id: str,
        reviewer_ids: list[str],
        created_at: datetime,
    ) -> None:
        """
        Insert a pull request and its reviewer links.

        Raises:
            DomainError: PR_EXISTS if the id is already taken
        """
        pr = models.PullRequest(
            pull_request_id=pr_id,
            pull_request_name=name,
            author_id=author_id,
            status=models.PRStatus.OPEN,
            created_at=created_at,
            merged_at=None,
        )
        self.db.add(pr)
        try:
            self.db.flush()
        except IntegrityError:
            logger.info(f"Pull request '{pr_id}' already exists (insert conflict)")
            raise DomainError(ErrorCode.PR_EXISTS, f"pull request '{pr_id}' already exists")

        for slot, reviewer_id in enumerate(reviewer_ids):
            self.db.execute(
                models.pr_reviewers.insert().values(
                    pr_id=pr_id,
                    reviewer_id=reviewer_id,
                    slot=slot,
                    assigned_at=created_at,
                )
            )

    def get_by_id(self, pr_id: str) -> Optional[models.PullRequest]:
        return (
            self.db.query(models.PullRequest)
            .filter(models.PullRequest.pull_request_id == pr_id)
            .first()
        )

    def exists_by_id(self, pr_id: str) -> bool:
        return (
            self.db.query(models.PullRequest.pull_request_id)
            .filter(models.PullRequest.pull_request_id == pr_id)
            .first()
        ) is not None

    def mark_merged(self, pr_id: str, merged_at: datetime) -> Optional[models.PullRequest]:
        """
        Conditionally move an OPEN pull request to MERGED.

        Returns:
            The updated pull request, or None if no OPEN row matched (the PR
            is missing or was merged concurrently)
        """
        updated = (
            self.db.query(models.PullRequest)
            .filter(
                models.PullRequest.pull_request_id == pr_id,
                models.PullRequest.status == models.PRStatus.OPEN,
            )
            .update(
                {
                    models.PullRequest.status: models.PRStatus.MERGED,
                    models.PullRequest.merged_at: merged_at,
                },
                synchronize_session=False,
            )
        )
        if updated == 0:
            return None

        self.db.expire_all()
        return self.get_by_id(pr_id)

    def reassign_reviewer(self, pr_id: str, old_reviewer_id: str, new_reviewer_id: str) -> models.PullRequest:
        """
        Swap one reviewer link for another, keeping its slot.

        Raises:
            DomainError: NOT_ASSIGNED if the old link is gone (changed by a
                concurrent request) or the new reviewer got linked meanwhile
        """
        link = models.pr_reviewers.c
        slot = self.db.execute(
            models.pr_reviewers.delete()
            .where(link.pr_id == pr_id, link.reviewer_id == old_reviewer_id)
            .returning(link.slot)
        ).scalar()
        if slot is None:
            logger.warning(f"Reviewer link {pr_id}/{old_reviewer_id} vanished during reassignment")
            raise DomainError(ErrorCode.NOT_ASSIGNED)

        try:
            self.db.execute(
                models.pr_reviewers.insert().values(
                    pr_id=pr_id,
                    reviewer_id=new_reviewer_id,
                    slot=slot,
                    assigned_at=models.utcnow(),
                )
            )
        except IntegrityError:
            logger.warning(f"Reviewer {new_reviewer_id} was linked to {pr_id} concurrently")
            raise DomainError(ErrorCode.NOT_ASSIGNED, "reviewer set changed concurrently")

        self.db.expire_all()
        return self.get_by_id(pr_id)

    def list_by_reviewer(self, reviewer_id: str) -> list[models.PullRequest]:
        """Pull requests whose reviewer set currently contains ``reviewer_id``."""
        return (
            self.db.query(models.PullRequest)
            .join(models.pr_reviewers, models.pr_reviewers.c.pr_id == models.PullRequest.pull_request_id)
            .filter(models.pr_reviewers.c.reviewer_id == reviewer_id)
            .order_by(models.PullRequest.created_at, models.PullRequest.pull_request_id)
            .all()
        )

    def assignment_stats(self) -> list[tuple[str, int]]:
        """Count of current reviewer links per reviewer id."""
        link = models.pr_reviewers.c
        rows = (
            self.db.query(link.reviewer_id, func.count())
            .group_by(link.reviewer_id)
            .order_by(link.reviewer_id)
            .all()
        )
        return [(reviewer_id, count) for reviewer_id, count in rows]
