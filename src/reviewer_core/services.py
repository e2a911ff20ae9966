"""Business logic for teams, users, pull request lifecycle and statistics.

Services validate domain rules in a fixed order (first failure wins), then
write through the repositories inside a single transaction. Domain errors
are raised as ``DomainError`` at the point of detection and are never
retried here.
"""
import logging
from typing import Optional

from . import models, schemas
from .errors import DomainError, ErrorCode, not_found
from .repositories import PullRequestRepository, TeamRepository, TeamView, UserRepository
from .selection import RandomSource, choose_one, choose_reviewers
from .state_machine import ensure_reviewers_mutable, validate_transition

logger = logging.getLogger("reviewer-core.services")

DEFAULT_REVIEWERS_PER_PR = 2


class TeamService:
    """Team creation and lookup."""

    def __init__(self, team_repo: TeamRepository, user_repo: UserRepository):
        self.team_repo = team_repo
        self.user_repo = user_repo

    def create_team(self, team_name: str, members: list[schemas.TeamMember]) -> TeamView:
        """
        Create a team and insert or update its members.

        Raises:
            DomainError: TEAM_EXISTS if the team name is taken
        """
        def work() -> None:
            if self.team_repo.team_exists(team_name):
                raise DomainError(ErrorCode.TEAM_EXISTS, f"team '{team_name}' already exists")
            self.team_repo.create_team(team_name)
            self.user_repo.upsert_users(team_name, members)

        self.team_repo.run_atomically(work)
        return self.get_team(team_name)

    def get_team(self, team_name: str) -> TeamView:
        team = self.team_repo.get_team_with_members(team_name)
        if team is None:
            raise not_found("team", team_name)
        return team


class UserService:
    """User activity toggling and review lists."""

    def __init__(self, user_repo: UserRepository, pr_repo: PullRequestRepository):
        self.user_repo = user_repo
        self.pr_repo = pr_repo

    def set_is_active(self, user_id: str, is_active: bool) -> models.User:
        user = self.user_repo.run_atomically(lambda: self.user_repo.set_active(user_id, is_active))
        if user is None:
            raise not_found("user", user_id)
        return self.user_repo.get_by_id(user_id)

    def get_review_prs(self, user_id: str) -> tuple[str, list[models.PullRequest]]:
        """Pull requests the user currently reviews."""
        user = self.user_repo.get_by_id(user_id)
        if user is None:
            raise not_found("user", user_id)
        return user.user_id, self.pr_repo.list_by_reviewer(user_id)


class PullRequestService:
    """
    Pull request lifecycle: creation with automatic reviewer assignment,
    single-reviewer reassignment and idempotent merge.
    """

    def __init__(
        self,
        pr_repo: PullRequestRepository,
        user_repo: UserRepository,
        rng: RandomSource,
        reviewers_per_pr: int = DEFAULT_REVIEWERS_PER_PR,
    ):
        self.pr_repo = pr_repo
        self.user_repo = user_repo
        self.rng = rng
        self.reviewers_per_pr = reviewers_per_pr

    def create_pr(self, pr_id: str, name: str, author_id: str) -> models.PullRequest:
        """
        Create a pull request and assign up to ``reviewers_per_pr`` reviewers.

        Reviewers are drawn at random from the active members of the author's
        team, excluding the author. A pool smaller than the target is not an
        error: the PR simply gets fewer reviewers.

        Raises:
            DomainError: PR_EXISTS if the id is taken; NOT_FOUND if the
                author is missing or has no team
        """
        def work() -> None:
            if self.pr_repo.exists_by_id(pr_id):
                raise DomainError(ErrorCode.PR_EXISTS, f"pull request '{pr_id}' already exists")

            author = self.user_repo.get_by_id(author_id)
            if author is None:
                raise not_found("author", author_id)
            if not author.team_name:
                raise DomainError(ErrorCode.NOT_FOUND, f"author '{author_id}' has no team")

            candidates = self.user_repo.get_active_team_members_except(author.team_name, author_id)
            reviewer_ids = [u.user_id for u in choose_reviewers(candidates, self.reviewers_per_pr, self.rng)]

            self.pr_repo.create(pr_id, name, author_id, reviewer_ids, models.utcnow())

        self.pr_repo.run_atomically(work)

        created = self.pr_repo.get_by_id(pr_id)
        if created is None:
            raise DomainError(ErrorCode.NOT_FOUND, f"pull request '{pr_id}' not found after create")
        return created

    def reassign_reviewer(self, pr_id: str, old_reviewer_id: str) -> tuple[models.PullRequest, str]:
        """
        Replace one assigned reviewer with a random active teammate of theirs.

        The candidate pool is the replaced reviewer's current team, minus the
        replaced reviewer and everyone already assigned to the PR.

        Returns:
            The refreshed pull request and the id of the new reviewer

        Raises:
            DomainError: NOT_FOUND, PR_MERGED, NOT_ASSIGNED or NO_CANDIDATE
        """
        def work() -> str:
            pr = self.pr_repo.get_by_id(pr_id)
            if pr is None:
                raise not_found("pull request", pr_id)

            if self.user_repo.get_by_id(old_reviewer_id) is None:
                raise not_found("user", old_reviewer_id)

            ensure_reviewers_mutable(pr.status)

            assigned = set(pr.assigned_reviewers)
            if old_reviewer_id not in assigned:
                raise DomainError(
                    ErrorCode.NOT_ASSIGNED,
                    f"user '{old_reviewer_id}' is not a reviewer of '{pr_id}'",
                )

            team_name = self.user_repo.get_team_by_user_id(old_reviewer_id)
            if team_name is None:
                raise DomainError(ErrorCode.NOT_FOUND, f"user '{old_reviewer_id}' has no team")

            candidates = [
                u for u in self.user_repo.get_active_team_members_except(team_name, old_reviewer_id)
                if u.user_id not in assigned
            ]
            if not candidates:
                raise DomainError(ErrorCode.NO_CANDIDATE, f"no active replacement for '{old_reviewer_id}' in team '{team_name}'")

            new_reviewer_id = choose_one(candidates, self.rng).user_id
            self.pr_repo.reassign_reviewer(pr_id, old_reviewer_id, new_reviewer_id)
            return new_reviewer_id

        new_reviewer_id = self.pr_repo.run_atomically(work)
        return self.pr_repo.get_by_id(pr_id), new_reviewer_id

    def merge_pr(self, pr_id: str) -> models.PullRequest:
        """
        Mark a pull request as merged. Idempotent.

        Merging an already merged PR returns it unchanged. If the conditional
        update matches nothing, the PR is re-read: a concurrent merge counts
        as success, a vanished PR is NOT_FOUND.
        """
        def work() -> Optional[models.PullRequest]:
            pr = self.pr_repo.get_by_id(pr_id)
            if pr is None:
                raise not_found("pull request", pr_id)
            if pr.status == models.PRStatus.MERGED:
                return pr

            validate_transition(pr.status, models.PRStatus.MERGED)
            return self.pr_repo.mark_merged(pr_id, models.utcnow())

        merged = self.pr_repo.run_atomically(work)
        current = self.pr_repo.get_by_id(pr_id)

        if merged is None:
            if current is not None and current.status == models.PRStatus.MERGED:
                logger.info(f"Pull request {pr_id} was merged by a concurrent request")
                return current
            raise not_found("pull request", pr_id)

        if current is None:
            raise not_found("pull request", pr_id)
        return current


class StatsService:
    """Read-only assignment statistics."""

    def __init__(self, pr_repo: PullRequestRepository):
        self.pr_repo = pr_repo

    def get_assignments_by_user(self) -> list[tuple[str, int]]:
        return self.pr_repo.assignment_stats()
