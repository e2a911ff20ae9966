"""SQLAlchemy database models."""
from datetime import datetime, timezone
import enum

from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    ForeignKey,
    Enum,
    Boolean,
    Index,
    PrimaryKeyConstraint,
    UniqueConstraint,
    Table,
)
from sqlalchemy.orm import declarative_base, relationship

# Base class for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class PRStatus(str, enum.Enum):
    """Pull request lifecycle status enum."""

    OPEN = "OPEN"
    MERGED = "MERGED"  # Terminal: reviewer set is frozen


# Association table for reviewer assignments (many-to-many)
# slot keeps display order stable across reassignment
pr_reviewers = Table(
    'pr_reviewers',
    Base.metadata,
    Column('pr_id', String(255), ForeignKey('pull_requests.pull_request_id', ondelete='CASCADE'), nullable=False),
    Column('reviewer_id', String(255), ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True),
    Column('slot', Integer, nullable=False),
    Column('assigned_at', DateTime(timezone=True), nullable=False, default=utcnow),
    PrimaryKeyConstraint('pr_id', 'reviewer_id', name='pk_pr_reviewers'),
    UniqueConstraint('pr_id', 'slot', name='uq_pr_reviewer_slot'),
)


class Team(Base):
    """
    Team of users who review each other's pull requests.

    Members are not owned by the team: they reference it by name and the
    member list is reconstructed by query.
    """

    __tablename__ = "teams"

    team_name = Column(String(255), primary_key=True)

    # Audit fields
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Team {self.team_name}>"


class User(Base):
    """User that can author and review pull requests."""

    __tablename__ = "users"

    user_id = Column(String(255), primary_key=True)
    username = Column(String(255), nullable=False)
    team_name = Column(String(255), ForeignKey("teams.team_name"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Audit fields
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_users_team_active", "team_name", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<User {self.user_id} ({self.team_name})>"


class PullRequest(Base):
    """Pull request with up to two assigned reviewers."""

    __tablename__ = "pull_requests"

    pull_request_id = Column(String(255), primary_key=True)
    pull_request_name = Column(String(500), nullable=False)
    author_id = Column(String(255), ForeignKey("users.user_id"), nullable=False, index=True)
    status = Column(
        Enum(PRStatus, name="pr_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=PRStatus.OPEN,
    )
    created_at = Column(DateTime(timezone=True), nullable=True, default=utcnow)
    merged_at = Column(DateTime(timezone=True), nullable=True)  # Set once on OPEN -> MERGED

    # Writes go through pr_reviewers directly; this is a read-side join
    reviewers = relationship(
        "User",
        secondary=pr_reviewers,
        primaryjoin="PullRequest.pull_request_id == pr_reviewers.c.pr_id",
        secondaryjoin="User.user_id == pr_reviewers.c.reviewer_id",
        order_by=pr_reviewers.c.slot,
        viewonly=True,
    )

    @property
    def assigned_reviewers(self) -> list[str]:
        """Reviewer ids in slot order."""
        return [u.user_id for u in self.reviewers]

    def __repr__(self) -> str:
        return f"<PullRequest {self.pull_request_id}: {self.status.value}>"
