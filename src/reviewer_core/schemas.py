"""Pydantic schemas for request/response validation."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from .models import PRStatus


# Team Schemas

class TeamMember(BaseModel):
    """Team member as sent in team creation requests and returned in team views."""

    user_id: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., max_length=255)
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class TeamCreate(BaseModel):
    """Schema for creating a team with its members."""

    team_name: str = Field(..., min_length=1, max_length=255)
    members: list[TeamMember] = Field(default_factory=list)


class TeamResponse(BaseModel):
    """Team with its current members."""

    team_name: str
    members: list[TeamMember] = Field(default_factory=list)


class TeamCreateResponse(BaseModel):
    team: TeamResponse


# User Schemas

class SetIsActiveRequest(BaseModel):
    """Schema for toggling a user's active flag."""

    user_id: str = Field(..., min_length=1)
    is_active: bool


class UserResponse(BaseModel):
    user_id: str
    username: str
    team_name: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class SetIsActiveResponse(BaseModel):
    user: UserResponse


# Pull Request Schemas

class PullRequestCreate(BaseModel):
    """Schema for creating a pull request; reviewers are assigned automatically."""

    pull_request_id: str = Field(..., min_length=1, max_length=255)
    pull_request_name: str = Field(..., max_length=500)
    author_id: str = Field(..., min_length=1, max_length=255)


class PullRequestMerge(BaseModel):
    pull_request_id: str = Field(..., min_length=1)


class PullRequestReassign(BaseModel):
    """Schema for replacing one assigned reviewer."""

    pull_request_id: str = Field(..., min_length=1)
    old_user_id: str = Field(..., min_length=1)


class PullRequestResponse(BaseModel):
    """Full pull request with its reviewer set (in display order)."""

    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PRStatus
    assigned_reviewers: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    merged_at: Optional[datetime] = Field(None, alias="mergedAt")

    model_config = ConfigDict(from_attributes=True, use_enum_values=True, populate_by_name=True)


class PullRequestEnvelope(BaseModel):
    pr: PullRequestResponse


class ReassignResponse(BaseModel):
    pr: PullRequestResponse
    replaced_by: str


class PullRequestShort(BaseModel):
    """Pull request summary for review lists."""

    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PRStatus

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class UserReviewResponse(BaseModel):
    user_id: str
    pull_requests: list[PullRequestShort] = Field(default_factory=list)


# Statistics Schemas

class AssignmentStat(BaseModel):
    user_id: str
    assignments: int


class AssignmentStatsResponse(BaseModel):
    stats: list[AssignmentStat] = Field(default_factory=list)


# Error / health Schemas

class ErrorItem(BaseModel):
    code: str
    message: str


class ErrorBody(BaseModel):
    error: ErrorItem


class HealthResponse(BaseModel):
    status: str = "ok"
