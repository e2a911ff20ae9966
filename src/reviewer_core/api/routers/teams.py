"""Teams API endpoints."""
import logging

from fastapi import APIRouter, Depends, Query

from reviewer_core import schemas
from reviewer_core.repositories import TeamView
from reviewer_core.services import TeamService

from ..dependencies import get_team_service

logger = logging.getLogger("reviewer-core.teams")

router = APIRouter(tags=["teams"])


def _team_to_response(team: TeamView) -> schemas.TeamResponse:
    """Convert a team view to TeamResponse schema."""
    return schemas.TeamResponse(
        team_name=team.name,
        members=[schemas.TeamMember.model_validate(u) for u in team.members],
    )


@router.post("/add", response_model=schemas.TeamCreateResponse, status_code=201)
def create_team(
    team: schemas.TeamCreate,
    service: TeamService = Depends(get_team_service),
):
    """
    Create a team and insert or update its members.

    - **team_name**: Unique team name
    - **members**: Users to place in the team (existing users are moved here)
    """
    created = service.create_team(team.team_name, team.members)
    logger.info(f"Created team {created.name} with {len(created.members)} members")
    return schemas.TeamCreateResponse(team=_team_to_response(created))


@router.get("/get", response_model=schemas.TeamResponse)
def get_team(
    team_name: str = Query(..., min_length=1, description="Team name"),
    service: TeamService = Depends(get_team_service),
):
    """Get a team with its current members."""
    return _team_to_response(service.get_team(team_name))
