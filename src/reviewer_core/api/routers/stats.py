"""Assignment statistics API endpoints."""
from fastapi import APIRouter, Depends

from reviewer_core import schemas
from reviewer_core.services import StatsService

from ..dependencies import get_stats_service

router = APIRouter(tags=["stats"])


@router.get("/assignments", response_model=schemas.AssignmentStatsResponse)
def get_assignment_stats(service: StatsService = Depends(get_stats_service)):
    """Number of pull requests each user is currently assigned to review."""
    return schemas.AssignmentStatsResponse(
        stats=[
            schemas.AssignmentStat(user_id=user_id, assignments=count)
            for user_id, count in service.get_assignments_by_user()
        ]
    )
