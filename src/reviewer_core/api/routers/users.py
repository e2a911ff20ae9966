"""Users API endpoints."""
import logging

from fastapi import APIRouter, Depends, Query

from reviewer_core import schemas
from reviewer_core.services import UserService

from ..dependencies import get_user_service

logger = logging.getLogger("reviewer-core.users")

router = APIRouter(tags=["users"])


@router.post("/setIsActive", response_model=schemas.SetIsActiveResponse)
def set_is_active(
    data: schemas.SetIsActiveRequest,
    service: UserService = Depends(get_user_service),
):
    """
    Activate or deactivate a user.

    Inactive users are never picked as reviewers.
    """
    user = service.set_is_active(data.user_id, data.is_active)
    logger.info(f"Set user {user.user_id} is_active={user.is_active}")
    return schemas.SetIsActiveResponse(user=schemas.UserResponse.model_validate(user))


@router.get("/getReview", response_model=schemas.UserReviewResponse)
def get_review(
    user_id: str = Query(..., min_length=1, description="Reviewer user id"),
    service: UserService = Depends(get_user_service),
):
    """List pull requests the user is currently assigned to review."""
    uid, prs = service.get_review_prs(user_id)
    return schemas.UserReviewResponse(
        user_id=uid,
        pull_requests=[schemas.PullRequestShort.model_validate(pr) for pr in prs],
    )
