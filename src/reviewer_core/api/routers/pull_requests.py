"""Pull request API endpoints."""
import logging

from fastapi import APIRouter, Depends

from reviewer_core import models, schemas
from reviewer_core.services import PullRequestService

from ..dependencies import get_pull_request_service

logger = logging.getLogger("reviewer-core.pull_requests")

router = APIRouter(tags=["pull requests"])


def _pr_to_response(pr: models.PullRequest) -> schemas.PullRequestResponse:
    """Convert PullRequest model to PullRequestResponse schema."""
    return schemas.PullRequestResponse(
        pull_request_id=pr.pull_request_id,
        pull_request_name=pr.pull_request_name,
        author_id=pr.author_id,
        status=pr.status,
        assigned_reviewers=pr.assigned_reviewers,
        created_at=pr.created_at,
        merged_at=pr.merged_at,
    )


@router.post("/create", response_model=schemas.PullRequestEnvelope, status_code=201)
def create_pull_request(
    data: schemas.PullRequestCreate,
    service: PullRequestService = Depends(get_pull_request_service),
):
    """
    Create a pull request and auto-assign up to two reviewers.

    - **pull_request_id**: Unique pull request id
    - **pull_request_name**: Title
    - **author_id**: Author; reviewers come from the author's team
    """
    pr = service.create_pr(data.pull_request_id, data.pull_request_name, data.author_id)
    logger.info(f"Created pull request {pr.pull_request_id} with reviewers {pr.assigned_reviewers}")
    return schemas.PullRequestEnvelope(pr=_pr_to_response(pr))


@router.post("/merge", response_model=schemas.PullRequestEnvelope)
def merge_pull_request(
    data: schemas.PullRequestMerge,
    service: PullRequestService = Depends(get_pull_request_service),
):
    """Mark a pull request as merged. Merging twice returns the same result."""
    pr = service.merge_pr(data.pull_request_id)
    logger.info(f"Merged pull request {pr.pull_request_id} at {pr.merged_at}")
    return schemas.PullRequestEnvelope(pr=_pr_to_response(pr))


@router.post("/reassign", response_model=schemas.ReassignResponse)
def reassign_reviewer(
    data: schemas.PullRequestReassign,
    service: PullRequestService = Depends(get_pull_request_service),
):
    """
    Replace one assigned reviewer with a random active teammate of theirs.

    - **pull_request_id**: Pull request to change
    - **old_user_id**: Reviewer to replace
    """
    pr, replaced_by = service.reassign_reviewer(data.pull_request_id, data.old_user_id)
    logger.info(f"Reassigned {pr.pull_request_id}: {data.old_user_id} -> {replaced_by}")
    return schemas.ReassignResponse(pr=_pr_to_response(pr), replaced_by=replaced_by)
