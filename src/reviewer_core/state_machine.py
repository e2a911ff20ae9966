"""State machine validation for pull request status transitions.

A pull request starts OPEN and moves to MERGED exactly once:
- OPEN -> MERGED is the only forward transition
- MERGED is terminal; its reviewer set is frozen
- Same-status transitions are no-ops (merge is idempotent)
"""
import logging

from .errors import DomainError, ErrorCode
from .models import PRStatus

logger = logging.getLogger("reviewer-core.state_machine")


# Maps current status -> list of allowed next statuses
TRANSITION_MATRIX: dict[PRStatus, list[PRStatus]] = {
    PRStatus.OPEN: [
        PRStatus.OPEN,    # No-op (allowed)
        PRStatus.MERGED,  # Forward: merge
    ],
    PRStatus.MERGED: [
        PRStatus.MERGED,  # No-op (allowed)
    ],
}


def is_transition_valid(current_status: PRStatus, new_status: PRStatus) -> bool:
    """
    Check if a status transition is valid.

    Args:
        current_status: Current pull request status
        new_status: Requested new status

    Returns:
        True if transition is allowed, False otherwise
    """
    return new_status in TRANSITION_MATRIX.get(current_status, [])


def validate_transition(current_status: PRStatus, new_status: PRStatus) -> None:
    """
    Validate a status transition and raise if it is not allowed.

    Raises:
        DomainError: PR_MERGED when leaving the terminal MERGED status
    """
    if current_status == new_status:
        logger.debug(f"No-op transition: {current_status.value} -> {new_status.value}")
        return

    if not is_transition_valid(current_status, new_status):
        logger.warning(f"Blocked transition: {current_status.value} -> {new_status.value}")
        raise DomainError(
            ErrorCode.PR_MERGED,
            f"pull request is {current_status.value} and cannot move to {new_status.value}",
        )


def is_terminal(status: PRStatus) -> bool:
    """True when no transition other than the no-op is allowed."""
    return get_allowed_transitions(status) == []


def ensure_reviewers_mutable(status: PRStatus) -> None:
    """Raise PR_MERGED if the reviewer set of a PR in ``status`` is frozen."""
    if is_terminal(status):
        raise DomainError(ErrorCode.PR_MERGED)


def get_allowed_transitions(current_status: PRStatus) -> list[PRStatus]:
    """Allowed next statuses, excluding the no-op."""
    return [s for s in TRANSITION_MATRIX.get(current_status, []) if s != current_status]
