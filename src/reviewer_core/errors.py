"""Domain error taxonomy and its mapping onto HTTP status codes.

Error kinds are part of the external contract: clients branch on the
``code`` and never on the message text.
"""
import enum
from typing import Optional


class ErrorCode(str, enum.Enum):
    """Stable error kinds returned to clients."""

    TEAM_EXISTS = "TEAM_EXISTS"
    PR_EXISTS = "PR_EXISTS"
    PR_MERGED = "PR_MERGED"
    NOT_ASSIGNED = "NOT_ASSIGNED"
    NO_CANDIDATE = "NO_CANDIDATE"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"  # Malformed payload at the HTTP boundary
    INTERNAL = "INTERNAL"


DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.TEAM_EXISTS: "team already exists",
    ErrorCode.PR_EXISTS: "pull request already exists",
    ErrorCode.PR_MERGED: "pull request already merged",
    ErrorCode.NOT_ASSIGNED: "reviewer not assigned",
    ErrorCode.NO_CANDIDATE: "no replacement candidate",
    ErrorCode.NOT_FOUND: "not found",
    ErrorCode.BAD_REQUEST: "bad request",
    ErrorCode.INTERNAL: "internal error",
}

HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.TEAM_EXISTS: 400,
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.PR_EXISTS: 409,
    ErrorCode.PR_MERGED: 409,
    ErrorCode.NOT_ASSIGNED: 409,
    ErrorCode.NO_CANDIDATE: 409,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INTERNAL: 500,
}


class DomainError(Exception):
    """Raised when a request violates a domain rule or references a missing entity."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or DEFAULT_MESSAGES[code]
        super().__init__(self.message)

    @property
    def http_status(self) -> int:
        return http_status_for(self.code)

    def __repr__(self) -> str:
        return f"DomainError({self.code.value}: {self.message})"


def http_status_for(code: ErrorCode) -> int:
    """Map an error kind to its HTTP status; unknown kinds are internal."""
    return HTTP_STATUS_BY_CODE.get(code, 500)


def not_found(what: str, identifier: str) -> DomainError:
    """Build a NOT_FOUND error naming the missing entity."""
    return DomainError(ErrorCode.NOT_FOUND, f"{what} '{identifier}' not found")
