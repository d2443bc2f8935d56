"""Translate domain errors into HTTP responses."""

from fastapi import HTTPException

from mythra_engine.common.exceptions import (
    ConcurrentModificationError,
    EventNotFoundError,
    MythraError,
    QuestionNotFoundError,
    TicketNotFoundError,
    TransitionRejectedError,
)

_NOT_FOUND = (EventNotFoundError, QuestionNotFoundError, TicketNotFoundError)
_FORBIDDEN_CODES = {"FORBIDDEN", "UNAUTHORIZED"}
_CONFLICT_CODES = {"TICKET_ALREADY_USED"}


def status_for(exc: MythraError) -> int:
    if isinstance(exc, _NOT_FOUND):
        return 404
    if isinstance(exc, ConcurrentModificationError):
        return 409
    if isinstance(exc, TransitionRejectedError):
        if exc.code == "UNAUTHORIZED":
            return 403
        if exc.code == "GUARD_FAILED":
            return 422
        return 409
    if exc.code in _FORBIDDEN_CODES:
        return 403
    if exc.code in _CONFLICT_CODES:
        return 409
    return 400


def http_error(exc: MythraError) -> HTTPException:
    """Build an HTTPException whose detail has the ErrorResponse shape."""
    detail = {"error": exc.message, "code": exc.code, "detail": ""}
    if isinstance(exc, TransitionRejectedError):
        detail["detail"] = exc.reason or ""
        if exc.result.voting is not None:
            voting = exc.result.voting
            detail["voting"] = {
                "total_votes": voting.total_votes,
                "expected_votes": voting.expected_votes,
                "pending_investors": list(voting.pending_investors),
            }
    return HTTPException(status_code=status_for(exc), detail=detail)
