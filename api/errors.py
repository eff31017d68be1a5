"""Error taxonomy for the notes service and its HTTP mapping."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

# Initialize logger
logger = structlog.get_logger(__name__)


class NoteServiceError(Exception):
    """Base class for errors raised by the notes core."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class ValidationError(NoteServiceError):
    """A required field is missing or empty."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid note data"


class NoteNotFoundError(NoteServiceError):
    """The note does not exist or belongs to another owner."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Note not found"


class UnauthenticatedError(NoteServiceError):
    """No owner identity could be resolved for the caller."""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid authentication credentials"


class StoreUnavailableError(NoteServiceError):
    """The note store could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Note store unavailable"


class BulkOperationError(NoteServiceError):
    """Some items of a bulk operation failed; the rest were applied."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Bulk operation partially failed"

    def __init__(self, operation: str, completed: int, failed_ids: list[str]):
        super().__init__(
            f"{operation} failed for {len(failed_ids)} note(s) after {completed} succeeded"
        )
        self.operation = operation
        self.completed = completed
        self.failed_ids = failed_ids


def register_exception_handlers(app: FastAPI) -> None:
    """Map core errors to JSON responses with a ``detail`` field."""

    @app.exception_handler(NoteServiceError)
    async def _note_service_error_handler(request: Request, exc: NoteServiceError):
        if exc.status_code >= 500:
            logger.error(
                "request_failed",
                path=request.url.path,
                error=exc.detail,
                error_type=type(exc).__name__,
            )
        else:
            logger.info(
                "request_rejected",
                path=request.url.path,
                status_code=exc.status_code,
                error_type=type(exc).__name__,
            )

        body: dict = {"detail": exc.detail}
        if isinstance(exc, BulkOperationError):
            body["completed"] = exc.completed
            body["failed_ids"] = exc.failed_ids

        headers = None
        if isinstance(exc, UnauthenticatedError):
            headers = {"WWW-Authenticate": "Bearer"}

        return JSONResponse(status_code=exc.status_code, content=body, headers=headers)
