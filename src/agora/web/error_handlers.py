import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from agora.errors import (
    ConcurrentModificationError,
    ExhaustedRetriesError,
    NotFoundError,
    PersistenceVerificationError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def service_error_handler(_: Request, exc: Exception) -> Response:
    """Handle engine failures; messages are generic so store details are not leaked."""
    if isinstance(exc, ConcurrentModificationError):
        return create_json_error_response(409, "The session changed concurrently, please retry.", "conflict")
    if isinstance(exc, ExhaustedRetriesError):
        return create_json_error_response(503, "Could not allocate a session code, please retry.", "exhausted_retries")
    if isinstance(exc, PersistenceVerificationError):
        logger.error("Persistence verification failed: %s", exc)
        return create_json_error_response(500, "The change could not be verified.", "persistence_verification_error")
    if isinstance(exc, StoreError):
        logger.error("Store error: %s", exc)
        return create_json_error_response(503, "The session store is unavailable.", "store_error")

    logger.exception("Unexpected service error: %s", exc)
    return create_json_error_response(500, "An unexpected error occurred.", "internal_server_error")


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
