"""
Translate failures into HTTP responses.

This is the only place a failure becomes something the client sees: the
routes and the exception handlers all hand a `Failure` to
`failure_response`.
"""

import logging

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from file_store.schemas import Failure, FailureKind

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Not Found"
PAYLOAD_TOO_LARGE_MESSAGE = "Payload too large"
INTERNAL_ERROR_MESSAGE = "Internal server error."

STATUS_BY_KIND = {
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.PAYLOAD_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    FailureKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    FailureKind.STORAGE: status.HTTP_400_BAD_REQUEST,
    FailureKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class PayloadTooLargeError(Exception):
    """Raised when a request body grows past the configured limit."""

    def __init__(self, limit: int):
        super().__init__(f"request body exceeds {limit} bytes")
        self.limit = limit


def failure_status(failure: Failure) -> int:
    return STATUS_BY_KIND[failure.kind]


def failure_message(failure: Failure) -> str:
    """Message shown to the client; only storage and request failures pass their detail through."""
    if failure.kind is FailureKind.NOT_FOUND:
        return NOT_FOUND_MESSAGE
    if failure.kind is FailureKind.PAYLOAD_TOO_LARGE:
        return PAYLOAD_TOO_LARGE_MESSAGE
    if failure.kind is FailureKind.INTERNAL:
        return INTERNAL_ERROR_MESSAGE
    return failure.detail


def failure_response(failure: Failure) -> PlainTextResponse:
    status_code = failure_status(failure)
    if failure.kind is FailureKind.NOT_FOUND:
        logger.warning("not found: %s", failure.detail)
    else:
        logger.error("%s failure (%s): %s", failure.kind.value, status_code, failure.detail)
    return PlainTextResponse(failure_message(failure), status_code=status_code)


async def handle_http_exceptions(request: Request, exc: StarletteHTTPException) -> Response:
    """Map Starlette's own errors (unknown path, wrong method) onto the failure table."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        failure = Failure(kind=FailureKind.NOT_FOUND, detail=f"{request.method} {request.url.path}")
    elif exc.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE:
        failure = Failure(kind=FailureKind.PAYLOAD_TOO_LARGE, detail=str(exc.detail))
    elif exc.status_code < 500:
        failure = Failure(kind=FailureKind.INVALID_REQUEST, detail=str(exc.detail))
    else:
        failure = Failure(kind=FailureKind.INTERNAL, detail=str(exc.detail))
    return failure_response(failure)


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> Response:
    errors = "; ".join(
        f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return failure_response(Failure(kind=FailureKind.INVALID_REQUEST, detail=errors))


async def handle_broad_exceptions(request: Request, call_next):
    """Turn any exception that escapes a route into a 500."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return failure_response(Failure(kind=FailureKind.INTERNAL, detail=repr(exc)))
