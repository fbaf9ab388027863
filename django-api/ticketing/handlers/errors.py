"""Maps domain errors and DRF exceptions to the API error body.

Every error response has the shape::

    {"error": {"code": "...", "message": "...", **details}}

Expected business outcomes are logged at INFO; only unexpected exceptions are
logged as failures, and they never leak detail to the caller.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ticketing.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TIER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PAYOUT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CAGNOTTE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONTRIBUTION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.AGENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NOT_OWNER: status.HTTP_403_FORBIDDEN,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.AGENT_BLOCKED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorCode.RESTORE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.CAGNOTTE_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_PAID_OUT: status.HTTP_409_CONFLICT,
    ErrorCode.INSUFFICIENT_BALANCE: status.HTTP_409_CONFLICT,
}

# DRF exceptions, most specific first.
API_EXCEPTION_CODES: list[tuple[type[exceptions.APIException], str]] = [
    (exceptions.ValidationError, ErrorCode.VALIDATION_ERROR.value),
    (exceptions.ParseError, ErrorCode.VALIDATION_ERROR.value),
    (exceptions.NotAuthenticated, "UNAUTHENTICATED"),
    (exceptions.AuthenticationFailed, "UNAUTHENTICATED"),
    (exceptions.PermissionDenied, ErrorCode.FORBIDDEN.value),
    (exceptions.NotFound, "NOT_FOUND"),
    (exceptions.MethodNotAllowed, "METHOD_NOT_ALLOWED"),
    (exceptions.Throttled, "THROTTLED"),
]


def error_body(code: str, message: str, **details) -> dict:
    return {"error": {"code": code, "message": message, **details}}


def _domain_response(exc: DomainError) -> Response:
    http_status = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    logger.info("Request refused with %s: %s", exc.code.value, exc.message)
    return Response(
        error_body(exc.code.value, exc.message, **exc.details()),
        status=http_status,
    )


def _api_code(exc: exceptions.APIException) -> str:
    for exc_type, code in API_EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return code
    return str(exc.default_code).upper()


def api_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER`` for the ticketing API."""
    if isinstance(exc, DomainError):
        return _domain_response(exc)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", type(view).__name__ if view else "request", exc_info=exc
        )
        return Response(
            error_body("INTERNAL", "Internal server error"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = error_body(
            ErrorCode.VALIDATION_ERROR.value, "Invalid request", fields=response.data
        )
    elif isinstance(exc, exceptions.Throttled):
        response.data = error_body("THROTTLED", str(exc.detail), retry_after=exc.wait)
    elif isinstance(exc, exceptions.APIException):
        response.data = error_body(_api_code(exc), str(exc.detail))
    elif response.status_code == status.HTTP_404_NOT_FOUND:
        response.data = error_body("NOT_FOUND", "Not found")
    else:
        response.data = error_body(ErrorCode.FORBIDDEN.value, "Access denied")
    return response
