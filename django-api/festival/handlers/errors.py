"""Mapping of domain errors to HTTP responses.

Only the error code and the user-safe message are exposed.
"""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from festival.domain.errors import DomainError, ErrorCode, ValidationError

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_FAILED: 400,
    ErrorCode.INVALID_ID: 400,
    ErrorCode.GATE_REJECTED: 403,
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.REGISTRATION_NOT_FOUND: 404,
    ErrorCode.SETTING_NOT_FOUND: 404,
    ErrorCode.RECORD_MISSING: 404,
    ErrorCode.EVENT_REFERENCE_MISSING: 409,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.DUPLICATE_RECORD: 409,
    ErrorCode.RELATIONSHIP_INCONSISTENT: 500,
    ErrorCode.DEPENDENCY_FAILED: 503,
}


def domain_exception_handler(exc, context):
    """DRF exception handler that understands DomainError."""
    if not isinstance(exc, DomainError):
        return exception_handler(exc, context)

    status = STATUS_BY_CODE[exc.code]
    if status >= 500:
        logger.error("%s while handling %s", exc, type(context.get("view")).__name__)
    body = {"code": exc.code.value, "message": exc.message}
    if isinstance(exc, ValidationError):
        body["errors"] = exc.errors
    return Response(body, status=status)
