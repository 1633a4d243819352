"""
Error responses for the dispatching blueprint

Business-rule rejections, bad input and transport failures each get their
own status code and message so the console can tell "the request was
refused" apart from "the request never made it".
"""

from flask import jsonify

from dispatch_console.business.dispatching.errors import (
    AlreadyTerminal,
    BookingNotFound,
    DispatchConflictError,
    DispatchConsistencyError,
    DispatchDomainError,
    DispatchNotFound,
    DispatchPolicyViolation,
    DispatchTransitionError,
    ValidationError,
)
from dispatch_console.data.api.errors import (
    ApiNotFound,
    ApiRequestRejected,
    LogisticsApiError,
    NetworkOrServerError,
)
from dispatch_console.logger import get_logger
from dispatch_console.presentation.routes.dispatching import describe_request, dispatching_bp
from dispatch_console.utils.logging_sanitizer import sanitize_exception_message

logger = get_logger("dispatch_console.routes.dispatching")

# Most specific first
DOMAIN_STATUS_CODES = (
    (ValidationError, 400),
    (DispatchNotFound, 404),
    (BookingNotFound, 404),
    (AlreadyTerminal, 409),
    (DispatchTransitionError, 409),
    (DispatchPolicyViolation, 409),
    (DispatchConflictError, 409),
    (DispatchConsistencyError, 502),
)


def _status_for(error: DispatchDomainError) -> int:
    for error_class, status in DOMAIN_STATUS_CODES:
        if isinstance(error, error_class):
            return status
    return 400


def error_payload(error: Exception, **extra) -> dict:
    payload = {
        'error': type(error).__name__,
        'message': str(error),
    }
    payload.update(extra)
    return payload


@dispatching_bp.errorhandler(DispatchDomainError)
def handle_domain_error(error: DispatchDomainError):
    status = _status_for(error)
    logger.warning(f"{type(error).__name__} ({status}) on {describe_request()}: {error}")

    extra = {}
    if isinstance(error, DispatchTransitionError):
        extra['current_status'] = getattr(error.current_status, 'value', error.current_status)
        extra['allowed_transitions'] = error.allowed
    if isinstance(error, ValidationError) and error.field:
        extra['field'] = error.field
    if isinstance(error, DispatchConsistencyError):
        extra['retryable'] = True
    return jsonify(error_payload(error, **extra)), status


@dispatching_bp.errorhandler(LogisticsApiError)
def handle_api_error(error: LogisticsApiError):
    if isinstance(error, NetworkOrServerError):
        status, retryable = 503, True
    elif isinstance(error, ApiNotFound):
        status, retryable = 404, False
    elif isinstance(error, ApiRequestRejected):
        status, retryable = 502, False
    else:
        status, retryable = 502, True

    logger.error(
        f"Logistics API failure ({error.status_code}) on {describe_request()}: "
        f"{sanitize_exception_message(error)}"
    )
    return jsonify(error_payload(error, retryable=retryable, upstream_status=error.status_code)), status
