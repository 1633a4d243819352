"""
Transport exceptions for the logistics API client

These describe failures talking to the remote API. They are kept apart from
the dispatching domain errors so a rejected business rule is never confused
with a request that failed to reach the server.
"""

from typing import Any, Optional


class LogisticsApiError(Exception):
    """Base exception for all logistics API failures"""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class NetworkOrServerError(LogisticsApiError):
    """Raised when the request did not reach the server, timed out, or the server failed (5xx)"""
    pass


class MalformedResponseError(NetworkOrServerError):
    """Raised when the server answered but the body could not be understood"""
    pass


class ApiNotFound(LogisticsApiError):
    """Raised when the API answers 404 for the requested resource"""
    pass


class ApiRequestRejected(LogisticsApiError):
    """Raised when the API rejects the request (4xx other than 404)"""
    pass
