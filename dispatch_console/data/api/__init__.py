from dispatch_console.data.api.client import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    MAX_PAGE_LIMIT,
    LogisticsApiClient,
    clamp_page,
)
from dispatch_console.data.api.errors import (
    LogisticsApiError,
    NetworkOrServerError,
    MalformedResponseError,
    ApiNotFound,
    ApiRequestRejected,
)

__all__ = [
    'DEFAULT_API_URL',
    'DEFAULT_TIMEOUT',
    'MAX_PAGE_LIMIT',
    'LogisticsApiClient',
    'clamp_page',
    'LogisticsApiError',
    'NetworkOrServerError',
    'MalformedResponseError',
    'ApiNotFound',
    'ApiRequestRejected',
]
