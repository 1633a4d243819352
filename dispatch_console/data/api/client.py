"""
Logistics API client

Thin request/response wrapper over the remote logistics API. It owns no
business rules: every call is a single HTTP request, failures are raised as
transport exceptions and nothing is retried here.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from dispatch_console.data.api.errors import (
    ApiNotFound,
    ApiRequestRejected,
    MalformedResponseError,
    NetworkOrServerError,
)
from dispatch_console.data.dispatching import Booking, Dispatch, DispatchStatus, Driver
from dispatch_console.data.wire import format_datetime
from dispatch_console.logger import get_logger
from dispatch_console.utils.logging_sanitizer import sanitize_dict, sanitize_headers

logger = get_logger("dispatch_console.api")

DEFAULT_API_URL = 'http://localhost:8000/api/v1'
DEFAULT_TIMEOUT = 10.0
MAX_PAGE_LIMIT = 100


def clamp_page(skip: int = 0, limit: int = MAX_PAGE_LIMIT) -> Dict[str, int]:
    """Clamp pagination to what the API accepts (skip >= 0, 1 <= limit <= 100)."""
    return {
        'skip': max(int(skip), 0),
        'limit': min(max(int(limit), 1), MAX_PAGE_LIMIT),
    }


class LogisticsApiClient:
    """
    Client for the dispatch, booking and fleet endpoints of the logistics API.

    Usage:
        client = LogisticsApiClient(base_url, token=token)
        dispatch = client.get_dispatch(7)
        client.update_dispatch_status(7, DispatchStatus.DISPATCHED, dispatch_time=now)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'
        logger.debug(f"API client for {self.base_url} headers={sanitize_headers(self.session.headers)}")

    # ========== Transport ==========

    def _request(self, method: str, path: str, params: Optional[Dict] = None, payload: Optional[Dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"API {method} {url} params={params} body={sanitize_dict(payload) if payload else None}")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkOrServerError(f"Request to {path} timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise NetworkOrServerError(f"Could not reach the logistics API: {e.__class__.__name__}") from e

        logger.debug(f"API {method} {url} -> {response.status_code}")

        if not response.ok:
            raise self._error_from_response(response)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Logistics API returned a non-JSON body for {path}",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _error_from_response(response: requests.Response):
        """Translate an unsuccessful response into a transport exception."""
        status = response.status_code
        fallback = f"HTTP error! status: {status} - {response.reason}"

        if status >= 500:
            return NetworkOrServerError(f"Logistics API server error: {status} - {response.reason}", status_code=status)

        try:
            body = response.json()
        except ValueError:
            body = None

        detail = body.get('detail') if isinstance(body, dict) else None

        if status == 404:
            message = detail if isinstance(detail, str) else "Resource not found"
            return ApiNotFound(message, status_code=status, detail=detail)

        if status == 422 and isinstance(detail, list):
            parts = []
            for error in detail:
                loc = error.get('loc') if isinstance(error, dict) else None
                field = '.'.join(str(p) for p in loc) if loc else 'unknown'
                msg = error.get('msg', '') if isinstance(error, dict) else str(error)
                parts.append(f"{field}: {msg}")
            message = f"Validation error: {', '.join(parts)}"
        elif status == 401:
            message = "Authentication required. Please log in again."
        elif status == 403:
            message = "Access denied. You do not have permission to perform this action."
        elif isinstance(detail, str):
            message = detail
        elif detail is not None:
            message = f"API Error: {json.dumps(detail, default=str)}"
        else:
            message = fallback

        return ApiRequestRejected(message, status_code=status, detail=detail)

    @staticmethod
    def _parse(factory, payload: Any, what: str):
        try:
            return factory(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponseError(f"Logistics API returned an invalid {what}: {e}") from e

    def _parse_list(self, factory, payload: Any, what: str) -> list:
        if not isinstance(payload, list):
            # Some list endpoints wrap results as {"data": [...]}
            payload = payload.get('data') if isinstance(payload, dict) else None
            if not isinstance(payload, list):
                raise MalformedResponseError(f"Logistics API returned an invalid {what} list")
        return [self._parse(factory, item, what) for item in payload]

    # ========== Dispatches ==========

    def get_dispatch(self, dispatch_id: int) -> Dispatch:
        return self._parse(Dispatch.from_api, self._request('GET', f'/dispatches/{dispatch_id}'), 'dispatch')

    def get_dispatch_by_booking(self, booking_id: int) -> Dispatch:
        """Raises ApiNotFound when the booking has no dispatch."""
        return self._parse(Dispatch.from_api, self._request('GET', f'/dispatches/booking/{booking_id}'), 'dispatch')

    def list_dispatches(
        self,
        status: Optional[DispatchStatus] = None,
        booking_id: Optional[int] = None,
        assigned_driver: Optional[int] = None,
        skip: int = 0,
        limit: int = MAX_PAGE_LIMIT,
    ) -> List[Dispatch]:
        params: Dict[str, Any] = {}
        if status:
            params['status'] = DispatchStatus(status).value
        if booking_id:
            params['booking_id'] = booking_id
        if assigned_driver:
            params['assigned_driver'] = assigned_driver
        params.update(clamp_page(skip, limit))
        return self._parse_list(Dispatch.from_api, self._request('GET', '/dispatches/', params=params), 'dispatch')

    def list_dispatches_by_status(self, status: DispatchStatus, skip: int = 0, limit: int = MAX_PAGE_LIMIT) -> List[Dispatch]:
        status = DispatchStatus(status)
        payload = self._request('GET', f'/dispatches/status/{status.value}', params=clamp_page(skip, limit))
        return self._parse_list(Dispatch.from_api, payload, 'dispatch')

    def list_dispatches_by_driver(self, driver_id: int, skip: int = 0, limit: int = MAX_PAGE_LIMIT) -> List[Dispatch]:
        payload = self._request('GET', f'/dispatches/driver/{driver_id}', params=clamp_page(skip, limit))
        return self._parse_list(Dispatch.from_api, payload, 'dispatch')

    def create_dispatch(self, booking_id: int) -> Dispatch:
        payload = self._request('POST', '/dispatches/', payload={'booking_id': booking_id})
        return self._parse(Dispatch.from_api, payload, 'dispatch')

    def update_dispatch_status(
        self,
        dispatch_id: int,
        status: DispatchStatus,
        dispatch_time: Optional[datetime] = None,
        arrival_time: Optional[datetime] = None,
    ) -> Dispatch:
        body: Dict[str, Any] = {'status': DispatchStatus(status).value}
        # Timestamps are only sent when being set; absence never becomes ""
        if dispatch_time is not None:
            body['dispatch_time'] = format_datetime(dispatch_time)
        if arrival_time is not None:
            body['arrival_time'] = format_datetime(arrival_time)
        payload = self._request('PATCH', f'/dispatches/{dispatch_id}/status', payload=body)
        return self._parse(Dispatch.from_api, payload, 'dispatch')

    def update_dispatch(self, dispatch_id: int, fields: Dict[str, Any]) -> Dispatch:
        body = {
            key: format_datetime(value) if isinstance(value, datetime) else value
            for key, value in fields.items()
        }
        payload = self._request('PUT', f'/dispatches/{dispatch_id}', payload=body)
        return self._parse(Dispatch.from_api, payload, 'dispatch')

    def assign_driver(self, dispatch_id: int, driver_id: int) -> Dispatch:
        payload = self._request('PUT', f'/dispatches/{dispatch_id}/assign-driver', params={'driver_id': driver_id})
        return self._parse(Dispatch.from_api, payload, 'dispatch')

    # ========== Bookings / fleet ==========

    def get_booking(self, booking_id: int) -> Booking:
        return self._parse(Booking.from_api, self._request('GET', f'/bookings/{booking_id}'), 'booking')

    def get_driver(self, driver_id: int) -> Driver:
        return self._parse(Driver.from_api, self._request('GET', f'/fleet/drivers/{driver_id}'), 'driver')

    def list_available_drivers(self) -> List[Driver]:
        payload = self._request('GET', '/dispatches/available-drivers')
        return self._parse_list(Driver.from_api, payload, 'driver')

    def ping(self) -> bool:
        """Cheap reachability probe used by the run script."""
        self._request('GET', '/dispatches/', params=clamp_page(0, 1))
        return True
