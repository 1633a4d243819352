"""
Dispatch Service
Presentation service for dispatch table data retrieval and filtering.
"""

from typing import Dict, List, Tuple

from flask import Request, current_app

from dispatch_console.business.dispatching.context import fetch_booking
from dispatch_console.business.dispatching.errors import BookingNotFound
from dispatch_console.business.dispatching.narrator import DispatchNarrator
from dispatch_console.business.dispatching.parsing import parse_id, parse_page, parse_status
from dispatch_console.business.dispatching.views import DispatchRow, summarize_statuses
from dispatch_console.data.api import LogisticsApiClient


def _default_limit():
    return current_app.config.get('DISPATCH_PAGE_LIMIT')


class DispatchService:
    """
    Service for dispatch presentation data.

    Provides methods for:
    - Filtered, paginated dispatch tables
    - Driver-scoped tables with status counts
    - Booking preview for the creation form
    - Available drivers for assignment
    """

    @staticmethod
    def get_filters(request: Request) -> Dict:
        """
        Extract and validate filter parameters from the query string.

        Raises:
            ValidationError: If any filter is malformed
        """
        args = request.args
        skip, limit = parse_page(args.get('skip'), args.get('limit') or _default_limit())
        status = args.get('status')
        booking_id = args.get('booking_id')
        assigned_driver = args.get('assigned_driver')
        return {
            'status': parse_status(status) if status else None,
            'booking_id': parse_id(booking_id, 'booking_id') if booking_id else None,
            'assigned_driver': parse_id(assigned_driver, 'assigned_driver') if assigned_driver else None,
            'skip': skip,
            'limit': limit,
        }

    @staticmethod
    def get_list_data(api: LogisticsApiClient, request: Request) -> Tuple[List[DispatchRow], Dict]:
        """
        Get a page of dispatch rows with filters applied.

        Returns:
            Tuple of (rows, applied filters)
        """
        filters = DispatchService.get_filters(request)

        if filters['status'] and not filters['booking_id'] and not filters['assigned_driver']:
            dispatches = api.list_dispatches_by_status(filters['status'], filters['skip'], filters['limit'])
        else:
            dispatches = api.list_dispatches(**filters)

        rows = [DispatchRow.from_dispatch(d) for d in dispatches]
        applied = {
            key: getattr(value, 'value', value)
            for key, value in filters.items()
        }
        return rows, applied

    @staticmethod
    def get_driver_data(api: LogisticsApiClient, driver_id, request: Request) -> Tuple[List[DispatchRow], Dict[str, int]]:
        """
        Get a driver's dispatch rows and per-status counts.
        """
        driver_id = parse_id(driver_id, 'driver_id')
        skip, limit = parse_page(request.args.get('skip'), request.args.get('limit') or _default_limit())
        dispatches = api.list_dispatches_by_driver(driver_id, skip, limit)
        rows = [DispatchRow.from_dispatch(d) for d in dispatches]
        return rows, summarize_statuses(dispatches)

    @staticmethod
    def get_booking_preview(api: LogisticsApiClient, booking_id) -> Dict:
        """
        Booking details shown on the creation form before submission.

        Raises:
            BookingNotFound: If the booking does not exist
        """
        booking_id = parse_id(booking_id, 'booking_id')
        booking = fetch_booking(api, booking_id)
        if booking is None:
            raise BookingNotFound(DispatchNarrator.booking_not_found(booking_id), booking_id=booking_id)
        return booking.to_api()

    @staticmethod
    def get_available_drivers(api: LogisticsApiClient) -> List[Dict]:
        return [driver.to_api() for driver in api.list_available_drivers() if driver.is_available]
