"""
Pytest configuration and fixtures for the dispatch console tests
"""
import os

# Keep test runs off the log files
os.environ.setdefault('LOG_TO_FILE', 'False')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402

from dispatch_console import create_app  # noqa: E402
from dispatch_console.data.api import ApiNotFound, ApiRequestRejected  # noqa: E402
from dispatch_console.data.dispatching import (  # noqa: E402
    Booking,
    BookingStatus,
    Dispatch,
    DispatchStatus,
    Driver,
    ServiceType,
)

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


class FakeLogisticsApi:
    """
    In-memory stand-in for LogisticsApiClient.

    Behaves like a permissive backend: it stores whatever it is sent and
    records every call so tests can check what the console asked for.
    """

    def __init__(self):
        self.dispatches = {}
        self.bookings = {}
        self.drivers = {}
        self.calls = []
        self.failures = {}
        self._next_id = 1

    # ----- seeding -----

    def add_booking(self, booking_id, **fields):
        booking = Booking(
            booking_id=booking_id,
            source=fields.get('source', 'Warehouse A'),
            destination=fields.get('destination', 'Depot B'),
            service_type=fields.get('service_type', ServiceType.CARGO),
            price=fields.get('price', 250.0),
            booking_status=fields.get('booking_status', BookingStatus.CONFIRMED),
        )
        self.bookings[booking_id] = booking
        return booking

    def add_driver(self, driver_id, is_available=True, employee_id=None):
        driver = Driver(
            id=driver_id,
            employee_id=employee_id or f'EMP-{driver_id:03d}',
            is_available=is_available,
            status='active',
        )
        self.drivers[driver_id] = driver
        return driver

    def add_dispatch(self, booking_id, status=DispatchStatus.PENDING, **fields):
        dispatch_id = fields.pop('dispatch_id', None) or self._next_id
        self._next_id = max(self._next_id, dispatch_id) + 1
        dispatch = Dispatch(dispatch_id=dispatch_id, booking_id=booking_id, status=status, **fields)
        self.dispatches[dispatch_id] = dispatch
        return dispatch

    def fail(self, method, error):
        """Make the next call to ``method`` raise ``error``."""
        self.failures[method] = error

    def calls_to(self, method):
        return [args for name, args in self.calls if name == method]

    def _record(self, method, *args):
        self.calls.append((method, args))
        if method in self.failures:
            raise self.failures.pop(method)

    def _get(self, dispatch_id):
        if dispatch_id not in self.dispatches:
            raise ApiNotFound("Dispatch not found", status_code=404)
        return self.dispatches[dispatch_id]

    def _store(self, dispatch, **changes):
        updated = dispatch.with_changes(updated_at=T0, **changes)
        self.dispatches[dispatch.dispatch_id] = updated
        return updated

    # ----- LogisticsApiClient interface -----

    def get_dispatch(self, dispatch_id):
        self._record('get_dispatch', dispatch_id)
        return self._get(dispatch_id)

    def get_dispatch_by_booking(self, booking_id):
        self._record('get_dispatch_by_booking', booking_id)
        for dispatch in self.dispatches.values():
            if dispatch.booking_id == booking_id:
                return dispatch
        raise ApiNotFound("Dispatch not found for booking", status_code=404)

    def list_dispatches(self, status=None, booking_id=None, assigned_driver=None, skip=0, limit=100):
        self._record('list_dispatches', status, booking_id, assigned_driver, skip, limit)
        items = [
            d for d in self.dispatches.values()
            if (status is None or d.status == status)
            and (booking_id is None or d.booking_id == booking_id)
            and (assigned_driver is None or d.assigned_driver == assigned_driver)
        ]
        return items[skip:skip + limit]

    def list_dispatches_by_status(self, status, skip=0, limit=100):
        self._record('list_dispatches_by_status', status, skip, limit)
        items = [d for d in self.dispatches.values() if d.status == status]
        return items[skip:skip + limit]

    def list_dispatches_by_driver(self, driver_id, skip=0, limit=100):
        self._record('list_dispatches_by_driver', driver_id, skip, limit)
        items = [d for d in self.dispatches.values() if d.assigned_driver == driver_id]
        return items[skip:skip + limit]

    def create_dispatch(self, booking_id):
        self._record('create_dispatch', booking_id)
        if any(d.booking_id == booking_id for d in self.dispatches.values()):
            raise ApiRequestRejected("Dispatch already exists for this booking", status_code=400)
        return self.add_dispatch(booking_id, created_at=T0)

    def update_dispatch_status(self, dispatch_id, status, dispatch_time=None, arrival_time=None):
        self._record('update_dispatch_status', dispatch_id, status, dispatch_time, arrival_time)
        changes = {'status': DispatchStatus(status)}
        if dispatch_time is not None:
            changes['dispatch_time'] = dispatch_time
        if arrival_time is not None:
            changes['arrival_time'] = arrival_time
        return self._store(self._get(dispatch_id), **changes)

    def update_dispatch(self, dispatch_id, fields):
        self._record('update_dispatch', dispatch_id, dict(fields))
        return self._store(self._get(dispatch_id), **fields)

    def assign_driver(self, dispatch_id, driver_id):
        self._record('assign_driver', dispatch_id, driver_id)
        return self._store(self._get(dispatch_id), assigned_driver=driver_id)

    def get_booking(self, booking_id):
        self._record('get_booking', booking_id)
        if booking_id not in self.bookings:
            raise ApiNotFound("Booking not found", status_code=404)
        return self.bookings[booking_id]

    def get_driver(self, driver_id):
        self._record('get_driver', driver_id)
        if driver_id not in self.drivers:
            raise ApiNotFound("Driver not found", status_code=404)
        return self.drivers[driver_id]

    def list_available_drivers(self):
        self._record('list_available_drivers')
        return [d for d in self.drivers.values() if d.is_available]

    def ping(self):
        self._record('ping')
        return True


@pytest.fixture
def fake_api():
    """Empty in-memory logistics API"""
    return FakeLogisticsApi()


@pytest.fixture
def app(fake_api):
    """Create Flask application for testing"""
    app = create_app({
        'SECRET_KEY': 'test-secret-key',
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'LOGISTICS_API_CLIENT': fake_api,
    })

    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Create Flask test client"""
    return app.test_client()
