"""
Tests for dispatch read models: table rows, detail join, status summary.
"""

import pytest

from dispatch_console.business.dispatching.errors import IncompleteJoin
from dispatch_console.business.dispatching.views import (
    DispatchRow,
    assemble_dispatch_view,
    build_actions,
    summarize_statuses,
)
from dispatch_console.data.dispatching import (
    Booking,
    BookingStatus,
    Dispatch,
    DispatchStatus,
    Driver,
    ServiceType,
)

BOOKING = Booking(
    booking_id=42,
    source='Warehouse A',
    destination='Depot B',
    service_type=ServiceType.CARGO,
    price=250.0,
    booking_status=BookingStatus.CONFIRMED,
)
DRIVER = Driver(id=3, employee_id='EMP-003', is_available=True)


def test_actions_put_cancel_last():
    assert build_actions(DispatchStatus.ARRIVED) == [
        {'status': 'completed', 'label': 'Complete'},
        {'status': 'cancelled', 'label': 'Cancel Dispatch'},
    ]
    assert build_actions('completed') == []


def test_row_for_open_dispatch():
    row = DispatchRow.from_dispatch(Dispatch(dispatch_id=1, booking_id=42, status=DispatchStatus.IN_TRANSIT))
    data = row.to_dict()

    assert data['status'] == 'in_transit'
    assert data['status_label'] == 'In Transit'
    assert [a['status'] for a in data['allowed_actions']] == ['arrived', 'cancelled']
    assert data['can_cancel'] is True
    assert data['is_terminal'] is False
    assert data['dispatch_time'] is None


def test_row_for_finished_dispatch():
    row = DispatchRow.from_dispatch(Dispatch(dispatch_id=1, booking_id=42, status=DispatchStatus.CANCELLED))
    assert row.actions == []
    assert not row.can_cancel
    assert row.is_terminal


def test_assemble_dispatch_view():
    dispatch = Dispatch(dispatch_id=1, booking_id=42, assigned_driver=3)
    view = assemble_dispatch_view(dispatch, BOOKING, DRIVER)

    assert view.next_action == {'status': 'dispatched', 'label': 'Dispatch'}
    data = view.to_dict()
    assert data['dispatch']['dispatch_id'] == 1
    assert data['booking']['service_type'] == 'cargo'
    assert data['driver']['employee_id'] == 'EMP-003'
    assert [a['status'] for a in data['allowed_actions']] == ['dispatched', 'cancelled']
    assert data['can_cancel'] is True


def test_assemble_dispatch_view_names_missing_parts():
    with pytest.raises(IncompleteJoin) as excinfo:
        assemble_dispatch_view(Dispatch(dispatch_id=1, booking_id=42), None, None)
    assert excinfo.value.missing == ['booking', 'driver']
    assert 'retry' in str(excinfo.value).lower()


def test_completed_view_has_no_next_action():
    dispatch = Dispatch(dispatch_id=1, booking_id=42, status=DispatchStatus.COMPLETED)
    view = assemble_dispatch_view(dispatch, BOOKING, DRIVER)
    assert view.next_action is None
    assert view.allowed_transitions == []
    assert view.can_cancel is False


def test_summarize_statuses():
    dispatches = [
        Dispatch(dispatch_id=1, booking_id=1, status=DispatchStatus.PENDING),
        Dispatch(dispatch_id=2, booking_id=2, status=DispatchStatus.PENDING),
        Dispatch(dispatch_id=3, booking_id=3, status=DispatchStatus.COMPLETED),
    ]
    summary = summarize_statuses(dispatches)
    assert summary == {
        'pending': 2,
        'dispatched': 0,
        'in_transit': 0,
        'arrived': 0,
        'completed': 1,
        'cancelled': 0,
    }
