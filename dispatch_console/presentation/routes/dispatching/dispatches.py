"""
Dispatch read routes: tables, detail panel, lookups
"""

from flask import jsonify, request

from dispatch_console.business.dispatching.context import DispatchContext
from dispatch_console.business.dispatching.state_machine import DispatchStateMachine
from dispatch_console.business.dispatching.parsing import parse_status
from dispatch_console.business.dispatching.views import DispatchRow, build_actions
from dispatch_console.presentation.routes.dispatching import dispatching_bp, get_api
from dispatch_console.services.dispatching.dispatch_service import DispatchService


@dispatching_bp.get('/api/dispatches')
def dispatches_list():
    """List dispatches with filtering and pagination"""
    rows, filters = DispatchService.get_list_data(get_api(), request)
    return jsonify({
        'items': [row.to_dict() for row in rows],
        'filters': filters,
        'count': len(rows),
    })


@dispatching_bp.get('/api/dispatches/<int:dispatch_id>')
def dispatches_detail(dispatch_id):
    ctx = DispatchContext.load(get_api(), dispatch_id)
    return jsonify(DispatchRow.from_dispatch(ctx.dispatch).to_dict())


@dispatching_bp.get('/api/dispatches/<int:dispatch_id>/details')
def dispatches_with_details(dispatch_id):
    """Dispatch joined with its booking and driver"""
    ctx = DispatchContext.load(get_api(), dispatch_id)
    return jsonify(ctx.load_details().to_dict())


@dispatching_bp.get('/api/bookings/<int:booking_id>/dispatch')
def dispatch_for_booking(booking_id):
    ctx = DispatchContext.for_booking(get_api(), booking_id)
    return jsonify(DispatchRow.from_dispatch(ctx.dispatch).to_dict())


@dispatching_bp.get('/api/bookings/<int:booking_id>/preview')
def booking_preview(booking_id):
    """Booking details for the creation form"""
    return jsonify(DispatchService.get_booking_preview(get_api(), booking_id))


@dispatching_bp.get('/api/drivers/<int:driver_id>/dispatches')
def driver_dispatches(driver_id):
    rows, summary = DispatchService.get_driver_data(get_api(), driver_id, request)
    return jsonify({
        'driver_id': driver_id,
        'items': [row.to_dict() for row in rows],
        'summary': summary,
    })


@dispatching_bp.get('/api/drivers/available')
def available_drivers():
    return jsonify({'items': DispatchService.get_available_drivers(get_api())})


@dispatching_bp.get('/api/statuses/<status>/transitions')
def status_transitions(status):
    """Allowed next statuses for a status (no API call)"""
    status = parse_status(status)
    return jsonify({
        'status': status.value,
        'is_terminal': DispatchStateMachine.is_terminal(status),
        'allowed_actions': build_actions(status),
    })
