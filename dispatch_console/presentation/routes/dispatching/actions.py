"""
Dispatch mutation routes: create, status change, cancel, driver, timestamps

Responses always carry the record returned by the logistics API; nothing is
echoed back from the request.
"""

from flask import jsonify

from dispatch_console import limiter
from dispatch_console.business.dispatching.context import DispatchContext
from dispatch_console.business.dispatching.errors import ValidationError
from dispatch_console.business.dispatching.parsing import parse_status, parse_timestamp
from dispatch_console.business.dispatching.views import DispatchRow
from dispatch_console.presentation.routes.dispatching import dispatching_bp, get_api, request_data

MUTATION_LIMIT = "30 per minute"


@dispatching_bp.post('/api/dispatches')
@limiter.limit(MUTATION_LIMIT)
def dispatches_create():
    data = request_data()
    if 'booking_id' not in data:
        raise ValidationError("booking_id is required", field='booking_id')
    ctx = DispatchContext.create(get_api(), data['booking_id'])
    return jsonify(DispatchRow.from_dispatch(ctx.dispatch).to_dict()), 201


@dispatching_bp.post('/api/dispatches/<int:dispatch_id>/status')
@limiter.limit(MUTATION_LIMIT)
def dispatches_update_status(dispatch_id):
    data = request_data()
    target = parse_status(data.get('status'))
    dispatch_time = parse_timestamp(data.get('dispatch_time'), 'dispatch_time')
    arrival_time = parse_timestamp(data.get('arrival_time'), 'arrival_time')

    ctx = DispatchContext.for_update(get_api(), dispatch_id)
    ctx.transition(target, dispatch_time=dispatch_time, arrival_time=arrival_time)
    return jsonify(DispatchRow.from_dispatch(ctx.dispatch).to_dict())


@dispatching_bp.post('/api/dispatches/<int:dispatch_id>/cancel')
@limiter.limit(MUTATION_LIMIT)
def dispatches_cancel(dispatch_id):
    ctx = DispatchContext.for_update(get_api(), dispatch_id)
    ctx.cancel()
    return jsonify(DispatchRow.from_dispatch(ctx.dispatch).to_dict())


@dispatching_bp.post('/api/dispatches/<int:dispatch_id>/driver')
@limiter.limit(MUTATION_LIMIT)
def dispatches_assign_driver(dispatch_id):
    data = request_data()
    if 'driver_id' not in data:
        raise ValidationError("driver_id is required", field='driver_id')
    ctx = DispatchContext.for_update(get_api(), dispatch_id)
    ctx.assign_driver(data['driver_id'])
    return jsonify(DispatchRow.from_dispatch(ctx.dispatch).to_dict())


@dispatching_bp.post('/api/dispatches/<int:dispatch_id>/timestamps')
@limiter.limit(MUTATION_LIMIT)
def dispatches_record_timestamp(dispatch_id):
    data = request_data()
    when = parse_timestamp(data.get('value'), 'value')
    ctx = DispatchContext.for_update(get_api(), dispatch_id)
    ctx.record_timestamp(data.get('field'), when)
    return jsonify(DispatchRow.from_dispatch(ctx.dispatch).to_dict())