"""
Route tests for the dispatching blueprint and app setup.
"""

from datetime import datetime, timezone

import pytest

from dispatch_console import create_app
from dispatch_console.data.api import ApiRequestRejected, NetworkOrServerError
from dispatch_console.data.dispatching import DispatchStatus

T = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def test_create_app_requires_secret_key(monkeypatch):
    monkeypatch.delenv('SECRET_KEY', raising=False)
    with pytest.raises(RuntimeError):
        create_app()


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'ok'
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['X-Frame-Options'] == 'SAMEORIGIN'


# ----- reads -----

def test_list_dispatches(client, fake_api):
    fake_api.add_dispatch(1)
    fake_api.add_dispatch(2, status=DispatchStatus.ARRIVED, dispatch_time=T)

    response = client.get('/dispatching/api/dispatches')

    assert response.status_code == 200
    data = response.get_json()
    assert data['count'] == 2
    assert data['filters']['limit'] == 100
    assert [a['status'] for a in data['items'][1]['allowed_actions']] == ['completed', 'cancelled']


def test_list_dispatches_by_status_uses_status_endpoint(client, fake_api):
    fake_api.add_dispatch(1)
    fake_api.add_dispatch(2, status=DispatchStatus.CANCELLED)

    response = client.get('/dispatching/api/dispatches?status=Cancelled&limit=500')

    data = response.get_json()
    assert [item['booking_id'] for item in data['items']] == [2]
    assert data['filters']['status'] == 'cancelled'
    assert fake_api.calls_to('list_dispatches_by_status') == [(DispatchStatus.CANCELLED, 0, 100)]


def test_list_dispatches_rejects_bad_filter(client, fake_api):
    response = client.get('/dispatching/api/dispatches?status=lost')
    assert response.status_code == 400
    assert response.get_json()['field'] == 'status'
    assert fake_api.calls == []


def test_dispatch_detail_not_found(client):
    response = client.get('/dispatching/api/dispatches/404')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'DispatchNotFound'


def test_dispatch_details(client, fake_api):
    fake_api.add_booking(42)
    fake_api.add_driver(3)
    dispatch = fake_api.add_dispatch(42, assigned_driver=3)

    response = client.get(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/details')

    assert response.status_code == 200
    data = response.get_json()
    assert data['booking']['booking_id'] == 42
    assert data['driver']['employee_id'] == 'EMP-003'
    assert data['next_action'] == {'status': 'dispatched', 'label': 'Dispatch'}


def test_dispatch_details_incomplete_join_is_retryable(client, fake_api):
    dispatch = fake_api.add_dispatch(42)
    response = client.get(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/details')
    assert response.status_code == 502
    assert response.get_json()['retryable'] is True


def test_dispatch_for_booking(client, fake_api):
    fake_api.add_dispatch(42)
    assert client.get('/dispatching/api/bookings/42/dispatch').get_json()['booking_id'] == 42
    assert client.get('/dispatching/api/bookings/43/dispatch').status_code == 404


def test_booking_preview(client, fake_api):
    fake_api.add_booking(42, destination='Harbor')
    response = client.get('/dispatching/api/bookings/42/preview')
    assert response.get_json()['destination'] == 'Harbor'

    response = client.get('/dispatching/api/bookings/43/preview')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'BookingNotFound'


def test_driver_dispatches(client, fake_api):
    fake_api.add_dispatch(1, assigned_driver=3)
    fake_api.add_dispatch(2, assigned_driver=3, status=DispatchStatus.COMPLETED, dispatch_time=T, arrival_time=T)
    fake_api.add_dispatch(3, assigned_driver=4)

    data = client.get('/dispatching/api/drivers/3/dispatches').get_json()

    assert len(data['items']) == 2
    assert data['summary']['pending'] == 1
    assert data['summary']['completed'] == 1


def test_available_drivers(client, fake_api):
    fake_api.add_driver(3)
    fake_api.add_driver(4, is_available=False)
    data = client.get('/dispatching/api/drivers/available').get_json()
    assert [d['id'] for d in data['items']] == [3]


def test_status_transitions(client, fake_api):
    data = client.get('/dispatching/api/statuses/in_transit/transitions').get_json()
    assert [a['status'] for a in data['allowed_actions']] == ['arrived', 'cancelled']
    assert data['is_terminal'] is False

    data = client.get('/dispatching/api/statuses/completed/transitions').get_json()
    assert data['allowed_actions'] == []
    assert data['is_terminal'] is True
    assert fake_api.calls == []


# ----- mutations -----

def test_create_dispatch(client, fake_api):
    fake_api.add_booking(42)

    response = client.post('/dispatching/api/dispatches', json={'booking_id': 42})

    assert response.status_code == 201
    data = response.get_json()
    assert data['booking_id'] == 42
    assert data['status'] == 'pending'
    assert data['dispatch_time'] is None
    assert data['arrival_time'] is None


def test_create_dispatch_from_form_post(client, fake_api):
    fake_api.add_booking(42)
    response = client.post('/dispatching/api/dispatches', data={'booking_id': '42'})
    assert response.status_code == 201


def test_create_dispatch_errors(client, fake_api):
    fake_api.add_booking(42)
    fake_api.add_dispatch(42)

    assert client.post('/dispatching/api/dispatches', json={}).status_code == 400
    assert client.post('/dispatching/api/dispatches', json={'booking_id': 'abc'}).status_code == 400
    assert client.post('/dispatching/api/dispatches', json={'booking_id': '²'}).status_code == 400

    response = client.post('/dispatching/api/dispatches', json={'booking_id': 99})
    assert response.status_code == 404
    assert response.get_json()['error'] == 'BookingNotFound'

    response = client.post('/dispatching/api/dispatches', json={'booking_id': 42})
    assert response.status_code == 409
    assert response.get_json()['error'] == 'DuplicateDispatchError'


def test_update_status(client, fake_api):
    dispatch = fake_api.add_dispatch(42)

    response = client.post(
        f'/dispatching/api/dispatches/{dispatch.dispatch_id}/status',
        json={'status': 'dispatched', 'dispatch_time': '2024-05-01T09:30:00Z'},
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data['status'] == 'dispatched'
    assert data['dispatch_time'] == '2024-05-01T09:30:00+00:00'
    assert data['updated_at'] is not None, "response must carry the server's record"


def test_update_status_from_form_post_ignores_blank_timestamps(client, fake_api):
    dispatch = fake_api.add_dispatch(42)

    response = client.post(
        f'/dispatching/api/dispatches/{dispatch.dispatch_id}/status',
        data={'status': 'dispatched', 'dispatch_time': '', 'arrival_time': ''},
    )

    assert response.status_code == 200
    assert response.get_json()['status'] == 'dispatched'
    assert response.get_json()['dispatch_time'] is not None


def test_mutation_reads_dispatch_once(client, fake_api):
    dispatch = fake_api.add_dispatch(42)
    fake_api.add_driver(3)

    client.post(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/status', json={'status': 'dispatched'})
    client.post(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/driver', json={'driver_id': 3})
    client.post(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/cancel')

    assert fake_api.calls_to('get_dispatch') == [(dispatch.dispatch_id,)] * 3


def test_mutation_on_unknown_dispatch_is_not_found(client):
    response = client.post('/dispatching/api/dispatches/404/cancel')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'DispatchNotFound'


def test_invalid_transition_is_conflict(client, fake_api):
    dispatch = fake_api.add_dispatch(42, status=DispatchStatus.DISPATCHED, dispatch_time=T)

    response = client.post(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/status', json={'status': 'arrived'})

    assert response.status_code == 409
    data = response.get_json()
    assert data['error'] == 'InvalidTransition'
    assert data['current_status'] == 'dispatched'
    assert data['allowed_transitions'] == ['cancelled', 'in_transit']
    assert fake_api.calls_to('update_dispatch_status') == []


def test_terminal_dispatch_is_conflict(client, fake_api):
    dispatch = fake_api.add_dispatch(42, status=DispatchStatus.CANCELLED)
    response = client.post(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/cancel')
    assert response.status_code == 409
    assert response.get_json()['error'] == 'AlreadyTerminal'


def test_update_status_bad_input(client, fake_api):
    dispatch = fake_api.add_dispatch(42)
    url = f'/dispatching/api/dispatches/{dispatch.dispatch_id}/status'

    assert client.post(url, json={'status': 'teleported'}).status_code == 400
    response = client.post(url, json={'status': 'dispatched', 'dispatch_time': 'soon'})
    assert response.status_code == 400
    assert response.get_json()['field'] == 'dispatch_time'


def test_transport_failure_is_service_unavailable(client, fake_api):
    dispatch = fake_api.add_dispatch(42)
    fake_api.fail('update_dispatch_status', NetworkOrServerError("Request to /dispatches/1/status timed out"))

    response = client.post(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/status', json={'status': 'dispatched'})

    assert response.status_code == 503
    data = response.get_json()
    assert data['error'] == 'NetworkOrServerError'
    assert data['retryable'] is True


def test_rejected_request_is_bad_gateway(client, fake_api):
    dispatch = fake_api.add_dispatch(42)
    fake_api.fail('update_dispatch_status', ApiRequestRejected(
        "Access denied. You do not have permission to perform this action.", status_code=403,
    ))

    response = client.post(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/status', json={'status': 'dispatched'})

    assert response.status_code == 502
    data = response.get_json()
    assert data['upstream_status'] == 403
    assert data['retryable'] is False


def test_cancel(client, fake_api):
    dispatch = fake_api.add_dispatch(42, status=DispatchStatus.ARRIVED, dispatch_time=T, arrival_time=T)
    response = client.post(f'/dispatching/api/dispatches/{dispatch.dispatch_id}/cancel')
    assert response.status_code == 200
    assert response.get_json()['is_terminal'] is True


def test_assign_driver(client, fake_api):
    dispatch = fake_api.add_dispatch(42)
    fake_api.add_driver(3)
    fake_api.add_driver(4, is_available=False)
    url = f'/dispatching/api/dispatches/{dispatch.dispatch_id}/driver'

    assert client.post(url, json={}).status_code == 400
    assert client.post(url, json={'driver_id': 4}).status_code == 409

    response = client.post(url, json={'driver_id': 3})
    assert response.status_code == 200
    assert response.get_json()['assigned_driver'] == 3


def test_record_timestamp(client, fake_api):
    dispatch = fake_api.add_dispatch(42, status=DispatchStatus.IN_TRANSIT)
    url = f'/dispatching/api/dispatches/{dispatch.dispatch_id}/timestamps'

    response = client.post(url, json={'field': 'arrival_time', 'value': '2024-05-01T09:30:00Z'})
    assert response.status_code == 409
    assert response.get_json()['error'] == 'DispatchTimestampError'

    response = client.post(url, json={'field': 'dispatch_time', 'value': '2024-05-01T09:30:00Z'})
    assert response.status_code == 200
    assert response.get_json()['dispatch_time'] == '2024-05-01T09:30:00+00:00'


def test_mutations_require_csrf_token_outside_tests(fake_api):
    fake_api.add_booking(42)
    app = create_app({
        'SECRET_KEY': 'test-secret-key',
        'SESSION_COOKIE_SECURE': False,
        'RATELIMIT_ENABLED': False,
        'LOGISTICS_API_CLIENT': fake_api,
    })
    client = app.test_client()

    assert client.post('/dispatching/api/dispatches', json={'booking_id': 42}).status_code == 400
    assert fake_api.calls_to('create_dispatch') == []

    token = client.get('/csrf-token').get_json()['csrf_token']
    response = client.post('/dispatching/api/dispatches', json={'booking_id': 42}, headers={'X-CSRFToken': token})
    assert response.status_code == 201
