from flask import Blueprint, current_app, request

from dispatch_console.utils.logging_sanitizer import sanitize_dict, sanitize_form_data

dispatching_bp = Blueprint('dispatching', __name__)


def get_api():
    """Logistics API client configured for this app."""
    return current_app.extensions['logistics_api']


def request_data() -> dict:
    """
    JSON body, falling back to form data for plain form posts.

    Blank form inputs are dropped: an HTML form submits unfilled optional
    fields as empty strings.
    """
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return {key: value for key, value in request.form.items() if value.strip()}


def describe_request() -> str:
    data = request.get_json(silent=True)
    fields = sanitize_dict(data) if isinstance(data, dict) else sanitize_form_data(request.form)
    return f"{request.method} {request.path} {fields}"


# Import all route modules
from . import (  # noqa: E402,F401
    errors,
    dispatches,
    actions,
)
