"""
Main routes for the Dispatch Console
"""

from flask import current_app, jsonify
from flask_wtf.csrf import generate_csrf

from . import main


@main.route('/health')
def health():
    """Liveness check; does not contact the logistics API"""
    return jsonify({
        'status': 'ok',
        'api_url': current_app.config['LOGISTICS_API_URL'],
    })


@main.route('/csrf-token')
def csrf_token():
    """Token for the X-CSRFToken header on console POSTs"""
    return jsonify({'csrf_token': generate_csrf()})
