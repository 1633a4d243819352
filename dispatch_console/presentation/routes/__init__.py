"""
Routes package for the Dispatch Console
"""

from flask import Blueprint
from dispatch_console.logger import get_logger

logger = get_logger("dispatch_console.routes")

# Create main blueprint
main = Blueprint('main', __name__)

# Import route modules
from . import main_routes  # noqa: E402,F401


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    app.register_blueprint(main)

    from .dispatching import dispatching_bp
    app.register_blueprint(dispatching_bp, url_prefix='/dispatching')

    logger.info("Registered dispatching blueprint")
