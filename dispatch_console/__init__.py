from flask import Flask
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from dispatch_console.logger import get_logger

# Initialize extensions
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    storage_uri="memory://"  # Use Redis in production for distributed systems
)


# Sent on every response; console payloads are JSON and never cached
SECURITY_HEADERS = {
    'X-Frame-Options': 'SAMEORIGIN',
    'X-Content-Type-Options': 'nosniff',
    'Content-Security-Policy': "default-src 'self'",
    'Cache-Control': 'no-store',
}
HSTS_HEADER = 'max-age=31536000; includeSubDomains'


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(config=None):
    """
    Build the console application.

    Args:
        config: Optional mapping applied over the environment-derived settings.
            LOGISTICS_API_CLIENT may carry a ready client to use instead of
            building one from LOGISTICS_API_URL / LOGISTICS_API_TOKEN.
    """
    from dispatch_console.data.api import DEFAULT_API_URL, DEFAULT_TIMEOUT, MAX_PAGE_LIMIT, LogisticsApiClient

    app = Flask(__name__)

    # Get singleton logger
    logger = get_logger("dispatch_console")
    logger.info("Initializing Flask application")

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')
    app.config['LOGISTICS_API_URL'] = os.environ.get('LOGISTICS_API_URL', DEFAULT_API_URL)
    app.config['LOGISTICS_API_TOKEN'] = os.environ.get('LOGISTICS_API_TOKEN') or None
    app.config['LOGISTICS_API_TIMEOUT'] = float(os.environ.get('LOGISTICS_API_TIMEOUT', str(DEFAULT_TIMEOUT)))
    app.config['DISPATCH_PAGE_LIMIT'] = int(os.environ.get('DISPATCH_PAGE_LIMIT', str(MAX_PAGE_LIMIT)))

    # HSTS only when served over HTTPS; session cookies are secure unless disabled for HTTP development
    app.config['ENABLE_HTTPS'] = _env_flag('ENABLE_HTTPS', 'False')
    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    if config:
        app.config.update(config)

    # SECURITY: Require SECRET_KEY - no fallback
    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    api = app.config.get('LOGISTICS_API_CLIENT')
    if api is None:
        api = LogisticsApiClient(
            base_url=app.config['LOGISTICS_API_URL'],
            token=app.config['LOGISTICS_API_TOKEN'],
            timeout=app.config['LOGISTICS_API_TIMEOUT'],
        )
        logger.debug(f"Logistics API configured: {app.config['LOGISTICS_API_URL']}")
    app.extensions['logistics_api'] = api

    if not app.config['LOGISTICS_API_TOKEN']:
        logger.warning("LOGISTICS_API_TOKEN not set - requests will be sent without Authorization")

    # Initialize extensions with app
    csrf.init_app(app)
    limiter.init_app(app)

    logger.debug("Extensions initialized")

    # Register blueprints
    from dispatch_console.presentation.routes import init_app as init_routes
    init_routes(app)

    @app.after_request
    def set_security_headers(response):
        response.headers.update(SECURITY_HEADERS)
        if app.config.get('ENABLE_HTTPS'):
            response.headers['Strict-Transport-Security'] = HSTS_HEADER
        return response

    logger.info("Flask application initialization complete")

    return app
