#!/usr/bin/env python3
#USE VENV: source venv/bin/activate
"""
Run script for the Dispatch Console
"""

from dispatch_console import create_app
from dispatch_console.data.api import LogisticsApiError
from dispatch_console.logger import get_logger
import sys
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import argparse  # noqa: E402

# Note: SECRET_KEY and the logistics API settings come from the environment.
# Run 'python generate_env.py' to create a .env file.

logger = get_logger("dispatch_console.run")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='Dispatch Console')
    parser.add_argument('--check-api', action='store_true',
                        help='Probe the logistics API before starting the web server')
    parser.add_argument('--check-only', action='store_true',
                        help='Probe the logistics API and exit without starting the web server')
    return parser.parse_args()


def check_api(app):
    api = app.extensions['logistics_api']
    try:
        api.ping()
    except LogisticsApiError as e:
        logger.error(f"Logistics API at {app.config['LOGISTICS_API_URL']} is not usable: {e}")
        return False
    logger.info(f"Logistics API at {app.config['LOGISTICS_API_URL']} is reachable")
    return True


if __name__ == '__main__':
    args = parse_arguments()
    app = create_app()

    logger.debug("Starting Dispatch Console...")

    if args.check_api or args.check_only:
        reachable = check_api(app)
        if args.check_only:
            sys.exit(0 if reachable else 1)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # USE_RELOADER: Enable/disable auto-reloader (default: False in production)
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')

    # FLASK_HOST: Server host (default: 127.0.0.1 for security)
    host = os.environ.get('FLASK_HOST', '127.0.0.1')

    # FLASK_PORT: Server port (default: 5000)
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
