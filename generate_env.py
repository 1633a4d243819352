#!/usr/bin/env python3
"""
Environment Configuration Generator for the Dispatch Console

Writes a .env file holding a random SECRET_KEY, the logistics API connection
settings, and server / logging options read by app.py and create_app().

Usage:
    python generate_env.py                                  # Interactive mode
    python generate_env.py --force                          # Overwrite existing .env
    python generate_env.py --dev                            # Development mode (predictable, HTTP)
    python generate_env.py --api-url URL --api-token TOKEN  # Point at a specific API
"""

import argparse
import os
import secrets
import shutil
import sys
from datetime import datetime
from pathlib import Path

DEFAULT_API_URL = 'http://localhost:8000/api/v1'
DEV_SECRET_KEY = 'dev-secret-key-DO-NOT-USE-IN-PRODUCTION'
RULE = '# ' + '=' * 76


class EnvGenerator:
    """Builds and writes the console's .env file"""

    def __init__(self, dev_mode=False, api_url=DEFAULT_API_URL, api_token=''):
        self.dev_mode = dev_mode
        self.api_url = api_url
        self.api_token = api_token
        self.env_file = Path(__file__).parent / '.env'

    def secret_key(self, length=64):
        return DEV_SECRET_KEY if self.dev_mode else secrets.token_hex(length)

    def sections(self, secret_key):
        """
        Settings grouped for the file, as (title, [(comment, KEY, value), ...]).
        """
        production = 'False' if self.dev_mode else 'True'
        return [
            ('Flask', [
                ('Signs the session and CSRF tokens', 'SECRET_KEY', secret_key),
                ('Never True in production', 'FLASK_DEBUG', 'True' if self.dev_mode else 'False'),
                (None, 'USE_RELOADER', 'False'),
                ('127.0.0.1 = localhost only, 0.0.0.0 = all interfaces', 'FLASK_HOST', '127.0.0.1'),
                (None, 'FLASK_PORT', '5000'),
            ]),
            ('Logistics API', [
                ('Base URL for /dispatches, /bookings and /fleet', 'LOGISTICS_API_URL', self.api_url),
                ('Sent as "Authorization: Bearer <token>"; empty for none', 'LOGISTICS_API_TOKEN', f'"{self.api_token}"'),
                ('Seconds per request', 'LOGISTICS_API_TIMEOUT', '10'),
                ('Rows per dispatch table page (the API caps this at 100)', 'DISPATCH_PAGE_LIMIT', '100'),
            ]),
            ('Security', [
                ('Send HSTS headers when served over HTTPS', 'ENABLE_HTTPS', production),
                ('False only for development over plain HTTP', 'SESSION_COOKIE_SECURE', production),
            ]),
            ('Logging', [
                ('DEBUG, INFO, WARNING, ERROR, CRITICAL', 'LOG_LEVEL', 'DEBUG' if self.dev_mode else 'INFO'),
                ('Writes <LOG_DIR>/dispatch_console.log and <LOG_DIR>/errors.log', 'LOG_TO_FILE', 'True'),
                (None, 'LOG_DIR', 'logs'),
            ]),
        ]

    def render(self, secret_key):
        lines = [
            '# Dispatch Console Environment Configuration',
            f'# Generated: {self._timestamp()}',
            '#',
            '# SECURITY WARNING: Keep this file secret! Never commit to version control!',
        ]
        for title, settings in self.sections(secret_key):
            lines += ['', RULE, f'# {title}', RULE]
            for comment, key, value in settings:
                lines.append('')
                if comment:
                    lines.append(f'# {comment}')
                lines.append(f'{key}={value}')
        return '\n'.join(lines) + '\n'

    def _timestamp(self):
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def backup_existing(self):
        """Copy the current .env aside before it is replaced"""
        if not self.env_file.exists():
            return None
        stamp = self._timestamp().replace(":", "-").replace(" ", "_")
        backup_path = self.env_file.with_name(f'.env.backup.{stamp}')
        shutil.copy2(self.env_file, backup_path)
        return backup_path

    def write(self, content):
        self.env_file.write_text(content)
        # Owner read/write only
        os.chmod(self.env_file, 0o600)

    def summary(self, secret_key):
        if self.dev_mode:
            key_line = f"SECRET_KEY: {DEV_SECRET_KEY} (DEV MODE, not for production)"
        else:
            key_line = f"SECRET_KEY: {secret_key[:8]}...{secret_key[-8:]} ({len(secret_key)} characters)"
        return '\n'.join([
            key_line,
            f"LOGISTICS_API_URL: {self.api_url}",
            f"LOGISTICS_API_TOKEN: {'set' if self.api_token else 'not set'}",
            "Next: python app.py --check-api",
        ])

    def generate(self, force=False):
        """
        Generate the .env file.

        Args:
            force: Overwrite an existing .env without prompting

        Returns:
            bool: False when the user declined to overwrite
        """
        if self.env_file.exists() and not force:
            answer = input(f"{self.env_file} already exists. Overwrite it? (yes/no): ").lower().strip()
            if answer not in ('yes', 'y'):
                print("Aborted. Existing .env file was not modified.")
                return False
            print(f"Backup created: {self.backup_existing()}")

        secret_key = self.secret_key()
        self.write(self.render(secret_key))
        print(f"Created: {self.env_file}")
        print(self.summary(secret_key))
        return True


def main():
    parser = argparse.ArgumentParser(description='Generate .env configuration for the Dispatch Console')
    parser.add_argument('--force', '-f', action='store_true',
                        help='Overwrite existing .env file without prompting')
    parser.add_argument('--dev', '-d', action='store_true',
                        help='Development mode: predictable secret key, HTTP cookies (NOT FOR PRODUCTION!)')
    parser.add_argument('--api-url', default=DEFAULT_API_URL,
                        help=f'Logistics API base URL (default: {DEFAULT_API_URL})')
    parser.add_argument('--api-token', default='',
                        help='Bearer token for the logistics API')
    args = parser.parse_args()

    generator = EnvGenerator(dev_mode=args.dev, api_url=args.api_url, api_token=args.api_token)
    sys.exit(0 if generator.generate(force=args.force) else 1)


if __name__ == '__main__':
    main()
