import json
import logging
import os
import threading
from pathlib import Path

from flask import has_request_context, request

LOGGER_NAME = "dispatch_console"

# Log files under LOG_DIR and the lowest level each receives; truncated on start
LOG_FILES = (
    ("dispatch_console.log", logging.INFO),
    ("errors.log", logging.ERROR),
)

# JSON key -> LogRecord attribute
RECORD_FIELDS = {
    "timestamp": "asctime",
    "level": "levelname",
    "logger": "name",
    "module": "module",
    "function": "funcName",
    "line": "lineno",
    "message": "message",
}


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


class RequestContextFilter(logging.Filter):
    """Attach the current console request (method, path, client) to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.http_method = request.method
            record.http_path = request.path
            record.remote_addr = request.remote_addr
        else:
            record.http_method = record.http_path = record.remote_addr = None
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Request fields are only written when the record was logged inside a
    request; tracebacks and stack info are added when present.
    """

    def __init__(self, fields: dict = None, time_format: str = "%Y-%m-%dT%H:%M:%S", msec_format: str = "%s.%03dZ"):
        super().__init__()
        self.fields = fields if fields is not None else RECORD_FIELDS
        self.default_time_format = time_format
        self.default_msec_format = msec_format

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record)

        entry = {key: getattr(record, attr) for key, attr in self.fields.items()}

        if getattr(record, 'http_path', None):
            entry["request"] = {
                "method": record.http_method,
                "path": record.http_path,
                "remote_addr": record.remote_addr,
            }

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exc_info"] = record.exc_text
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


class SingletonLogger:
    """
    Owns the one process-wide console logger.

    Level comes from LOG_LEVEL; LOG_TO_FILE=false keeps output on stderr only,
    otherwise files are written under LOG_DIR (default ``logs``).
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._logger = None
                    cls._instance = instance
        return cls._instance

    def get_logger(self, name: str = LOGGER_NAME) -> logging.Logger:
        # name is accepted for call-site readability; every caller shares one logger
        if self._logger is None:
            with self._lock:
                if self._logger is None:
                    self._logger = self._build()
        return self._logger

    @staticmethod
    def _build() -> logging.Logger:
        logger = logging.getLogger(LOGGER_NAME)
        level_name = os.environ.get('LOG_LEVEL', 'DEBUG').upper()
        logger.setLevel(getattr(logging, level_name, logging.DEBUG))
        logger.handlers.clear()
        logger.propagate = False

        formatter = JsonFormatter()
        context = RequestContextFilter()

        handlers = [(logging.StreamHandler(), logging.DEBUG)]
        if _env_flag('LOG_TO_FILE', 'True'):
            logs_dir = Path(os.environ.get('LOG_DIR', 'logs'))
            logs_dir.mkdir(parents=True, exist_ok=True)
            handlers += [
                (logging.FileHandler(logs_dir / filename, mode='w', encoding='utf-8'), level)
                for filename, level in LOG_FILES
            ]

        for handler, level in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            handler.addFilter(context)
            logger.addHandler(handler)

        return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Get the process-wide logger.

    Args:
        name (str): Caller label; all names resolve to the same logger
    """
    return SingletonLogger().get_logger(name)
