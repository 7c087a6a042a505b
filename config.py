"""Configuration settings for the BLE security mapper."""

from __future__ import annotations

import logging
import os
import sys

# Application version
VERSION = "0.3.0"


def _get_env(key: str, default: str) -> str:
    """Get environment variable with default."""
    return os.environ.get(f'SECMAP_{key}', default)


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer with default."""
    try:
        return int(os.environ.get(f'SECMAP_{key}', str(default)))
    except ValueError:
        return default


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float with default."""
    try:
        return float(os.environ.get(f'SECMAP_{key}', str(default)))
    except ValueError:
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean with default."""
    val = os.environ.get(f'SECMAP_{key}', '').lower()
    if val in ('true', '1', 'yes', 'on'):
        return True
    if val in ('false', '0', 'no', 'off'):
        return False
    return default


# Logging configuration
_log_level_str = _get_env('LOG_LEVEL', 'WARNING').upper()
LOG_LEVEL = getattr(logging, _log_level_str, logging.WARNING)
LOG_FORMAT = _get_env('LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

# Server settings
HOST = _get_env('HOST', '127.0.0.1')
PORT = _get_env_int('PORT', 5060)
DEBUG = _get_env_bool('DEBUG', False)
THREADED = _get_env_bool('THREADED', True)

# Streaming
SSE_KEEPALIVE_INTERVAL = _get_env_float('SSE_KEEPALIVE_INTERVAL', 30.0)
SSE_QUEUE_SIZE = _get_env_int('SSE_QUEUE_SIZE', 500)

# Passive scanning (0 = run until stopped)
SCAN_DURATION = _get_env_float('SCAN_DURATION', 0.0)

# Analysis settings
# Samples retained per device history (0 = unbounded, minimum 5)
MAX_HISTORY = _get_env_int('MAX_HISTORY', 1000)

# Proximity model calibration
REFERENCE_RSSI = _get_env_int('REFERENCE_RSSI', -59)
PATH_LOSS_EXPONENT = _get_env_float('PATH_LOSS_EXPONENT', 2.5)


def configure_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format=LOG_FORMAT,
        stream=sys.stderr
    )
    # Suppress Flask development server chatter
    logging.getLogger('werkzeug').setLevel(LOG_LEVEL)
