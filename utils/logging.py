"""Named loggers for the security mapper."""

from __future__ import annotations

import logging

LOGGER_ROOT = 'secmap'


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the application namespace.

    Names that are already qualified (``secmap.*``) are used as-is.
    """
    if name != LOGGER_ROOT and not name.startswith(f'{LOGGER_ROOT}.'):
        name = f'{LOGGER_ROOT}.{name}'
    return logging.getLogger(name)


app_logger = get_logger('app')
scanner_logger = get_logger('security.scanner')
routes_logger = get_logger('routes.security')
