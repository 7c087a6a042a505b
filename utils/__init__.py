# Utility modules for the BLE security mapper
from .logging import (
    get_logger,
    app_logger,
    scanner_logger,
    routes_logger,
)
from .sse import format_sse
