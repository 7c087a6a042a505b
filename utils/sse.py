"""Server-Sent Events helpers."""

from __future__ import annotations

import json
from typing import Any, Optional


def format_sse(data: Any, event: Optional[str] = None) -> str:
    """
    Format a payload as a Server-Sent Event frame.

    Args:
        data: JSON-serializable payload.
        event: Optional event name.

    Returns:
        SSE frame terminated by a blank line.
    """
    msg = f'data: {json.dumps(data, default=str)}\n\n'
    if event:
        msg = f'event: {event}\n{msg}'
    return msg
