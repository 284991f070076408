"""
Shared utility functions.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def total_pages(total_items: int, limit: int) -> int:
    """Number of pages needed to show ``total_items`` at ``limit`` per page."""
    if limit <= 0:
        return 0
    return math.ceil(total_items / limit)
