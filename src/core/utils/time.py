"""Clock helpers for response bodies.

Error responses carry a ``timestamp`` so a failed request can be matched to
its log lines; it is always UTC.
"""

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with offset, e.g. ``2024-01-15T10:42:31.123456+00:00``."""
    return datetime.now(timezone.utc).isoformat()
