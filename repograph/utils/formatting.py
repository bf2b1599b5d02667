"""Display helpers for commit SHAs, messages and timestamps."""

from __future__ import annotations

from datetime import datetime

SHORT_SHA_LENGTH = 7
ELLIPSIS = "..."
INVALID_DATE = "Invalid Date"


def shorten_sha(sha: str) -> str:
    """First 7 characters of a SHA; shorter input is returned as is."""
    return sha[:SHORT_SHA_LENGTH]


def truncate_message(message: str, max_length: int = 50) -> str:
    """First line of a commit message, cut to max_length with an ellipsis marker."""
    first_line = message.split("\n", 1)[0]
    if len(first_line) <= max_length:
        return first_line
    return first_line[:max_length] + ELLIPSIS


def format_commit_date(timestamp: str) -> str:
    """Render an ISO-8601 timestamp as e.g. ``Jan 5, 2024, 03:04 PM``.

    The timestamp's own offset is kept (no conversion to local time).
    Unparseable input gives ``Invalid Date``.
    """
    try:
        # GitHub reports UTC with a trailing Z.
        parsed = datetime.fromisoformat(timestamp.strip().replace("Z", "+00:00"))
    except (AttributeError, TypeError, ValueError):
        return INVALID_DATE
    return f"{parsed:%b} {parsed.day}, {parsed.year}, {parsed:%I:%M %p}"
