"""Utility functions for PyCMS."""

from datetime import datetime, timezone
from typing import Optional, Union

# Public URL prefix of serverless function routes
ROUTE_PATH_PREFIX = "_hcms/api/"


# =============================================================================
# Timestamp utilities
# =============================================================================


TimestampValue = Union[int, float, str, datetime, None]


def _from_epoch_ms(value: Union[int, float]) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        # Outside the range the platform can represent
        return None


def parse_timestamp(value: TimestampValue) -> Optional[datetime]:
    """Parse a timestamp from the API into an aware UTC datetime.

    Args:
        value: Epoch milliseconds, an ISO 8601 string (e.g.
            "2025-01-15T10:30:00.000Z") or a datetime

    Returns:
        datetime in UTC, or None if the value cannot be parsed
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        return _from_epoch_ms(value)
    else:
        text = value.strip()
        if text.isdigit():
            return _from_epoch_ms(int(text))
        # The 'Z' suffix indicates UTC time
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso_timestamp(value: TimestampValue) -> str:
    """Format a timestamp as ISO 8601 UTC with milliseconds.

    Examples:
        >>> format_iso_timestamp(1577836800000)
        '2020-01-01T00:00:00.000Z'

    Raises:
        ValueError: If the value cannot be parsed
    """
    dt = parse_timestamp(value)
    if dt is None:
        raise ValueError(f"Invalid timestamp: {value!r}")
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


# =============================================================================
# Route utilities
# =============================================================================


def strip_route_prefix(route: str) -> str:
    """Turn a function URL path into the route the logs API expects.

    Examples:
        >>> strip_route_prefix("/_hcms/api/contact")
        'contact'
        >>> strip_route_prefix("contact")
        'contact'
    """
    route = route.strip().lstrip("/")
    if route.startswith(ROUTE_PATH_PREFIX):
        route = route[len(ROUTE_PATH_PREFIX) :]
    return route
