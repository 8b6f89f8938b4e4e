"""
Time helpers.

Unlock instants are stored and compared as UTC. Conversion to a human zone
happens only when rendering.
"""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_for_display(value: datetime, timezone_name: str) -> str:
    """Render an instant in the given IANA zone, e.g. '2026-10-17 21:30 IST'."""
    try:
        zone = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown display timezone, falling back to UTC", timezone=timezone_name)
        zone = ZoneInfo("UTC")
    return to_utc(value).astimezone(zone).strftime("%Y-%m-%d %H:%M %Z")
