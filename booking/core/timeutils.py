"""
Civil-time helpers.

Booking requests carry wall-clock date/times for the business timezone
(America/Sao_Paulo by default). They are stored as naive UTC datetimes and
rendered back in the business timezone for notifications.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from .config import settings

DISPLAY_FORMAT = "%d/%m/%Y %H:%M"


def business_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime, matching stored values."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _fromisoformat(value: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def parse_civil_datetime(value: str) -> datetime:
    """Parse an ISO-8601 date/time string, returning an aware datetime.

    Values without an offset are interpreted as business-timezone civil time.
    A trailing ``Z`` or explicit offset is honored. Raises ``ValueError`` for
    anything that is not a date/time.
    """
    parsed = _fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=business_timezone())
    return parsed


def civil_to_utc(value: str) -> datetime:
    """Convert a civil date/time string to a naive UTC datetime, whole seconds."""
    parsed = parse_civil_datetime(value).astimezone(timezone.utc)
    return parsed.replace(tzinfo=None, microsecond=0)


def wall_clock(value: str) -> datetime:
    """Parse a date/time string without applying the business timezone.

    Naive input keeps its wall-clock digits; input carrying an offset is
    still converted to UTC.
    """
    parsed = _fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def format_local(value: datetime) -> str:
    """Render a stored UTC datetime as ``DD/MM/YYYY HH:mm`` business time."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(business_timezone()).strftime(DISPLAY_FORMAT)


def to_iso_utc(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")
