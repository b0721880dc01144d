"""Date helpers. All timestamps are stored as naive UTC."""
import calendar
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def parse_iso_datetime(value):
    """
    Parse an ISO 8601 string into a naive UTC datetime.

    Accepts a trailing 'Z'. Aware values are converted to UTC.
    Returns None for empty input.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def isoformat(value):
    if value is None:
        return None
    return value.isoformat() + 'Z'


def format_long_date(value: datetime) -> str:
    """Format as '19 October 2026'."""
    return f"{value.day} {value.strftime('%B %Y')}"
