"""Timestamp formatting utilities."""

import time
from datetime import date, datetime
from typing import Optional


def now() -> str:
    """Second-resolution timestamp for directory names (e.g., '20261018_093015')."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """ISO 8601 timestamp with microseconds, for event records."""
    return datetime.now().isoformat()


def unique_stamp() -> str:
    """High-resolution stamp for scratch file names (nanoseconds since epoch)."""
    return str(time.time_ns())


def download_date(day: Optional[date] = None) -> str:
    """Day-month-year without separators (e.g., '18102026'), used in download names."""
    day = day or date.today()
    return day.strftime("%d%m%Y")


def format_timestamp(iso_timestamp: str, relative: bool = False) -> str:
    """
    Format ISO 8601 timestamp to readable format.

    Args:
        iso_timestamp: ISO 8601 formatted timestamp string
        relative: If True, show relative time (e.g., "2h ago")
                 If False, show absolute time (e.g., "2026-10-18 09:30:15")

    Returns:
        Human-readable timestamp

    Examples:
        format_timestamp("2026-10-18T09:30:15.572549")
        # "2026-10-18 09:30:15"

        format_timestamp("2026-10-18T09:30:15.572549", relative=True)
        # "2h ago"
    """
    try:
        dt = datetime.fromisoformat(iso_timestamp)

        if relative:
            return _format_relative_time(dt)
        else:
            return dt.strftime("%Y-%m-%d %H:%M:%S")

    except (ValueError, TypeError):
        # Return original if parsing fails
        return iso_timestamp


def _format_relative_time(dt: datetime) -> str:
    """
    Format datetime as relative time in compact format (e.g., "2h ago").

    - Seconds: "30s ago"
    - Minutes: "15m ago"
    - Hours: "2h ago"
    - Days: "5d ago"
    """
    diff = datetime.now() - dt

    # Future times
    if diff.total_seconds() < 0:
        diff = -diff
        suffix = "from now"
    else:
        suffix = "ago"

    seconds = int(diff.total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = diff.days

    if seconds < 60:
        return f"{seconds}s {suffix}"
    elif minutes < 60:
        return f"{minutes}m {suffix}"
    elif hours < 24:
        return f"{hours}h {suffix}"
    else:
        return f"{days}d {suffix}"
