# SPDX-License-Identifier: MIT

from typing import Optional, cast

import pendulum

ISO_FORMAT = "YYYY-MM-DD[T]HH:mm:ss.SSS[Z]"


def now_utc() -> pendulum.DateTime:
    """Current UTC time truncated to the millisecond precision of the data file."""
    now = pendulum.now("UTC")
    return now.set(microsecond=now.microsecond // 1000 * 1000)


def datetime_to_iso_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("UTC").format(ISO_FORMAT)


def datetime_to_iso_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_iso_str(datetime)


def datetime_from_str(datetime: str) -> pendulum.DateTime:
    parsed = pendulum.parse(datetime)
    if not isinstance(parsed, pendulum.DateTime):
        raise ValueError(f"not a timestamp: {datetime!r}")
    return parsed.in_tz("UTC")


def datetime_from_str_optional(datetime: Optional[str]) -> Optional[pendulum.DateTime]:
    if datetime is None:
        return None
    return datetime_from_str(datetime)


def datetime_from_str_utc(datetime: str) -> pendulum.DateTime:
    """Parse a naive local timestamp typed by the user and convert it to UTC."""
    pendulum_date_time = cast(pendulum.DateTime, pendulum.parse(datetime, tz="local"))
    return pendulum_date_time.in_tz("UTC")


def datetime_to_local_date_str(datetime: pendulum.DateTime) -> str:
    """Convert a pendulum.DateTime to a local date string in 'YYYY-MM-DD' format."""
    return datetime.in_tz("local").format("YYYY-MM-DD")


def datetime_to_display_local_datetime_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("YYYY/MM/DD HH:mm")


def datetime_to_display_local_time_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("HH:mm")


def local_date_str_to_display_str(date_str: str) -> str:
    date_time = cast(pendulum.DateTime, pendulum.parse(date_str, tz="local"))
    return date_time.format("YYYY/MM/DD (ddd)")


def seconds_between(start: pendulum.DateTime, end: pendulum.DateTime) -> int:
    """Whole seconds from start to end, truncated toward zero."""
    return int((end - start).total_seconds())


def format_duration(seconds: int) -> str:
    """
    Format a second count as hours and minutes.

    3600 -> "1h 0m", 5400 -> "1h 30m", 1800 -> "0h 30m"
    """
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def format_duration_detailed(seconds: int) -> str:
    """
    Format a second count with only the significant units.

    3661 -> "1h 1m 1s", 61 -> "1m 1s", 5 -> "5s"
    """
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
