# SPDX-License-Identifier: MIT

import re
from typing import Optional

import pendulum
import typer

from clocklet.time import datetime_from_str_utc, now_utc

DATETIME_HELP = "valid inputs: YYYY-MM-DD HH:mm, (H)H:mm, now, or (H)H:mm with a day offset like -1@17:30"


def parse_datetime(datetime_param: Optional[str]) -> Optional[pendulum.DateTime]:
    if datetime_param is None:
        return None

    datetime = datetime_param.strip()

    # Match YYYY-MM-DD format (with optional time component)
    if re.match(r"\d{4}-\d{2}-\d{2}", datetime):
        try:
            return datetime_from_str_utc(datetime)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid datetime: {e}")

    # Match [offset@](H)H:mm, time on today's date or on a day offset from it
    time_match = re.match(r"^(?:(-?\d+)@)?(\d{1,2}):(\d{2})$", datetime)
    if time_match:
        days_offset = int(time_match.group(1) or 0)
        hour = int(time_match.group(2))
        minute = int(time_match.group(3))

        # Validate hour and minute ranges
        if hour < 0 or hour > 23:
            raise typer.BadParameter(f"Hour must be between 0 and 23, got {hour}")
        if minute < 0 or minute > 59:
            raise typer.BadParameter(f"Minute must be between 0 and 59, got {minute}")

        # Create datetime with the local date, then convert to UTC
        pendulum_date_time = (
            pendulum.today("local")
            .add(days=days_offset)
            .set(hour=hour, minute=minute, second=0, microsecond=0)
        )
        return pendulum_date_time.in_tz("UTC")

    if datetime == "now" or datetime == "n":
        return now_utc()
    raise typer.BadParameter("Incorrect datetime format")

