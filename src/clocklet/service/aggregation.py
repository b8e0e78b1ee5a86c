# SPDX-License-Identifier: MIT

from collections import defaultdict
from typing import Optional, TypedDict

import pendulum

from clocklet.model.current_session import CurrentSession
from clocklet.model.monthly_statistic import (
    MonthlyStatistic,
    get_monthly_statistic,
    get_total_hours,
)
from clocklet.model.time_entry import TimeEntry, get_duration_seconds, get_entry_date
from clocklet.time import datetime_to_local_date_str, seconds_between

# Months always kept in the all-time statistics even when empty
RECENT_MONTH_COUNT = 3


class DailyEntries(TypedDict):
    date: str
    entries: list[TimeEntry]
    total_seconds: int


class StatisticsSummary(TypedDict):
    total_hours: float
    average_hours_per_month: float
    peak_month: Optional[MonthlyStatistic]


def session_elapsed_seconds(
    current_session: Optional[CurrentSession], now: pendulum.DateTime
) -> int:
    if current_session is None:
        return 0
    return max(0, seconds_between(current_session["clock_in"], now))


def __month_of(datetime: pendulum.DateTime) -> tuple[int, int]:
    local_time = datetime.in_tz("local")
    return (local_time.year, local_time.month)


def today_duration(
    entries: list[TimeEntry],
    current_session: Optional[CurrentSession],
    now: pendulum.DateTime,
) -> int:
    """
    Seconds recorded on the local calendar date of `now`.

    An open session only counts when it was clocked in on that same date;
    a session running past midnight stays attributed to the day it started.
    """
    today = datetime_to_local_date_str(now)
    total = sum(
        get_duration_seconds(entry)
        for entry in entries
        if get_entry_date(entry) == today
    )
    if (
        current_session is not None
        and datetime_to_local_date_str(current_session["clock_in"]) == today
    ):
        total += session_elapsed_seconds(current_session, now)
    return total


def this_month_duration(
    entries: list[TimeEntry],
    current_session: Optional[CurrentSession],
    now: pendulum.DateTime,
) -> int:
    month = __month_of(now)
    total = sum(
        get_duration_seconds(entry)
        for entry in entries
        if __month_of(entry["clock_in"]) == month
    )
    if current_session is not None and __month_of(current_session["clock_in"]) == month:
        total += session_elapsed_seconds(current_session, now)
    return total


def last_month_duration(entries: list[TimeEntry], now: pendulum.DateTime) -> int:
    last_month = __month_of(now.in_tz("local").start_of("month").subtract(months=1))
    return sum(
        get_duration_seconds(entry)
        for entry in entries
        if __month_of(entry["clock_in"]) == last_month
    )


def monthly_statistics(
    entries: list[TimeEntry], month_count: int, now: pendulum.DateTime
) -> list[MonthlyStatistic]:
    """
    Totals for `month_count` consecutive months ending at the month of `now`,
    oldest first. Months without entries are present with a total of zero.
    """
    totals: dict[tuple[int, int], int] = defaultdict(int)
    for entry in entries:
        totals[__month_of(entry["clock_in"])] += get_duration_seconds(entry)

    current_month = now.in_tz("local").start_of("month")
    statistics: list[MonthlyStatistic] = []
    for offset in range(month_count - 1, -1, -1):
        month = current_month.subtract(months=offset)
        statistics.append(
            get_monthly_statistic(
                month.year, month.month, totals.get((month.year, month.month), 0)
            )
        )
    return statistics


def all_time_statistics(
    entries: list[TimeEntry], now: pendulum.DateTime
) -> list[MonthlyStatistic]:
    """
    Monthly totals from the first recorded month up to the month of `now`.

    Empty months are dropped except for the most recent ones, which are kept
    so the current period always shows up.
    """
    now_year, now_month = __month_of(now)
    month_count = RECENT_MONTH_COUNT
    if entries:
        first_year, first_month = min(__month_of(entry["clock_in"]) for entry in entries)
        month_count = max(
            month_count, (now_year - first_year) * 12 + (now_month - first_month) + 1
        )

    return [
        statistic
        for statistic in monthly_statistics(entries, month_count, now)
        if statistic["total_seconds"] > 0
        or (now_year - statistic["year"]) * 12 + (now_month - statistic["month"])
        < RECENT_MONTH_COUNT
    ]


def summarize_statistics(statistics: list[MonthlyStatistic]) -> StatisticsSummary:
    non_empty = [statistic for statistic in statistics if statistic["total_seconds"] > 0]
    average = 0.0
    peak_month: Optional[MonthlyStatistic] = None
    if non_empty:
        average = sum(get_total_hours(statistic) for statistic in non_empty) / len(
            non_empty
        )
        peak_month = max(non_empty, key=lambda statistic: statistic["total_seconds"])

    return {
        "total_hours": sum(get_total_hours(statistic) for statistic in statistics),
        "average_hours_per_month": average,
        "peak_month": peak_month,
    }


def entries_by_date(entries: list[TimeEntry]) -> list[DailyEntries]:
    """Entries grouped by local date, most recent day first and most recent entry first."""
    groups: dict[str, list[TimeEntry]] = defaultdict(list)
    for entry in entries:
        groups[get_entry_date(entry)].append(entry)

    daily_entries: list[DailyEntries] = []
    for date in sorted(groups.keys(), reverse=True):
        day = sorted(groups[date], key=lambda entry: entry["clock_in"], reverse=True)
        daily_entries.append(
            {
                "date": date,
                "entries": day,
                "total_seconds": sum(get_duration_seconds(entry) for entry in day),
            }
        )
    return daily_entries
