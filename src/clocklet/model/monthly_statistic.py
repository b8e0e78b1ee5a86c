# SPDX-License-Identifier: MIT

from typing import TypedDict

import pendulum


class MonthlyStatistic(TypedDict):
    id: str
    year: int
    month: int
    total_seconds: int


def make_month_key(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def get_monthly_statistic(year: int, month: int, total_seconds: int) -> MonthlyStatistic:
    return {
        "id": make_month_key(year, month),
        "year": year,
        "month": month,
        "total_seconds": max(0, total_seconds),
    }


def get_total_hours(statistic: MonthlyStatistic) -> float:
    return statistic["total_seconds"] / 3600.0


def get_display_label(statistic: MonthlyStatistic) -> str:
    return pendulum.date(statistic["year"], statistic["month"], 1).format("MMMM YYYY")
