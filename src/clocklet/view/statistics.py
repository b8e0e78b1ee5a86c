# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from clocklet.model.monthly_statistic import (
    MonthlyStatistic,
    get_display_label,
    get_total_hours,
)
from clocklet.service.aggregation import summarize_statistics
from clocklet.time import format_duration
from clocklet.view.header import header

BAR_WIDTH = 30


def __bar(total_seconds: int, peak_seconds: int) -> str:
    if peak_seconds <= 0 or total_seconds <= 0:
        return ""
    return "█" * max(1, round(total_seconds / peak_seconds * BAR_WIDTH))


def statistics_report(
    statistics: list[MonthlyStatistic],
    title: str = "statistics",
    tracking: bool = False,
) -> None:
    header(title, tracking)

    console = Console()
    if all(statistic["total_seconds"] == 0 for statistic in statistics):
        console.print("[bright_black]no data for this period[/bright_black]")
        return

    peak_seconds = max(statistic["total_seconds"] for statistic in statistics)

    statistics_table = Table(box=box.SIMPLE)
    statistics_table.add_column("month")
    statistics_table.add_column("total", justify="right")
    statistics_table.add_column("hours", justify="right")
    statistics_table.add_column("")

    for statistic in statistics:
        statistics_table.add_row(
            get_display_label(statistic),
            format_duration(statistic["total_seconds"]),
            f"{get_total_hours(statistic):.1f}",
            f"[plum1]{__bar(statistic['total_seconds'], peak_seconds)}[/plum1]",
        )

    console.print(statistics_table)

    summary = summarize_statistics(statistics)
    summary_table = Table(box=box.SIMPLE, show_header=False)
    summary_table.add_column("property", style="cyan")
    summary_table.add_column("value")
    summary_table.add_row("total", f"{summary['total_hours']:.1f}h")
    summary_table.add_row(
        "average / month", f"{summary['average_hours_per_month']:.1f}h"
    )
    if summary["peak_month"] is not None:
        summary_table.add_row(
            "peak month",
            f"{get_display_label(summary['peak_month'])} "
            f"({get_total_hours(summary['peak_month']):.1f}h)",
        )
    console.print(summary_table)
