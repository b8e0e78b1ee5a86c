# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from clocklet.model.time_entry import TimeEntry, get_duration_seconds
from clocklet.service.aggregation import DailyEntries
from clocklet.time import (
    datetime_to_display_local_datetime_str,
    datetime_to_display_local_time_str,
    format_duration,
    local_date_str_to_display_str,
)
from clocklet.view.header import header

SHORT_ID_LENGTH = 8


def short_id(entry: TimeEntry) -> str:
    return entry["id"][:SHORT_ID_LENGTH]


def history_report(
    daily_entries: list[DailyEntries],
    tracking: bool = False,
    title: str = "history",
) -> None:
    header(title, tracking)

    console = Console()
    if not daily_entries:
        console.print("[bright_black]no entries[/bright_black]")
        return

    history_table = Table(box=box.SIMPLE)
    history_table.add_column("id", style="bright_black")
    history_table.add_column("date")
    history_table.add_column("clock in")
    history_table.add_column("clock out")
    history_table.add_column("duration", justify="right")

    for day in daily_entries:
        history_table.add_row(
            "",
            f"[bold]{local_date_str_to_display_str(day['date'])}[/bold]",
            "",
            "",
            f"[bold]{format_duration(day['total_seconds'])}[/bold]",
        )
        for entry in day["entries"]:
            edited = " [yellow]*[/yellow]" if entry["modified_at"] is not None else ""
            history_table.add_row(
                short_id(entry),
                "",
                datetime_to_display_local_time_str(entry["clock_in"]),
                datetime_to_display_local_time_str(entry["clock_out"]) + edited,
                format_duration(get_duration_seconds(entry)),
            )

    console.print(history_table)


def single_entry_report(entry: TimeEntry, title: str = "entry") -> None:
    header(title)

    entry_table = Table(box=box.SIMPLE)
    entry_table.add_column("property")
    entry_table.add_column("value")

    entry_table.add_row("id", entry["id"])
    entry_table.add_row(
        "clock in", datetime_to_display_local_datetime_str(entry["clock_in"])
    )
    entry_table.add_row(
        "clock out", datetime_to_display_local_datetime_str(entry["clock_out"])
    )
    entry_table.add_row("duration", format_duration(get_duration_seconds(entry)))
    entry_table.add_row(
        "created", datetime_to_display_local_datetime_str(entry["created_at"])
    )
    entry_table.add_row(
        "modified",
        datetime_to_display_local_datetime_str(entry["modified_at"])
        if entry["modified_at"] is not None
        else "",
    )

    console = Console()
    console.print(entry_table)
