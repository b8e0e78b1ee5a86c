# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console, Group, RenderableType
from rich.table import Table
from rich.text import Text

from clocklet.service.clock import ClockEngine
from clocklet.time import (
    datetime_to_display_local_datetime_str,
    format_duration,
    format_duration_detailed,
)
from clocklet.view.header import header


def status_renderable(engine: ClockEngine) -> RenderableType:
    status_table = Table(box=box.SIMPLE, show_header=False)
    status_table.add_column("property", style="cyan")
    status_table.add_column("value")

    current_session = engine.current_session
    if current_session is not None:
        status_table.add_row("state", "[green]tracking[/green]")
        status_table.add_row(
            "clocked in",
            datetime_to_display_local_datetime_str(current_session["clock_in"]),
        )
        status_table.add_row(
            "session", format_duration_detailed(engine.current_session_duration())
        )
    else:
        status_table.add_row("state", "[bright_black]idle[/bright_black]")

    status_table.add_row("today", format_duration(engine.today_duration()))
    status_table.add_row("this month", format_duration(engine.this_month_duration()))
    status_table.add_row("last month", format_duration(engine.last_month_duration()))

    renderables: list[RenderableType] = [status_table]
    if engine.last_error is not None:
        renderables.append(Text(f" error: {engine.last_error}", style="red"))
    return Group(*renderables)


def status_report(engine: ClockEngine, title: str = "status") -> None:
    header(title, engine.is_tracking)

    console = Console()
    console.print(status_renderable(engine))
