# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from clocklet import configuration
from clocklet.repository.configuration import CONFIGURATION_REPO
from clocklet.terminal.custom_typer import AliasedTyperGroup
from clocklet.terminal.util import fail

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


def __enabled(value: bool) -> str:
    return "✓ Enabled" if value else "✗ Disabled"


@app.command("show, v")
def show() -> None:
    """Display current configuration settings."""
    config = CONFIGURATION_REPO.get_config()

    console = Console()
    table = Table()
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("reminder_enabled", __enabled(config["reminder_enabled"]))
    table.add_row(
        "reminder_threshold_minutes", str(config["reminder_threshold_minutes"])
    )
    table.add_row(
        "reminder_repeat_minutes",
        str(config["reminder_repeat_minutes"])
        if config["reminder_repeat_minutes"] is not None
        else "Off",
    )
    table.add_row("stop_on_sleep", __enabled(config["stop_on_sleep"]))
    table.add_row(
        "clock_event_notification_enabled",
        __enabled(config["clock_event_notification_enabled"]),
    )
    table.add_row("notification_backend", config["notification_backend"])
    table.add_row("show_header", __enabled(config["show_header"]))
    table.add_row(
        "data_path",
        config["data_path"]
        if config["data_path"] is not None
        else f"{configuration.DEFAULT_DATA_PATH} (default)",
    )
    table.add_row("config_path", str(CONFIGURATION_REPO.config_path))

    console.print(table)


@app.command("set, s")
def set(
    reminder_enabled: Annotated[
        Optional[bool],
        typer.Option(
            "--reminder/--no-reminder",
            help="Enable/disable the reminder while clocked in",
        ),
    ] = None,
    reminder_threshold_minutes: Annotated[
        Optional[int],
        typer.Option(
            "--reminder-after",
            help="Minutes after clocking in before the first reminder",
        ),
    ] = None,
    reminder_repeat_minutes: Annotated[
        Optional[int],
        typer.Option(
            "--reminder-repeat",
            help="Minutes between repeated reminders",
        ),
    ] = None,
    remove_reminder_repeat: Annotated[
        bool,
        typer.Option("--no-reminder-repeat", help="Only remind once"),
    ] = False,
    stop_on_sleep: Annotated[
        Optional[bool],
        typer.Option(
            "--stop-on-sleep/--no-stop-on-sleep",
            help="Enable/disable clocking out when the system sleeps",
        ),
    ] = None,
    clock_event_notification_enabled: Annotated[
        Optional[bool],
        typer.Option(
            "--clock-notifications/--no-clock-notifications",
            help="Enable/disable notifications on clock in and clock out",
        ),
    ] = None,
    notification_backend: Annotated[
        Optional[str],
        typer.Option(
            "--notification-backend",
            help="desktop, console or none",
        ),
    ] = None,
    data_path: Annotated[
        Optional[str],
        typer.Option(
            "--data-path",
            help="Directory for the data file",
        ),
    ] = None,
    remove_data_path: Annotated[
        bool,
        typer.Option(
            "--remove-data-path",
            help="Go back to the default data directory",
        ),
    ] = False,
    show_header: Annotated[
        Optional[bool],
        typer.Option(
            "--show-header/--no-show-header",
            help="Enable/disable the header above reports",
        ),
    ] = None,
) -> None:
    """
    Update configuration settings.
    """
    try:
        CONFIGURATION_REPO.update_config(
            reminder_enabled=reminder_enabled,
            reminder_threshold_minutes=reminder_threshold_minutes,
            reminder_repeat_minutes=reminder_repeat_minutes,
            remove_reminder_repeat_minutes=remove_reminder_repeat,
            stop_on_sleep=stop_on_sleep,
            clock_event_notification_enabled=clock_event_notification_enabled,
            notification_backend=notification_backend,  # type: ignore[arg-type]
            data_path=data_path,
            remove_data_path=remove_data_path,
            show_header=show_header,
        )
    except ValueError as e:
        fail(str(e))
    CONFIGURATION_REPO.flush()

    show()
