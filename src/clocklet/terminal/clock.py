# SPDX-License-Identifier: MIT

from typing import Annotated

import typer
from rich.console import Console
from rich.live import Live

from clocklet.exceptions import InvalidInterval
from clocklet.model.time_entry import get_duration_seconds
from clocklet.terminal.util import check_last_error, fail, get_engine
from clocklet.time import datetime_to_display_local_datetime_str, format_duration
from clocklet.view.header import header
from clocklet.view.status import status_renderable, status_report


def clock_in(ctx: typer.Context) -> None:
    """
    clock in and start a session
    """
    engine = get_engine(ctx)

    current_session = engine.current_session
    if current_session is not None:
        fail(
            "already clocked in since "
            + datetime_to_display_local_datetime_str(current_session["clock_in"])
        )

    engine.clock_in()
    check_last_error(engine)

    status_report(engine, "clocked in")


def clock_out(ctx: typer.Context) -> None:
    """
    clock out and record the session as an entry
    """
    engine = get_engine(ctx)

    if not engine.is_tracking:
        fail("not clocked in")

    try:
        entry = engine.clock_out()
    except InvalidInterval as e:
        fail(f"{e}, the session is still open")
    check_last_error(engine)

    title = "clocked out"
    if entry is not None:
        title = f"clocked out after {format_duration(get_duration_seconds(entry))}"
    status_report(engine, title)


def toggle(ctx: typer.Context) -> None:
    """
    clock out when clocked in, otherwise clock in
    """
    engine = get_engine(ctx)
    if engine.is_tracking:
        clock_out(ctx)
    else:
        clock_in(ctx)


def status(ctx: typer.Context) -> None:
    """
    show the current session and totals
    """
    status_report(get_engine(ctx))


def sleep(ctx: typer.Context) -> None:
    """
    clock out because the system is about to sleep, for use from a sleep hook
    """
    engine = get_engine(ctx)

    try:
        entry = engine.handle_system_sleep()
    except InvalidInterval as e:
        fail(f"{e}, the session is still open")
    check_last_error(engine)

    console = Console()
    if entry is None:
        console.print("[bright_black]nothing to do[/bright_black]")
    else:
        console.print(
            f"clocked out for sleep after {format_duration(get_duration_seconds(entry))}"
        )


def watch(
    ctx: typer.Context,
    refresh: Annotated[
        float,
        typer.Option(
            "--refresh",
            "-r",
            min=0.1,
            help="seconds between screen refreshes",
        ),
    ] = 1.0,
) -> None:
    """
    keep running, showing a live status and sending reminders
    """
    engine = get_engine(ctx)
    engine.start()

    header("watching, press ctrl+c to stop", engine.is_tracking)
    try:
        with Live(status_renderable(engine), auto_refresh=False) as live:
            while True:
                engine.process_messages(timeout=refresh)
                engine.refresh()
                live.update(status_renderable(engine), refresh=True)
    except KeyboardInterrupt:
        pass
    finally:
        engine.shutdown()
