# SPDX-License-Identifier: MIT

from typing import Annotated

import pendulum
import typer
from rich.console import Console

from clocklet.exceptions import InvalidInterval
from clocklet.terminal.custom_typer import AliasedTyperGroup
from clocklet.terminal.parse import DATETIME_HELP, parse_datetime
from clocklet.terminal.util import check_last_error, fail, get_engine
from clocklet.time import datetime_to_display_local_datetime_str
from clocklet.view.entry import single_entry_report

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("complete, c", no_args_is_help=True)
def complete(
    ctx: typer.Context,
    clock_out: Annotated[
        pendulum.DateTime,
        typer.Option("--out", "-o", parser=parse_datetime, help=DATETIME_HELP),
    ],
) -> None:
    """
    close a session left open with the given clock out time
    """
    engine = get_engine(ctx)

    current_session = engine.current_session
    if current_session is None:
        fail("no open session")

    try:
        entry = engine.complete_incomplete_session(clock_out)
    except InvalidInterval as e:
        fail(
            f"{e}, the session started "
            + datetime_to_display_local_datetime_str(current_session["clock_in"])
        )
    check_last_error(engine)

    if entry is not None:
        single_entry_report(entry, "completed session")


@app.command("discard, d")
def discard(ctx: typer.Context) -> None:
    """
    throw away a session left open without recording an entry
    """
    engine = get_engine(ctx)

    was_tracking = engine.is_tracking
    engine.discard_incomplete_session()
    check_last_error(engine)

    console = Console()
    if was_tracking:
        console.print("open session discarded")
    else:
        console.print("[bright_black]no open session[/bright_black]")
