# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console

from clocklet.exceptions import InvalidInterval
from clocklet.terminal.parse import DATETIME_HELP, parse_datetime
from clocklet.terminal.util import (
    check_last_error,
    fail,
    get_engine,
    resolve_entry_id,
)
from clocklet.view.entry import history_report, single_entry_report


def add(
    ctx: typer.Context,
    clock_in: Annotated[
        pendulum.DateTime,
        typer.Option("--in", "-i", parser=parse_datetime, help=DATETIME_HELP),
    ],
    clock_out: Annotated[
        pendulum.DateTime,
        typer.Option("--out", "-o", parser=parse_datetime, help=DATETIME_HELP),
    ],
) -> None:
    """
    add a past entry by hand
    """
    engine = get_engine(ctx)

    try:
        entry = engine.add_entry(clock_in, clock_out)
    except InvalidInterval as e:
        fail(str(e))
    check_last_error(engine)

    single_entry_report(entry, "added entry")


def modify(
    ctx: typer.Context,
    id: str,
    clock_in: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--in", "-i", parser=parse_datetime, help=DATETIME_HELP),
    ] = None,
    clock_out: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--out", "-o", parser=parse_datetime, help=DATETIME_HELP),
    ] = None,
) -> None:
    """
    change the clock in and/or clock out of an entry
    """
    engine = get_engine(ctx)

    real_id = resolve_entry_id(engine, id)
    entry = engine.get_entry(real_id)
    if entry is None:
        fail(f"No entry matches '{id}'")

    try:
        updated_entry = engine.update_entry(
            real_id,
            clock_in if clock_in is not None else entry["clock_in"],
            clock_out if clock_out is not None else entry["clock_out"],
        )
    except InvalidInterval as e:
        fail(str(e))
    check_last_error(engine)

    if updated_entry is not None:
        single_entry_report(updated_entry, "modified entry")


def delete(
    ctx: typer.Context,
    ids: Annotated[list[str], typer.Argument(help="entry ids or unique id prefixes")],
) -> None:
    """
    delete one or more entries
    """
    engine = get_engine(ctx)

    real_ids = [resolve_entry_id(engine, id) for id in ids]
    removed = engine.delete_entries(real_ids)
    check_last_error(engine)

    console = Console()
    console.print(f"deleted {removed} {'entry' if removed == 1 else 'entries'}")


def history(
    ctx: typer.Context,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-n", min=1, help="only show the most recent days"),
    ] = None,
) -> None:
    """
    list entries grouped by day, most recent first
    """
    engine = get_engine(ctx)

    daily_entries = engine.entries_by_date()
    if days is not None:
        daily_entries = daily_entries[:days]

    history_report(daily_entries, engine.is_tracking)
