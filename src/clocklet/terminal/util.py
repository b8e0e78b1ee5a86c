# SPDX-License-Identifier: MIT

from typing import NoReturn, cast

import typer
from rich.console import Console

from clocklet.exceptions import AmbiguousEntryId, EntryNotFound
from clocklet.model.entity_id import EntityId
from clocklet.service.clock import ClockEngine

error_console = Console(stderr=True)


def get_engine(ctx: typer.Context) -> ClockEngine:
    return cast(ClockEngine, ctx.obj)


def fail(message: str) -> NoReturn:
    error_console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def resolve_entry_id(engine: ClockEngine, id_prefix: str) -> EntityId:
    try:
        return engine.resolve_entry_id(id_prefix)
    except (EntryNotFound, AmbiguousEntryId) as e:
        fail(str(e))


def check_last_error(engine: ClockEngine) -> None:
    """Exit with an error when the last operation could not be saved."""
    if engine.last_error is not None:
        fail(f"changes kept in memory but not saved: {engine.last_error}")
