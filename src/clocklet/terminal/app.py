# SPDX-License-Identifier: MIT

from typing import Annotated

import typer

from clocklet.cleanup import register_cleanup
from clocklet.initialize import create_engine
from clocklet.logger import configure_logging
from clocklet.repository.configuration import CONFIGURATION_REPO
from clocklet.terminal import clock, configuration, entry, recover, statistics
from clocklet.terminal.custom_typer import AliasedTyperGroup
from clocklet.view import state as view_state

app = typer.Typer(
    cls=AliasedTyperGroup,
    help="Clocklet - Clock in and out from the CLI",
    no_args_is_help=True,
)
app.command(name="in, i")(clock.clock_in)
app.command(name="out, o")(clock.clock_out)
app.command(name="toggle, t")(clock.toggle)
app.command(name="status, s")(clock.status)
app.command(name="add, a", no_args_is_help=True)(entry.add)
app.command(name="modify, m", no_args_is_help=True)(entry.modify)
app.command(name="delete, d", no_args_is_help=True)(entry.delete)
app.command(name="history, h")(entry.history)
app.command(name="stats, st")(statistics.stats)
app.add_typer(recover.app, name="recover, r", help="resolve a session left open")
app.command(name="watch, w")(clock.watch)
app.command(name="sleep")(clock.sleep)
app.add_typer(configuration.app, name="config, c", help="show or change settings")


@app.callback()
def main_callback(
    ctx: typer.Context,
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output in reports",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug output to stderr"),
    ] = False,
) -> None:
    """
    Clocklet - Clock in and out from the CLI

    Global options that apply to all commands.
    """
    configure_logging(verbose)

    config = CONFIGURATION_REPO.get_config()
    view_state.set_show_header(config["show_header"] and not no_header)

    # The engine can be handed in through the context object, otherwise one
    # is built for this invocation
    if ctx.obj is None:
        engine = create_engine()
        register_cleanup(engine)
        ctx.obj = engine
    ctx.obj.load()


def run() -> None:
    app()
