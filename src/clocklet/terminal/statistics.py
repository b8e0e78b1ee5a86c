# SPDX-License-Identifier: MIT

from typing import Annotated

import typer

from clocklet.terminal.util import get_engine
from clocklet.view.statistics import statistics_report


def stats(
    ctx: typer.Context,
    months: Annotated[
        int,
        typer.Option("--months", "-m", min=1, help="number of months ending this month"),
    ] = 6,
    all_months: Annotated[
        bool,
        typer.Option("--all", "-a", help="every month since the first entry"),
    ] = False,
) -> None:
    """
    show monthly totals
    """
    engine = get_engine(ctx)

    if all_months:
        statistics = engine.all_time_statistics()
        title = "all months"
    else:
        statistics = engine.monthly_statistics(months)
        title = f"last {months} months"

    statistics_report(statistics, title, engine.is_tracking)
