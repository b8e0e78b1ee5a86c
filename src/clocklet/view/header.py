# SPDX-License-Identifier: MIT

from typing import Optional

from rich import print
from rich.padding import Padding

from clocklet.view.state import get_show_header


def header(sub_header: Optional[str] = None, tracking: bool = False) -> None:
    """Print the application header.

    Args:
        sub_header: Optional sub-header text to display
        tracking: Whether a session is open, shown next to the app name
    """
    if not get_show_header():
        return

    state = "[green]● tracking[/green]" if tracking else "[bright_black]○ idle[/bright_black]"
    print(Padding(f"[dark_orange]clocklet[/dark_orange] {state}", (1, 0, 0, 1)))
    if sub_header is not None:
        print(Padding(f"[sandy_brown]{sub_header}[/sandy_brown]", (0, 1)))
