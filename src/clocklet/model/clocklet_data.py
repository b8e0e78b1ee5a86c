# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

from clocklet.model.current_session import CurrentSession
from clocklet.model.time_entry import TimeEntry

CURRENT_DATA_VERSION = 1


class ClockletData(TypedDict):
    version: int
    current_session: Optional[CurrentSession]
    entries: list[TimeEntry]
