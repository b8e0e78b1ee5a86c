# SPDX-License-Identifier: MIT

from clocklet.model.clocklet_data import CURRENT_DATA_VERSION, ClockletData


def get_clocklet_data_template() -> ClockletData:
    return {
        "version": CURRENT_DATA_VERSION,
        "current_session": None,
        "entries": [],
    }
