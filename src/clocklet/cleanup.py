# SPDX-License-Identifier: MIT

import atexit

from clocklet.repository.configuration import CONFIGURATION_REPO
from clocklet.service.clock import ClockEngine


def shutdown(engine: ClockEngine) -> None:
    CONFIGURATION_REPO.flush()

    # Stops the reminder and waits briefly for queued notifications
    engine.shutdown()


def register_cleanup(engine: ClockEngine) -> None:
    atexit.register(shutdown, engine)
