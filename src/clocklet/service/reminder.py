# SPDX-License-Identifier: MIT

import logging
import threading
from typing import Any, Callable, Optional, Protocol

from clocklet.configuration import Configuration
from clocklet.service.notification import NotificationKind, Notifier

logger = logging.getLogger(__name__)


class Timer(Protocol):
    daemon: bool

    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[..., Timer]
Post = Callable[..., None]


class ReminderScheduler:
    """
    Single pending reminder while a session is open.

    The timer thread only posts a message back to the owner of the clock
    engine; `handle_due` runs on the owner and is where the reminder is sent
    and the repeat is armed. Every start and stop bumps a generation counter
    so a message posted by a timer that has since been stopped is ignored.
    """

    def __init__(
        self,
        notifier: Notifier,
        config_provider: Callable[[], Configuration],
        post: Post,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.notifier = notifier
        self.config_provider = config_provider
        self.post = post
        self.timer_factory = timer_factory
        self._timer: Optional[Timer] = None
        self._generation = 0

    @property
    def is_armed(self) -> bool:
        return self._timer is not None

    def start(self, elapsed_seconds: float = 0) -> None:
        """
        Arm the first reminder for a session that has already run for
        `elapsed_seconds`. A session already past the threshold is reminded
        right away.
        """
        config = self.config_provider()
        if not config["reminder_enabled"]:
            return
        self.__schedule(max(0, config["reminder_threshold_minutes"] * 60 - elapsed_seconds))

    def stop(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("reminder cancelled")

    def handle_due(self, generation: int) -> None:
        if generation != self._generation or self._timer is None:
            return
        self._timer = None

        logger.info("reminder due")
        self.notifier.notify(NotificationKind.REMINDER)

        repeat_minutes = self.config_provider()["reminder_repeat_minutes"]
        if repeat_minutes:
            self.__schedule(repeat_minutes * 60)

    def __schedule(self, seconds: float) -> None:
        self.stop()
        generation = self._generation
        timer = self.timer_factory(seconds, self.__on_timer, args=(generation,))
        timer.daemon = True
        timer.start()
        self._timer = timer
        logger.debug("reminder armed for %s seconds", seconds)

    def __on_timer(self, *args: Any) -> None:
        # Runs on the timer thread
        self.post(self.handle_due, *args)
