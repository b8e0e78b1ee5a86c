# SPDX-License-Identifier: MIT

import logging
import queue
import shutil
import subprocess
import sys
import threading
from enum import Enum
from typing import Any, Optional, Protocol, TypedDict

from rich.console import Console
from rich.panel import Panel

from clocklet.configuration import NotificationBackendName
from clocklet.model.entity_id import generate_entity_id
from clocklet.time import (
    datetime_to_display_local_time_str,
    format_duration,
    now_utc,
)

logger = logging.getLogger(__name__)

APP_TITLE = "Clocklet"
INCOMPLETE_SESSION_IDENTIFIER = "incomplete-session"


class NotificationKind(Enum):
    REMINDER = "reminder"
    INCOMPLETE_SESSION = "incomplete_session"
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"


class Notification(TypedDict):
    kind: NotificationKind
    identifier: str
    title: str
    body: str


def build_notification(kind: NotificationKind, **payload: Any) -> Notification:
    identifier = generate_entity_id()
    match kind:
        case NotificationKind.REMINDER:
            body = "Did you forget to Clock Out?"
        case NotificationKind.INCOMPLETE_SESSION:
            identifier = INCOMPLETE_SESSION_IDENTIFIER
            body = "Incomplete session found. Please set the Clock Out time."
        case NotificationKind.CLOCK_IN:
            clocked_in_at = payload.get("clock_in") or now_utc()
            body = f"Clocked in at {datetime_to_display_local_time_str(clocked_in_at)}"
        case NotificationKind.CLOCK_OUT:
            duration = format_duration(payload["duration_seconds"])
            body = f"Clocked out. Duration: {duration}"

    return {
        "kind": kind,
        "identifier": identifier,
        "title": APP_TITLE,
        "body": body,
    }


class Notifier(Protocol):
    """What the clock engine needs from the notification side. Best effort only."""

    def request_permission(self) -> None: ...

    def notify(self, kind: NotificationKind, **payload: Any) -> None: ...

    def close(self) -> None: ...


class NotificationBackend(Protocol):
    def request_permission(self) -> bool: ...

    def send(self, notification: Notification) -> None: ...


class NullNotificationBackend:
    def request_permission(self) -> bool:
        return False

    def send(self, notification: Notification) -> None:
        logger.debug("notification dropped: %s", notification["body"])


class ConsoleNotificationBackend:
    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)

    def request_permission(self) -> bool:
        return True

    def send(self, notification: Notification) -> None:
        self.console.print(
            Panel(
                notification["body"],
                title=notification["title"],
                title_align="left",
                border_style="plum1",
                expand=False,
            )
        )


class DesktopNotificationBackend:
    """Desktop notifications through notify-send on Linux or osascript on macOS."""

    def __init__(self) -> None:
        self._command: Optional[str] = None
        if sys.platform == "darwin":
            self._command = shutil.which("osascript")
        else:
            self._command = shutil.which("notify-send")

    def request_permission(self) -> bool:
        return self._command is not None

    def send(self, notification: Notification) -> None:
        if self._command is None:
            logger.debug("no desktop notification command available")
            return

        if sys.platform == "darwin":
            script = (
                f"display notification {self.__quote(notification['body'])} "
                f"with title {self.__quote(notification['title'])}"
            )
            command = [self._command, "-e", script]
        else:
            command = [
                self._command,
                "--app-name",
                notification["title"],
                notification["title"],
                notification["body"],
            ]

        result = subprocess.run(command, text=True, capture_output=True, timeout=10)
        if result.returncode != 0:
            raise RuntimeError(
                f"{command[0]} exited with {result.returncode}: {result.stderr.strip()}"
            )

    def __quote(self, text: str) -> str:
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


def get_notification_backend(name: NotificationBackendName) -> NotificationBackend:
    match name:
        case "desktop":
            return DesktopNotificationBackend()
        case "console":
            return ConsoleNotificationBackend()
        case _:
            return NullNotificationBackend()


class _PermissionRequest:
    pass


_PERMISSION_REQUEST = _PermissionRequest()
_STOP = object()


class NotificationQueue:
    """
    Notifier that hands requests to a worker thread.

    Callers never wait on delivery. Failures in the backend are logged by the
    worker and go no further. With `start_worker=False` nothing is delivered
    until `drain` is called, which tests use to run deliveries inline.
    """

    def __init__(self, backend: NotificationBackend, start_worker: bool = True) -> None:
        self.backend = backend
        self._queue: queue.Queue[Any] = queue.Queue()
        self._permission_requested = False
        self._permission_granted: Optional[bool] = None
        self._worker: Optional[threading.Thread] = None
        if start_worker:
            self._worker = threading.Thread(
                target=self.__run, name="clocklet-notifications", daemon=True
            )
            self._worker.start()

    @property
    def permission_granted(self) -> Optional[bool]:
        return self._permission_granted

    def request_permission(self) -> None:
        if self._permission_requested:
            return
        self._permission_requested = True
        self._queue.put(_PERMISSION_REQUEST)

    def notify(self, kind: NotificationKind, **payload: Any) -> None:
        self._queue.put(build_notification(kind, **payload))

    def drain(self) -> None:
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is not _STOP:
                self.__deliver(item)

    def close(self, timeout: float = 5.0) -> None:
        if self._worker is None:
            self.drain()
            return
        if self._worker.is_alive():
            self._queue.put(_STOP)
            self._worker.join(timeout)
        self._worker = None

    def __run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            self.__deliver(item)

    def __deliver(self, item: Any) -> None:
        try:
            if item is _PERMISSION_REQUEST:
                self._permission_granted = self.backend.request_permission()
                logger.debug("notification permission: %s", self._permission_granted)
            else:
                self.backend.send(item)
        except Exception:
            logger.warning("notification could not be delivered", exc_info=True)
