# SPDX-License-Identifier: MIT

import logging
import queue
from enum import Enum
from typing import Any, Callable, Iterable, Optional, TypedDict

import pendulum

from clocklet.configuration import Configuration
from clocklet.exceptions import (
    AmbiguousEntryId,
    DataStoreError,
    DecodingFailed,
    EntryNotFound,
    InvalidInterval,
)
from clocklet.model.current_session import CurrentSession
from clocklet.model.entity_id import EntityId
from clocklet.model.monthly_statistic import MonthlyStatistic
from clocklet.model.time_entry import (
    TimeEntry,
    create_time_entry,
    get_duration_seconds,
    update_time_entry,
)
from clocklet.repository.data import DataRepository
from clocklet.service import aggregation
from clocklet.service.notification import NotificationKind, Notifier
from clocklet.service.reminder import ReminderScheduler
from clocklet.time import now_utc

logger = logging.getLogger(__name__)


class ClockEventType(Enum):
    LOADED = "loaded"
    CLOCKED_IN = "clocked_in"
    CLOCKED_OUT = "clocked_out"
    SESSION_COMPLETED = "session_completed"
    SESSION_DISCARDED = "session_discarded"
    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRIES_DELETED = "entries_deleted"


class ClockEvent(TypedDict):
    type: ClockEventType
    entry_ids: list[EntityId]


Listener = Callable[[ClockEvent], None]


class ClockEngine:
    """
    Clock in / clock out state machine over the persisted entry log.

    The engine is idle when there is no current session and tracking when
    there is one. It is the only writer of the data repository and saves
    after every change. A failed save is kept as `last_error` and the change
    stays in memory.

    All methods are meant to be called from a single owner thread. Other
    threads hand work to the owner with `post`, which the owner runs from
    `process_messages`.
    """

    def __init__(
        self,
        repository: DataRepository,
        config_provider: Callable[[], Configuration],
        notifier: Notifier,
        reminder_scheduler: Optional[ReminderScheduler] = None,
        clock: Callable[[], pendulum.DateTime] = now_utc,
    ) -> None:
        self._repository = repository
        self._config_provider = config_provider
        self._notifier = notifier
        self._clock = clock
        self._inbox: queue.Queue[tuple[Callable[..., None], tuple[Any, ...]]] = (
            queue.Queue()
        )
        self._listeners: list[Listener] = []
        self._last_error: Optional[Exception] = None
        self.reminder_scheduler = reminder_scheduler or ReminderScheduler(
            notifier, config_provider, self.post
        )

    @property
    def is_tracking(self) -> bool:
        return self._repository.data["current_session"] is not None

    @property
    def current_session(self) -> Optional[CurrentSession]:
        return self._repository.get_current_session()

    @property
    def entries(self) -> list[TimeEntry]:
        return self._repository.get_all_entries()

    @property
    def last_error(self) -> Optional[Exception]:
        return self._last_error

    # Loading

    def load(self) -> None:
        try:
            self._repository.load()
        except DecodingFailed as e:
            logger.error("could not load data, starting empty: %s", e)
            self._last_error = e
        self.__emit(ClockEventType.LOADED)

    def start(self) -> None:
        """
        Load the persisted state for a long-running host.

        A session still open from an earlier run is not resumed silently: an
        incomplete session notification goes out and the reminder is armed.
        The session stays open until it is completed or discarded. The
        reminder counts from the session's clock in, not from this call.
        """
        self.load()
        if self.is_tracking:
            logger.info("incomplete session found")
            self._notifier.notify(NotificationKind.INCOMPLETE_SESSION)
            self.reminder_scheduler.start(self.current_session_duration())

    def refresh(self) -> bool:
        """Reload when another process changed the data file. Returns True on reload."""
        if self._repository.is_dirty or not self._repository.has_external_changes():
            return False

        logger.debug("data file changed on disk, reloading")
        previous_session = self._repository.data["current_session"]
        previous_clock_in = (
            None if previous_session is None else previous_session["clock_in"]
        )
        self.load()

        current_session = self._repository.data["current_session"]
        if current_session is None:
            self.reminder_scheduler.stop()
        elif current_session["clock_in"] != previous_clock_in:
            self.reminder_scheduler.start(self.current_session_duration())
        return True

    # Session lifecycle

    def clock_in(self) -> None:
        current_session = self._repository.data["current_session"]
        if current_session is not None:
            logger.warning(
                "clock in ignored, already tracking since %s",
                current_session["clock_in"],
            )
            return

        now = self._clock()
        self._notifier.request_permission()
        self._repository.set_current_session({"clock_in": now})
        self.__save()
        self.reminder_scheduler.start()
        logger.info("clocked in at %s", now)

        if self._config_provider()["clock_event_notification_enabled"]:
            self._notifier.notify(NotificationKind.CLOCK_IN, clock_in=now)

        self.__emit(ClockEventType.CLOCKED_IN)

    def clock_out(self) -> Optional[TimeEntry]:
        current_session = self._repository.get_current_session()
        if current_session is None:
            return None

        entry = self.__complete_session(current_session, self._clock())
        logger.info("clocked out after %s seconds", get_duration_seconds(entry))

        if self._config_provider()["clock_event_notification_enabled"]:
            self._notifier.notify(
                NotificationKind.CLOCK_OUT,
                duration_seconds=get_duration_seconds(entry),
            )

        self.__emit(ClockEventType.CLOCKED_OUT, [entry["id"]])
        return entry

    def toggle(self) -> Optional[TimeEntry]:
        if self.is_tracking:
            return self.clock_out()
        self.clock_in()
        return None

    def complete_incomplete_session(
        self, clock_out: pendulum.DateTime
    ) -> Optional[TimeEntry]:
        current_session = self._repository.get_current_session()
        if current_session is None:
            return None

        entry = self.__complete_session(current_session, clock_out)
        logger.info("incomplete session completed")
        self.__emit(ClockEventType.SESSION_COMPLETED, [entry["id"]])
        return entry

    def discard_incomplete_session(self) -> None:
        if self._repository.data["current_session"] is None:
            return

        self._repository.set_current_session(None)
        self.__save()
        self.reminder_scheduler.stop()
        logger.info("incomplete session discarded")
        self.__emit(ClockEventType.SESSION_DISCARDED)

    def handle_system_sleep(self) -> Optional[TimeEntry]:
        if not self._config_provider()["stop_on_sleep"]:
            return None
        logger.info("system going to sleep")
        return self.clock_out()

    def __complete_session(
        self, current_session: CurrentSession, clock_out: pendulum.DateTime
    ) -> TimeEntry:
        try:
            entry = create_time_entry(current_session["clock_in"], clock_out)
        except InvalidInterval as e:
            # Session stays open
            self._last_error = e
            raise

        self._repository.save_new_entry(entry)
        self._repository.set_current_session(None)
        self.__save()
        self.reminder_scheduler.stop()
        return entry

    # Entries

    def add_entry(
        self, clock_in: pendulum.DateTime, clock_out: pendulum.DateTime
    ) -> TimeEntry:
        try:
            entry = create_time_entry(clock_in, clock_out)
        except InvalidInterval as e:
            self._last_error = e
            raise

        self._repository.save_new_entry(entry)
        self.__save()
        self.__emit(ClockEventType.ENTRY_ADDED, [entry["id"]])
        return entry

    def update_entry(
        self,
        id: EntityId,
        clock_in: pendulum.DateTime,
        clock_out: pendulum.DateTime,
    ) -> Optional[TimeEntry]:
        entry = self._repository.get_entry(id)
        if entry is None:
            return None

        try:
            updated_entry = update_time_entry(entry, clock_in, clock_out)
        except InvalidInterval as e:
            self._last_error = e
            raise

        self._repository.replace_entry(updated_entry)
        self.__save()
        self.__emit(ClockEventType.ENTRY_UPDATED, [id])
        return updated_entry

    def delete_entry(self, id: EntityId) -> int:
        return self.delete_entries([id])

    def delete_entries(self, ids: Iterable[EntityId]) -> int:
        id_list = list(ids)
        removed = self._repository.remove_entries(id_list)
        self.__save()
        self.__emit(ClockEventType.ENTRIES_DELETED, id_list)
        return removed

    def get_entry(self, id: EntityId) -> Optional[TimeEntry]:
        return self._repository.get_entry(id)

    def resolve_entry_id(self, id_prefix: str) -> EntityId:
        """Resolve a full entry id or a unique prefix of one."""
        if self._repository.get_entry(id_prefix) is not None:
            return id_prefix
        matches = self._repository.find_entry_ids_by_prefix(id_prefix)
        if not matches:
            raise EntryNotFound(id_prefix)
        if len(matches) > 1:
            raise AmbiguousEntryId(id_prefix, len(matches))
        return matches[0]

    # Aggregation at the current moment

    def current_session_duration(self) -> int:
        return aggregation.session_elapsed_seconds(
            self._repository.data["current_session"], self._clock()
        )

    def today_duration(self) -> int:
        return aggregation.today_duration(
            self._repository.data["entries"],
            self._repository.data["current_session"],
            self._clock(),
        )

    def this_month_duration(self) -> int:
        return aggregation.this_month_duration(
            self._repository.data["entries"],
            self._repository.data["current_session"],
            self._clock(),
        )

    def last_month_duration(self) -> int:
        return aggregation.last_month_duration(
            self._repository.data["entries"], self._clock()
        )

    def monthly_statistics(self, month_count: int) -> list[MonthlyStatistic]:
        return aggregation.monthly_statistics(
            self._repository.data["entries"], month_count, self._clock()
        )

    def all_time_statistics(self) -> list[MonthlyStatistic]:
        return aggregation.all_time_statistics(
            self._repository.data["entries"], self._clock()
        )

    def entries_by_date(self) -> list[aggregation.DailyEntries]:
        return aggregation.entries_by_date(self._repository.get_all_entries())

    # Observers and messages

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def post(self, callback: Callable[..., None], *args: Any) -> None:
        """Queue a callback for the owner thread. Safe to call from any thread."""
        self._inbox.put((callback, args))

    def process_messages(self, timeout: Optional[float] = 0) -> int:
        """
        Run queued callbacks on the calling thread.

        Waits up to `timeout` seconds for the first message (None waits
        forever, 0 does not wait) and then runs whatever else is queued.
        Returns the number of callbacks run.
        """
        processed = 0
        block = timeout is None or timeout > 0
        while True:
            try:
                callback, args = self._inbox.get(block=block, timeout=timeout)
            except queue.Empty:
                return processed
            callback(*args)
            processed += 1
            block = False

    def shutdown(self) -> None:
        self.reminder_scheduler.stop()
        self._notifier.close()

    def __save(self) -> None:
        try:
            self._repository.flush()
            self._last_error = None
        except DataStoreError as e:
            logger.error("could not save data: %s", e)
            self._last_error = e

    def __emit(
        self, event_type: ClockEventType, entry_ids: Optional[list[EntityId]] = None
    ) -> None:
        event: ClockEvent = {"type": event_type, "entry_ids": entry_ids or []}
        for listener in list(self._listeners):
            listener(event)
