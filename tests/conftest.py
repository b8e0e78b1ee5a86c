# SPDX-License-Identifier: MIT

import logging
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pendulum
import pytest
from pendulum.tz import set_local_timezone

from clocklet import configuration
from clocklet.configuration import Configuration, get_default_configuration
from clocklet.repository.configuration import CONFIGURATION_REPO
from clocklet.repository.data import DataRepository
from clocklet.service.clock import ClockEngine
from clocklet.service.notification import NotificationKind


def utc(*args: int) -> pendulum.DateTime:
    return pendulum.datetime(*args, tz="UTC")


class FakeClock:
    def __init__(self, now: pendulum.DateTime) -> None:
        self.now = now

    def __call__(self) -> pendulum.DateTime:
        return self.now

    def advance(self, **kwargs: Any) -> pendulum.DateTime:
        self.now = self.now.add(**kwargs)
        return self.now


class RecordingNotifier:
    def __init__(self) -> None:
        self.notifications: list[tuple[NotificationKind, dict[str, Any]]] = []
        self.permission_requests = 0
        self.closed = False

    def request_permission(self) -> None:
        self.permission_requests += 1

    def notify(self, kind: NotificationKind, **payload: Any) -> None:
        self.notifications.append((kind, payload))

    def close(self) -> None:
        self.closed = True

    def kinds(self) -> list[NotificationKind]:
        return [kind for kind, _ in self.notifications]


class ManualTimer:
    def __init__(
        self, interval: float, function: Callable[..., None], args: tuple[Any, ...] = ()
    ) -> None:
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.fired = True
        self.function(*self.args)


class ManualTimerFactory:
    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(
        self,
        interval: float,
        function: Callable[..., None],
        args: Optional[tuple[Any, ...]] = None,
    ) -> ManualTimer:
        timer = ManualTimer(interval, function, args or ())
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> ManualTimer:
        return self.timers[-1]

    @property
    def pending(self) -> list[ManualTimer]:
        return [
            timer
            for timer in self.timers
            if timer.started and not (timer.cancelled or timer.fired)
        ]


@pytest.fixture(autouse=True)
def local_timezone() -> Generator[None, None, None]:
    set_local_timezone(pendulum.timezone("UTC"))
    yield
    set_local_timezone()


@pytest.fixture(autouse=True)
def clocklet_logger() -> Generator[None, None, None]:
    yield
    logger = logging.getLogger("clocklet")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    monkeypatch.setattr(configuration, "CONFIG_PATH", config_dir)
    monkeypatch.setattr(configuration, "APP_CONFIG_PATH", config_dir / "config.yaml")
    monkeypatch.setattr(configuration, "DATA_PATH", data_dir)
    monkeypatch.setattr(configuration, "DATA_FILE_PATH", data_dir / "data.json")
    CONFIGURATION_REPO.reload()
    yield tmp_path
    CONFIGURATION_REPO.reload()


@pytest.fixture
def config() -> Configuration:
    return get_default_configuration()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(utc(2026, 1, 18, 9, 0, 0))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def timers() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "store" / "data.json"


@pytest.fixture
def repository(data_file: Path) -> DataRepository:
    return DataRepository(data_file)


@pytest.fixture
def engine(
    repository: DataRepository,
    config: Configuration,
    notifier: RecordingNotifier,
    clock: FakeClock,
    timers: ManualTimerFactory,
) -> ClockEngine:
    engine = ClockEngine(repository, lambda: config, notifier, clock=clock)
    engine.reminder_scheduler.timer_factory = timers
    engine.load()
    return engine
