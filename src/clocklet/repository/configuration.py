# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from pathlib import Path
from typing import Optional

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from clocklet import configuration

logger = logging.getLogger(__name__)


class ConfigurationRepository:
    def __init__(self, config_path: Optional[Path] = None) -> None:
        self._config_path = config_path
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config_path(self) -> Path:
        if self._config_path is not None:
            return self._config_path
        return configuration.APP_CONFIG_PATH

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        if not self.config_path.is_file():
            self._config = configuration.get_default_configuration()
            return

        self._config = load(self.config_path.read_text(), Loader=Loader)

        if not isinstance(self._config, dict):
            if self._config is not None:
                logger.warning("%s is not a mapping, using defaults", self.config_path)
            self._config = configuration.get_default_configuration()
            self.is_dirty = True
            return

        # Migration: back-fill any setting added after the file was written and
        # replace values that were edited into something unusable
        for key, value in configuration.get_default_configuration().items():
            if key not in self._config:
                self._config[key] = value  # type: ignore[literal-required]
                self.is_dirty = True
                continue
            try:
                configuration.validate_configuration_value(key, self._config[key])  # type: ignore[literal-required]
            except ValueError as e:
                logger.warning("%s in %s, using %r", e, self.config_path, value)
                self._config[key] = value  # type: ignore[literal-required]
                self.is_dirty = True

    def __save_data(self, config: configuration.Configuration) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(dump(dict(config), Dumper=Dumper))

    def flush(self) -> bool:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False
            return True
        return False

    def reload(self) -> None:
        self._config = None
        self.is_dirty = False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(
        self,
        reminder_enabled: Optional[bool] = None,
        reminder_threshold_minutes: Optional[int] = None,
        reminder_repeat_minutes: Optional[int] = None,
        remove_reminder_repeat_minutes: bool = False,
        stop_on_sleep: Optional[bool] = None,
        clock_event_notification_enabled: Optional[bool] = None,
        notification_backend: Optional[configuration.NotificationBackendName] = None,
        data_path: Optional[str] = None,
        remove_data_path: bool = False,
        show_header: Optional[bool] = None,
    ) -> None:
        for key, value in (
            ("reminder_threshold_minutes", reminder_threshold_minutes),
            ("reminder_repeat_minutes", reminder_repeat_minutes),
            ("notification_backend", notification_backend),
        ):
            if value is not None:
                configuration.validate_configuration_value(key, value)

        self.is_dirty = True

        if reminder_enabled is not None:
            self.config["reminder_enabled"] = reminder_enabled
        if reminder_threshold_minutes is not None:
            self.config["reminder_threshold_minutes"] = reminder_threshold_minutes
        if reminder_repeat_minutes is not None:
            self.config["reminder_repeat_minutes"] = reminder_repeat_minutes
        if remove_reminder_repeat_minutes:
            self.config["reminder_repeat_minutes"] = None
        if stop_on_sleep is not None:
            self.config["stop_on_sleep"] = stop_on_sleep
        if clock_event_notification_enabled is not None:
            self.config["clock_event_notification_enabled"] = (
                clock_event_notification_enabled
            )
        if notification_backend is not None:
            self.config["notification_backend"] = notification_backend
        if data_path is not None:
            self.config["data_path"] = data_path
        if remove_data_path:
            self.config["data_path"] = None
        if show_header is not None:
            self.config["show_header"] = show_header


CONFIGURATION_REPO = ConfigurationRepository()
