# SPDX-License-Identifier: MIT

from yaml import dump

try:
    from yaml import CDumper as Dumper
except ImportError:
    from yaml import Dumper  # type: ignore[assignment]

from clocklet import configuration
from clocklet.repository.configuration import CONFIGURATION_REPO
from clocklet.repository.data import DataRepository
from clocklet.service.clock import ClockEngine
from clocklet.service.notification import NotificationQueue, get_notification_backend


def initialize() -> None:
    configuration.CONFIG_PATH.mkdir(parents=True, exist_ok=True)
    configuration.load_data_path_configuration()
    configuration.DATA_PATH.mkdir(parents=True, exist_ok=True)

    __ensure_config_files()

    # Writes back any settings added since the config file was created
    CONFIGURATION_REPO.flush()


def __ensure_config_files() -> None:
    if not configuration.APP_CONFIG_PATH.is_file():
        configuration.APP_CONFIG_PATH.touch()
        config = configuration.get_default_configuration()
        configuration.APP_CONFIG_PATH.write_text(dump(dict(config), Dumper=Dumper))


def create_engine() -> ClockEngine:
    config = CONFIGURATION_REPO.get_config()
    notifier = NotificationQueue(get_notification_backend(config["notification_backend"]))
    return ClockEngine(DataRepository(), CONFIGURATION_REPO.get_config, notifier)
