# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Any, Literal, Optional, TypedDict

from yaml import load

try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader  # type: ignore[assignment]
import platformdirs

APP_NAME = "clocklet"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"

DEFAULT_DATA_PATH = platformdirs.user_data_path(APP_NAME)

# These will be set dynamically by load_data_path_configuration()
DATA_PATH: Path = DEFAULT_DATA_PATH
DATA_FILE_PATH: Path = DATA_PATH / "data.json"

NotificationBackendName = Literal["desktop", "console", "none"]
NOTIFICATION_BACKENDS: tuple[NotificationBackendName, ...] = (
    "desktop",
    "console",
    "none",
)


class Configuration(TypedDict):
    reminder_enabled: bool
    reminder_threshold_minutes: int
    reminder_repeat_minutes: Optional[int]
    stop_on_sleep: bool
    clock_event_notification_enabled: bool
    notification_backend: NotificationBackendName
    data_path: Optional[str]
    show_header: bool


def get_default_configuration() -> Configuration:
    return {
        "reminder_enabled": True,
        "reminder_threshold_minutes": 60,
        "reminder_repeat_minutes": None,
        "stop_on_sleep": True,
        "clock_event_notification_enabled": True,
        "notification_backend": "desktop",
        "data_path": None,
        "show_header": True,
    }


def validate_configuration_value(key: str, value: Any) -> None:
    """Raise ValueError when `value` is not an accepted value for the setting `key`."""
    match key:
        case (
            "reminder_enabled"
            | "stop_on_sleep"
            | "clock_event_notification_enabled"
            | "show_header"
        ):
            if not isinstance(value, bool):
                raise ValueError(f"{key} must be true or false")
        case "reminder_threshold_minutes":
            if not __is_positive_int(value):
                raise ValueError(f"{key} must be greater than 0")
        case "reminder_repeat_minutes":
            if value is not None and not __is_positive_int(value):
                raise ValueError(f"{key} must be greater than 0")
        case "notification_backend":
            if value not in NOTIFICATION_BACKENDS:
                raise ValueError(
                    f"{key} must be one of {', '.join(NOTIFICATION_BACKENDS)}"
                )
        case "data_path":
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{key} must be a directory path")


def __is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def set_data_path(data_path: Path) -> None:
    global DATA_PATH, DATA_FILE_PATH

    DATA_PATH = data_path
    DATA_FILE_PATH = DATA_PATH / "data.json"


def load_data_path_configuration() -> None:
    """
    Load the configuration and set the DATA_PATH variables dynamically.

    This must be called after the config file exists and before the data
    repository is instantiated.
    """
    if not APP_CONFIG_PATH.is_file():
        # Config doesn't exist yet, use defaults
        return

    config: Optional[Configuration] = load(APP_CONFIG_PATH.read_text(), Loader=Loader)
    if not isinstance(config, dict):
        return
    data_path_setting = config.get("data_path")

    if isinstance(data_path_setting, str):
        set_data_path(Path(data_path_setting).expanduser())
