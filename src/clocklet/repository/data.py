# SPDX-License-Identifier: MIT

import json
import logging
import os
import shutil
import tempfile
from copy import deepcopy
from pathlib import Path
from typing import Any, Iterable, Optional

from clocklet import configuration, time
from clocklet.exceptions import DecodingFailed, EncodingFailed, WriteFailed
from clocklet.model.clocklet_data import ClockletData
from clocklet.model.current_session import CurrentSession
from clocklet.model.entity_id import EntityId
from clocklet.model.time_entry import TimeEntry
from clocklet.template.clocklet_data import get_clocklet_data_template

logger = logging.getLogger(__name__)


class DataRepository:
    """
    Holds the canonical in-memory copy of the persisted state.

    Reads hand out deep copies. The mutators mark the repository dirty and
    `flush` writes the whole state to a single JSON file atomically.
    """

    def __init__(self, data_file_path: Optional[Path] = None) -> None:
        self._data_file_path = data_file_path
        self._data: Optional[ClockletData] = None
        self._loaded_mtime_ns: Optional[int] = None
        self.is_dirty = False

    @property
    def data_file_path(self) -> Path:
        if self._data_file_path is not None:
            return self._data_file_path
        return configuration.DATA_FILE_PATH

    @property
    def data(self) -> ClockletData:
        if self._data is None:
            self.load()
        if self._data is None:
            raise ValueError()
        return self._data

    def load(self) -> None:
        """
        Load the data file into memory.

        A missing file gives the empty default state. When the file cannot be
        decoded the empty state is still installed, a copy of the unreadable
        file is kept next to it and DecodingFailed is raised.
        """
        self.is_dirty = False
        self._loaded_mtime_ns = self.__current_mtime_ns()

        if not self.data_file_path.is_file():
            self._data = get_clocklet_data_template()
            return

        try:
            raw_data = json.loads(self.data_file_path.read_text(encoding="utf-8"))
            self._data = self.__convert_data_for_deserialization(raw_data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            self._data = get_clocklet_data_template()
            self.__back_up_unreadable_file()
            raise DecodingFailed(e) from e

    def __back_up_unreadable_file(self) -> None:
        backup_path = self.data_file_path.with_name(self.data_file_path.name + ".bak")
        try:
            shutil.copy2(self.data_file_path, backup_path)
            logger.warning("unreadable data file copied to %s", backup_path)
        except OSError:
            logger.exception("could not back up unreadable data file")

    def __save_data(self) -> None:
        try:
            serializable_data = self.__convert_data_for_serialization(
                deepcopy(self.data)
            )
            text = json.dumps(serializable_data, indent=2, sort_keys=True)
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise EncodingFailed(e) from e

        try:
            self.data_file_path.parent.mkdir(parents=True, exist_ok=True)
            # Temp file must share the directory for os.replace to be atomic
            file_descriptor, temp_path = tempfile.mkstemp(
                dir=self.data_file_path.parent,
                prefix=f".{self.data_file_path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(file_descriptor, "w", encoding="utf-8") as temp_file:
                    temp_file.write(text)
                    temp_file.flush()
                    os.fsync(temp_file.fileno())
                os.replace(temp_path, self.data_file_path)
            except BaseException:
                Path(temp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise WriteFailed(e) from e

        self._loaded_mtime_ns = self.__current_mtime_ns()

    def flush(self) -> bool:
        if self._data is not None and self.is_dirty:
            self.__save_data()
            self.is_dirty = False
            return True
        return False

    def has_external_changes(self) -> bool:
        """True when the data file changed on disk since it was last loaded or saved."""
        return self.__current_mtime_ns() != self._loaded_mtime_ns

    def __current_mtime_ns(self) -> Optional[int]:
        try:
            return self.data_file_path.stat().st_mtime_ns
        except OSError:
            return None

    def __convert_data_for_serialization(self, data: ClockletData) -> dict[str, Any]:
        current_session = data["current_session"]
        return {
            "version": data["version"],
            "currentSession": (
                None
                if current_session is None
                else {"clockIn": time.datetime_to_iso_str(current_session["clock_in"])}
            ),
            "entries": [
                self.__convert_entry_for_serialization(entry)
                for entry in data["entries"]
            ],
        }

    def __convert_entry_for_serialization(self, entry: TimeEntry) -> dict[str, Any]:
        return {
            "id": entry["id"],
            "clockIn": time.datetime_to_iso_str(entry["clock_in"]),
            "clockOut": time.datetime_to_iso_str(entry["clock_out"]),
            "createdAt": time.datetime_to_iso_str(entry["created_at"]),
            "modifiedAt": time.datetime_to_iso_str_optional(entry["modified_at"]),
        }

    def __convert_data_for_deserialization(self, data: Any) -> ClockletData:
        if not isinstance(data, dict):
            raise TypeError("data file must contain a JSON object")

        version = data["version"]
        if not isinstance(version, int) or isinstance(version, bool):
            raise TypeError("version must be an integer")

        current_session: Optional[CurrentSession] = None
        raw_session = data.get("currentSession")
        if raw_session is not None:
            current_session = {
                "clock_in": time.datetime_from_str(raw_session["clockIn"])
            }

        raw_entries = data.get("entries", [])
        if not isinstance(raw_entries, list):
            raise TypeError("entries must be a list")

        entries: list[TimeEntry] = []
        seen_ids: set[EntityId] = set()
        for raw_entry in raw_entries:
            entry = self.__convert_entry_for_deserialization(raw_entry)
            if entry["id"] in seen_ids:
                logger.warning("dropping duplicate entry %s", entry["id"])
                continue
            seen_ids.add(entry["id"])
            entries.append(entry)

        return {
            "version": version,
            "current_session": current_session,
            "entries": entries,
        }

    def __convert_entry_for_deserialization(self, entry: Any) -> TimeEntry:
        if not isinstance(entry["id"], str):
            raise TypeError("entry id must be a string")
        return {
            "id": entry["id"],
            "clock_in": time.datetime_from_str(entry["clockIn"]),
            "clock_out": time.datetime_from_str(entry["clockOut"]),
            "created_at": time.datetime_from_str(entry["createdAt"]),
            "modified_at": time.datetime_from_str_optional(entry.get("modifiedAt")),
        }

    def get_data(self) -> ClockletData:
        return deepcopy(self.data)

    def get_current_session(self) -> Optional[CurrentSession]:
        return deepcopy(self.data["current_session"])

    def get_all_entries(self) -> list[TimeEntry]:
        return deepcopy(self.data["entries"])

    def get_entry(self, id: EntityId) -> Optional[TimeEntry]:
        for entry in self.data["entries"]:
            if entry["id"] == id:
                return deepcopy(entry)
        return None

    def find_entry_ids_by_prefix(self, id_prefix: str) -> list[EntityId]:
        id_prefix = id_prefix.lower()
        return [
            entry["id"]
            for entry in self.data["entries"]
            if entry["id"].lower().startswith(id_prefix)
        ]

    def set_current_session(self, current_session: Optional[CurrentSession]) -> None:
        self.data["current_session"] = deepcopy(current_session)
        self.is_dirty = True

    def save_new_entry(self, entry: TimeEntry) -> EntityId:
        self.data["entries"].append(deepcopy(entry))
        self.is_dirty = True
        return entry["id"]

    def replace_entry(self, entry: TimeEntry) -> bool:
        for index, existing_entry in enumerate(self.data["entries"]):
            if existing_entry["id"] == entry["id"]:
                self.is_dirty = True
                self.data["entries"][index] = deepcopy(entry)
                return True
        return False

    def remove_entries(self, ids: Iterable[EntityId]) -> int:
        id_set = set(ids)
        remaining = [entry for entry in self.data["entries"] if entry["id"] not in id_set]
        removed = len(self.data["entries"]) - len(remaining)
        self.data["entries"] = remaining
        self.is_dirty = True
        return removed
