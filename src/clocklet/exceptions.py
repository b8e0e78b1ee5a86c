# SPDX-License-Identifier: MIT

from typing import Any, Optional


class ClockletError(Exception):
    """Base exception for clocklet errors."""

    pass


class InvalidInterval(ClockletError, ValueError):
    """Raised when a clock out is not strictly after its clock in."""

    def __init__(self, clock_in: Any = None, clock_out: Any = None) -> None:
        self.clock_in = clock_in
        self.clock_out = clock_out
        super().__init__("Clock Out must be after Clock In")


class DataStoreError(ClockletError):
    """Base exception for persistence failures."""

    message = "Data store error"

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        if cause is None:
            super().__init__(self.message)
        else:
            super().__init__(f"{self.message}: {cause}")


class EncodingFailed(DataStoreError):
    """Raised when the in-memory state cannot be serialized."""

    message = "Failed to encode data"


class WriteFailed(DataStoreError):
    """Raised when the data file cannot be written."""

    message = "Failed to write data"


class DecodingFailed(DataStoreError):
    """Raised when the data file cannot be read or parsed."""

    message = "Failed to decode data"


class EntryNotFound(ClockletError):
    """Raised when no entry matches an id or id prefix."""

    def __init__(self, id_prefix: str) -> None:
        self.id_prefix = id_prefix
        super().__init__(f"No entry matches '{id_prefix}'")


class AmbiguousEntryId(ClockletError):
    """Raised when an id prefix matches more than one entry."""

    def __init__(self, id_prefix: str, matches: int) -> None:
        self.id_prefix = id_prefix
        self.matches = matches
        super().__init__(f"'{id_prefix}' matches {matches} entries")
