# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Optional, TypedDict

import pendulum

from clocklet.exceptions import InvalidInterval
from clocklet.model.entity_id import EntityId, generate_entity_id
from clocklet.time import datetime_to_local_date_str, now_utc, seconds_between


class TimeEntry(TypedDict):
    id: EntityId
    clock_in: pendulum.DateTime
    clock_out: pendulum.DateTime
    created_at: pendulum.DateTime
    modified_at: Optional[pendulum.DateTime]


def validate_interval(clock_in: pendulum.DateTime, clock_out: pendulum.DateTime) -> None:
    if clock_out <= clock_in:
        raise InvalidInterval(clock_in, clock_out)


def create_time_entry(
    clock_in: pendulum.DateTime, clock_out: pendulum.DateTime
) -> TimeEntry:
    validate_interval(clock_in, clock_out)
    return {
        "id": generate_entity_id(),
        "clock_in": clock_in,
        "clock_out": clock_out,
        "created_at": now_utc(),
        "modified_at": None,
    }


def update_time_entry(
    entry: TimeEntry, clock_in: pendulum.DateTime, clock_out: pendulum.DateTime
) -> TimeEntry:
    """
    Return a copy of the entry with new clock in/out times.

    The id and created_at of the entry are carried over and modified_at is set
    to the current moment. The entry passed in is never changed.
    """
    validate_interval(clock_in, clock_out)
    updated = deepcopy(entry)
    updated["clock_in"] = clock_in
    updated["clock_out"] = clock_out
    updated["modified_at"] = now_utc()
    return updated


def get_duration_seconds(entry: TimeEntry) -> int:
    return seconds_between(entry["clock_in"], entry["clock_out"])


def get_entry_date(entry: TimeEntry) -> str:
    """Local calendar date of the clock in, used as the grouping key."""
    return datetime_to_local_date_str(entry["clock_in"])
