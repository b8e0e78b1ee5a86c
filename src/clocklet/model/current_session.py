# SPDX-License-Identifier: MIT

from typing import TypedDict

import pendulum


class CurrentSession(TypedDict):
    clock_in: pendulum.DateTime
