import os
import time
from contextlib import contextmanager
from unittest.mock import patch

from gnudate import ExtendedDateTime

# Thursday, 2023-07-27 13:53:54 UTC (1690466034)
BASE = ExtendedDateTime(2023, 7, 27, 13, 53, 54)


class AlwaysEqual:
    def __eq__(self, _):
        return True


class NeverEqual:
    def __eq__(self, _):
        return False


def at_utc(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    nanosecond: int = 0,
) -> ExtendedDateTime:
    return ExtendedDateTime(
        year, month, day, hour, minute, second, nanosecond=nanosecond
    )


@contextmanager
def system_tz(name):
    # only has an effect on Unix-like systems
    try:
        with patch.dict(os.environ, {"TZ": name}):
            time.tzset()
            yield
    finally:
        time.tzset()  # don't forget to reset the timezone after the patch!
