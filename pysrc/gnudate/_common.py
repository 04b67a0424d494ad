from __future__ import annotations

from datetime import timedelta as _timedelta, timezone as _timezone
from functools import lru_cache

DUMMY_LEAP_YEAR = 4
Nanos = int  # 0-999_999_999

# The largest year GNU date can represent: 'struct tm' counts years
# from 1900 in an 'int', so this is 2**31 - 1 + 1900.
GNU_MAX_YEAR = 2_147_485_547
MAX_OFFSET = 24 * 3600


# We cache fixed-offset tzinfo objects to avoid creating multiple identical ones.
# It's very common to only have whole-hour offsets, so this helps a lot.
@lru_cache
def mk_fixed_tzinfo(secs: int, /) -> _timezone:
    return _timezone(_timedelta(seconds=secs))


class ParseError(ValueError):
    """A string could not be interpreted as a date and time"""


class InvalidItemError(ParseError):
    """An item was recognized, but its content is invalid"""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class UnexpectedInputError(ParseError):
    """Part of the input could not be parsed as any item"""

    @classmethod
    def for_rest(cls, rest: str) -> UnexpectedInputError:
        return cls(f"Unexpected input: {rest!r}")


class ConflictingItemsError(ParseError):
    """Items were given that can't be combined"""

    @classmethod
    def for_timestamp(cls) -> ConflictingItemsError:
        return cls("timestamp cannot be combined with other date/time items")

    @classmethod
    def for_duplicate(cls, kind: str) -> ConflictingItemsError:
        return cls(f"{kind} cannot appear more than once")

    @classmethod
    def for_offset_and_zone(cls) -> ConflictingItemsError:
        return cls("time offset and timezone are mutually exclusive")


class OutOfRangeError(ValueError):
    """A date, time or offset is outside of the supported range"""
