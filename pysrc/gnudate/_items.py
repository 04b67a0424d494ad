"""The items that make up a date string, as produced by the grammar.

Items only hold what was written. Combining them with each other and with
the base moment happens in the resolver.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

from ._common import InvalidItemError, Nanos


@dataclass(frozen=True)
class Offset:
    """A numeric UTC offset as written, e.g. ``-05:30``"""

    negative: bool
    hours: int
    minutes: int

    @classmethod
    def checked(cls, negative: bool, hours: int, minutes: int) -> Offset:
        if hours > 24:
            raise InvalidItemError("timezone hour must be between 0 and 24")
        if minutes > 59 or (hours == 24 and minutes != 0):
            raise InvalidItemError("timezone minute must be between 0 and 59")
        return cls(negative, hours, minutes)

    def total_seconds(self) -> int:
        secs = self.hours * 3600 + self.minutes * 60
        return -secs if self.negative else secs

    def merge(self, other: Offset) -> Offset:
        """Add another offset to this one, as in ``EST+1``.

        The result isn't bounds-checked: ``m+24`` gives 36 hours.
        """
        total = self.total_seconds() + other.total_seconds()
        hours, minutes = divmod(abs(total) // 60, 60)
        return Offset(total < 0, hours, minutes)

    def __str__(self) -> str:
        sign = "-" if self.negative else "+"
        return f"{sign}{self.hours:02}:{self.minutes:02}"


@dataclass(frozen=True)
class Date:
    day: int
    month: int
    year: Optional[int] = None


@dataclass(frozen=True)
class Time:
    hour: int
    minute: int = 0
    second: int = 0  # may be 60 for a leap second
    nanosecond: Nanos = 0
    offset: Optional[Offset] = None


@dataclass(frozen=True)
class DateTime:
    """A date and time of day written together, ISO 8601 style"""

    date: Date
    time: Time


@dataclass(frozen=True)
class WeekdayRef:
    """A reference to a day of the week, e.g. ``next friday``"""

    ordinal: int
    day: int  # Monday is 0, Sunday is 6


RelativeUnit = Literal["years", "months", "days", "hours", "minutes", "seconds"]


@dataclass(frozen=True)
class Relative:
    """A displacement, e.g. ``3 weeks ago``. Only seconds may be fractional."""

    unit: RelativeUnit
    amount: Union[int, float]


@dataclass(frozen=True)
class Timestamp:
    """Seconds since the unix epoch.

    Negative values are floored: the nanosecond is always positive.
    """

    seconds: int
    nanosecond: Nanos = 0


@dataclass(frozen=True)
class TimeZoneRule:
    """A standalone time zone item.

    Either a fixed offset in seconds (from an abbreviation like ``EST`` or a
    bare numeric offset) or the contents of a ``TZ="..."`` rule, which are
    resolved against the local time once it is known.
    """

    offset: Optional[int] = None
    tz: Optional[str] = None


@dataclass(frozen=True)
class PureNumber:
    """A number on its own, interpreted as a year or a time by the resolver"""

    digits: str


Item = Union[
    Timestamp,
    Date,
    Time,
    DateTime,
    WeekdayRef,
    Relative,
    TimeZoneRule,
    PureNumber,
]
