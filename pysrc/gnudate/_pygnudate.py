# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - The grammar lives in _parse.py and only produces items. Everything that
#   needs a base moment (the resolver, the calendar type, the clock) is here.
# - Calendar math is done on plain integers in _math.py, since the
#   standard library's datetime stops at year 9999.
from __future__ import annotations

__version__ = "0.1.0"

import enum
import logging
from dataclasses import replace as _replace_item
from datetime import datetime as _datetime, timezone as _timezone
from time import time_ns
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Optional,
    no_type_check,
)

from ._common import (
    GNU_MAX_YEAR,
    MAX_OFFSET,
    ConflictingItemsError,
    InvalidItemError,
    OutOfRangeError,
    ParseError,
    UnexpectedInputError,
    mk_fixed_tzinfo,
)
from ._items import (
    Date,
    DateTime,
    Item,
    PureNumber,
    Relative,
    Time,
    TimeZoneRule,
    Timestamp,
    WeekdayRef,
)
from ._math import (
    civil_from_unix_seconds,
    day_of_year,
    days_from_civil,
    days_in_month,
    replace_year_saturating,
    unix_seconds,
    weekday_monday0,
    weekday_sunday0,
)
from ._parse import (
    NoMatch,
    parse_epoch,
    parse_items,
    parse_relative,
    parse_weekday,
    scan_items,
    skip_space,
    year_from_str,
)
from ._tz import (
    TimeZoneNotFoundError,
    offset_for_local,
    parse_fixed_offset,
)

__all__ = [
    # Parsing
    "parse_datetime",
    "parse_timestamp",
    "resolve_weekday",
    "resolve_relative",
    "DateTimeBuilder",
    # Date and time
    "ExtendedDateTime",
    "system_now",
    # Weekdays
    "Weekday",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
    # Exceptions
    "ParseError",
    "InvalidItemError",
    "UnexpectedInputError",
    "ConflictingItemsError",
    "OutOfRangeError",
    "TimeZoneNotFoundError",
]

logger = logging.getLogger(__name__)


class Weekday(enum.Enum):
    """The days of the week; ``.value`` corresponds with ISO numbering."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


MONDAY = Weekday.MONDAY
TUESDAY = Weekday.TUESDAY
WEDNESDAY = Weekday.WEDNESDAY
THURSDAY = Weekday.THURSDAY
FRIDAY = Weekday.FRIDAY
SATURDAY = Weekday.SATURDAY
SUNDAY = Weekday.SUNDAY

# Helpers that pre-compute/lookup as much as possible
_UTC = _timezone.utc
_fromtimestamp = _datetime.fromtimestamp
_NANOS_PER_SEC = 1_000_000_000
_FIELDS = (
    "year",
    "month",
    "day",
    "hour",
    "minute",
    "second",
    "nanosecond",
    "offset",
)


class _ImmutableBase:
    __slots__ = ()

    # Immutable classes don't need to be copied
    @no_type_check
    def __copy__(self):
        return self

    @no_type_check
    def __deepcopy__(self, _):
        return self


if TYPE_CHECKING:
    from typing import final
else:

    def final(cls):

        def init_subclass_not_allowed(cls, **kwargs):  # pragma: no cover
            raise TypeError("Subclassing not allowed")

        cls.__init_subclass__ = init_subclass_not_allowed
        return cls


@final
class ExtendedDateTime(_ImmutableBase):
    """A date and time with a fixed UTC offset, in the proleptic Gregorian
    calendar. Unlike :class:`~datetime.datetime`, years range all the way
    from 0 to 2147485547.

    Example
    -------
    >>> d = ExtendedDateTime(2023, 7, 27, 13, 53, 54, offset=7200)
    >>> d.add_days(1)
    ExtendedDateTime(2023-07-28 13:53:54+02:00)

    Note
    ----
    The offset is in seconds east of UTC, and may be at most 24 hours in
    either direction. Arithmetic keeps the offset fixed.
    """

    __slots__ = (
        "_year",
        "_month",
        "_day",
        "_hour",
        "_minute",
        "_second",
        "_nanos",
        "_offset",
    )

    MIN: ClassVar[ExtendedDateTime]
    """The earliest representable moment, at offset zero"""
    MAX: ClassVar[ExtendedDateTime]
    """The latest representable moment, at offset zero"""

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
        offset: int = 0,
    ) -> None:
        if not 0 <= year <= GNU_MAX_YEAR:
            raise OutOfRangeError(
                f"year must be between 0 and {GNU_MAX_YEAR}, got {year}"
            )
        if not 1 <= month <= 12:
            raise OutOfRangeError(f"month must be between 1 and 12, got {month}")
        if not 1 <= day <= days_in_month(year, month):
            raise OutOfRangeError(
                f"day {day} is out of range for {year:04d}-{month:02d}"
            )
        if not 0 <= hour < 24:
            raise OutOfRangeError(f"hour out of range: {hour}")
        if not 0 <= minute < 60:
            raise OutOfRangeError(f"minute out of range: {minute}")
        if not 0 <= second < 60:
            raise OutOfRangeError(f"second out of range: {second}")
        if not 0 <= nanosecond < _NANOS_PER_SEC:
            raise OutOfRangeError(f"nanosecond out of range: {nanosecond}")
        if abs(offset) > MAX_OFFSET:
            raise OutOfRangeError(f"offset out of range: {offset}s")
        self._year = year
        self._month = month
        self._day = day
        self._hour = hour
        self._minute = minute
        self._second = second
        self._nanos = nanosecond
        self._offset = offset

    @classmethod
    def from_unix_seconds(
        cls, secs: int, /, *, nanosecond: int = 0, offset: int = 0
    ) -> ExtendedDateTime:
        """Create an instance from seconds since the unix epoch,
        shown at the given offset.

        Example
        -------
        >>> ExtendedDateTime.from_unix_seconds(1690466034, offset=3600)
        ExtendedDateTime(2023-07-27 14:53:54+01:00)
        """
        if abs(offset) > MAX_OFFSET:
            raise OutOfRangeError(f"offset out of range: {offset}s")
        return cls(
            *civil_from_unix_seconds(secs, offset),
            nanosecond=nanosecond,
            offset=offset,
        )

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> ExtendedDateTime:
        """Create an instance from an aware standard library datetime.
        The offset is rounded down to whole seconds."""
        if (offset := d.utcoffset()) is None:
            raise ValueError("Datetime must be aware")
        return cls(
            d.year,
            d.month,
            d.day,
            d.hour,
            d.minute,
            d.second,
            nanosecond=d.microsecond * 1_000,
            offset=int(offset.total_seconds()),
        )

    @property
    def year(self) -> int:
        return self._year

    @property
    def month(self) -> int:
        return self._month

    @property
    def day(self) -> int:
        return self._day

    @property
    def hour(self) -> int:
        return self._hour

    @property
    def minute(self) -> int:
        return self._minute

    @property
    def second(self) -> int:
        return self._second

    @property
    def nanosecond(self) -> int:
        return self._nanos

    @property
    def offset(self) -> int:
        """The UTC offset in seconds"""
        return self._offset

    def unix_seconds(self) -> int:
        """Whole seconds since the unix epoch. The nanoseconds are ignored."""
        return unix_seconds(
            self._year,
            self._month,
            self._day,
            self._hour,
            self._minute,
            self._second,
            self._offset,
        )

    def replace(self, **kwargs: Any) -> ExtendedDateTime:
        """Construct a new instance with the given fields replaced.

        Example
        -------
        >>> d = ExtendedDateTime(2020, 8, 15, 23, 12)
        >>> d.replace(year=2021, offset=-3600)
        ExtendedDateTime(2021-08-15 23:12:00-01:00)
        """
        fields = {name: kwargs.pop(name, getattr(self, name)) for name in _FIELDS}
        if kwargs:
            raise TypeError(f"Unknown field(s): {', '.join(kwargs)}")
        return ExtendedDateTime(**fields)

    def add_years(self, years: int) -> ExtendedDateTime:
        """Add a number of calendar years. February 29th becomes the 28th
        if the resulting year isn't a leap year."""
        year, month, day = replace_year_saturating(
            self._year + years, self._month, self._day
        )
        try:
            return self.replace(year=year, month=month, day=day)
        except OutOfRangeError:
            raise OutOfRangeError("Result is out of range") from None

    def add_days(self, days: int) -> ExtendedDateTime:
        return self.add_seconds(days * 86_400)

    def add_hours(self, hours: int) -> ExtendedDateTime:
        return self.add_seconds(hours * 3_600)

    def add_minutes(self, minutes: int) -> ExtendedDateTime:
        return self.add_seconds(minutes * 60)

    def add_seconds(
        self, seconds: int, nanoseconds: int = 0
    ) -> ExtendedDateTime:
        """Add an exact amount of time. The offset stays the same."""
        extra_secs, nanos = divmod(self._nanos + nanoseconds, _NANOS_PER_SEC)
        try:
            return self.from_unix_seconds(
                self.unix_seconds() + seconds + extra_secs,
                nanosecond=nanos,
                offset=self._offset,
            )
        except OutOfRangeError:
            raise OutOfRangeError("Result is out of range") from None

    def day_of_year(self) -> int:
        """The day of the year, starting at 1"""
        return day_of_year(self._year, self._month, self._day)

    def day_of_week(self) -> Weekday:
        return Weekday(self.weekday_monday0() + 1)

    def weekday_sunday0(self) -> int:
        return weekday_sunday0(days_from_civil(self._year, self._month, self._day))

    def weekday_monday0(self) -> int:
        return weekday_monday0(days_from_civil(self._year, self._month, self._day))

    def format_common_iso(self) -> str:
        """Convert to the popular ISO format ``YYYY-MM-DDTHH:MM:SS±HH:MM``

        Years beyond 9999 are written in full. Seconds are added to the
        offset only if it has them.
        """
        return (
            f"{self._year:04d}-{self._month:02d}-{self._day:02d}"
            f"T{self._hour:02d}:{self._minute:02d}:{self._second:02d}"
            + bool(self._nanos) * f".{self._nanos:09d}".rstrip("0")
            + _format_offset(self._offset)
        )

    def py_datetime(self) -> _datetime:
        """Convert to a standard library :class:`~datetime.datetime`

        Note
        ----
        Nanoseconds are truncated to microseconds.
        Years outside 1-9999 and offsets of exactly 24 hours
        can't be represented, and raise :class:`OutOfRangeError`.
        """
        if not 1 <= self._year <= 9999 or abs(self._offset) == MAX_OFFSET:
            raise OutOfRangeError(
                f"{self} can't be represented as a standard library datetime"
            )
        return _datetime(
            self._year,
            self._month,
            self._day,
            self._hour,
            self._minute,
            self._second,
            self._nanos // 1_000,
            mk_fixed_tzinfo(self._offset),
        )

    def _as_tuple(self) -> tuple[int, ...]:
        return (
            self._year,
            self._month,
            self._day,
            self._hour,
            self._minute,
            self._second,
            self._nanos,
            self._offset,
        )

    def __eq__(self, other: object) -> bool:
        """Compare all fields, including the offset.

        Note
        ----
        This means two instances describing the same moment
        at different offsets are *not* equal.
        """
        if not isinstance(other, ExtendedDateTime):
            return NotImplemented
        return self._as_tuple() == other._as_tuple()

    def __hash__(self) -> int:
        return hash(self._as_tuple())

    def __str__(self) -> str:
        return self.format_common_iso()

    def __repr__(self) -> str:
        return f"ExtendedDateTime({self.format_common_iso().replace('T', ' ', 1)})"


ExtendedDateTime.MIN = ExtendedDateTime(0, 1, 1)
ExtendedDateTime.MAX = ExtendedDateTime(
    GNU_MAX_YEAR, 12, 31, 23, 59, 59, nanosecond=999_999_999
)


def _format_offset(secs: int) -> str:
    sign = "-" if secs < 0 else "+"
    hrs, rest = divmod(abs(secs), 3_600)
    mins, secs = divmod(rest, 60)
    return f"{sign}{hrs:02d}:{mins:02d}" + bool(secs) * f":{secs:02d}"


class DateTimeBuilder:
    """Collects the items of a date string, then resolves them
    against a base moment with :meth:`build`.

    Each setter checks that the new item can be combined
    with the items collected so far.

    Example
    -------
    >>> b = DateTimeBuilder()
    >>> b.add(Date(day=14, month=11, year=2022))
    >>> b.push_relative(Relative("days", 1))
    >>> b.build(ExtendedDateTime(2000, 1, 1, 12))
    ExtendedDateTime(2022-11-15 00:00:00+00:00)
    """

    __slots__ = (
        "_timestamp",
        "_date",
        "_time",
        "_weekday",
        "_timezone",
        "_relative",
        "_relative_after_time",
    )

    def __init__(self) -> None:
        self._timestamp: Optional[Timestamp] = None
        self._date: Optional[Date] = None
        self._time: Optional[Time] = None
        self._weekday: Optional[WeekdayRef] = None
        self._timezone: Optional[TimeZoneRule] = None
        self._relative: list[Relative] = []
        self._relative_after_time = False

    def add(self, item: Item) -> None:
        if isinstance(item, Relative):
            self.push_relative(item)
        elif isinstance(item, Date):
            self.set_date(item)
        elif isinstance(item, Time):
            self.set_time(item)
        elif isinstance(item, DateTime):
            self.set_date(item.date)
            self.set_time(item.time)
        elif isinstance(item, WeekdayRef):
            self.set_weekday(item)
        elif isinstance(item, TimeZoneRule):
            self.set_timezone(item)
        elif isinstance(item, PureNumber):
            self.set_pure(item)
        elif isinstance(item, Timestamp):
            self.set_timestamp(item)
        else:  # pragma: no cover
            raise TypeError(f"Unknown item: {item!r}")

    def _is_empty(self) -> bool:
        return (
            self._date is None
            and self._time is None
            and self._weekday is None
            and self._timezone is None
            and not self._relative
        )

    def _check_no_timestamp(self) -> None:
        if self._timestamp is not None:
            raise ConflictingItemsError.for_timestamp()

    def set_timestamp(self, timestamp: Timestamp) -> None:
        if self._timestamp is not None:
            raise ConflictingItemsError.for_duplicate("timestamp")
        if not self._is_empty():
            raise ConflictingItemsError.for_timestamp()
        self._timestamp = timestamp

    def set_date(self, date: Date) -> None:
        self._check_no_timestamp()
        if self._date is not None:
            raise ConflictingItemsError.for_duplicate("date")
        self._date = date

    def set_time(self, time: Time) -> None:
        self._check_no_timestamp()
        if self._time is not None:
            raise ConflictingItemsError.for_duplicate("time")
        if time.offset is not None and self._timezone is not None:
            raise ConflictingItemsError.for_offset_and_zone()
        self._time = time

    def set_weekday(self, weekday: WeekdayRef) -> None:
        self._check_no_timestamp()
        if self._weekday is not None:
            raise ConflictingItemsError.for_duplicate("weekday")
        self._weekday = weekday

    def set_timezone(self, rule: TimeZoneRule) -> None:
        self._check_no_timestamp()
        if self._timezone is not None:
            raise ConflictingItemsError.for_duplicate("timezone")
        if self._time is not None and self._time.offset is not None:
            raise ConflictingItemsError.for_offset_and_zone()
        self._timezone = rule

    def push_relative(self, relative: Relative) -> None:
        self._check_no_timestamp()
        self._relative.append(relative)
        if self._time is not None:
            self._relative_after_time = True

    def set_pure(self, number: PureNumber) -> None:
        """Interpret a lone number. It completes a date that lacks a year,
        and is otherwise a time of day (``7``, ``930``, ``1230``).
        A time given earlier may only be overridden this way if a relative
        item came in between."""
        self._check_no_timestamp()
        digits = number.digits
        if self._date is not None and self._date.year is None:
            self._date = _replace_item(self._date, year=year_from_str(digits))
            return

        if len(digits) > 4:
            raise InvalidItemError(
                f"number {digits} is too long to be a time of day"
            )
        if len(digits) <= 2:
            hour, minute = int(digits), 0
        else:
            hour, minute = int(digits[:-2]), int(digits[-2:])
        if hour > 23 or minute > 59:
            raise InvalidItemError(f"number {digits} is not a valid time of day")

        if self._time is None:
            self._time = Time(hour, minute)
        elif self._relative_after_time:
            # '00:00 +0000 1 month 1230': replaces the clock of the
            # earlier time, but keeps its offset
            self._time = Time(hour, minute, offset=self._time.offset)
            self._relative_after_time = False
        else:
            raise ConflictingItemsError.for_duplicate("time")

    def build(self, base: ExtendedDateTime) -> ExtendedDateTime:
        """Resolve the collected items against the base moment.

        Raises
        ------
        OutOfRangeError
            If the result (or an intermediate step) doesn't exist,
            e.g. February 29th in a non-leap base year.
        TimeZoneNotFoundError
            Never: unknown ``TZ="..."`` rules fall back to UTC.
        """
        if (timestamp := self._timestamp) is not None:
            return ExtendedDateTime.from_unix_seconds(
                timestamp.seconds,
                nanosecond=timestamp.nanosecond,
                offset=base.offset,
            )

        dt = base
        if not (
            self._date is None
            and self._time is None
            and self._weekday is None
            and self._timezone is None
        ):
            dt = dt.replace(hour=0, minute=0, second=0, nanosecond=0)

        if (date := self._date) is not None:
            dt = dt.replace(
                year=dt.year if date.year is None else date.year,
                month=date.month,
                day=date.day,
            )

        if (time := self._time) is not None:
            dt = dt.replace(
                hour=time.hour,
                minute=time.minute,
                second=min(time.second, 59),
                nanosecond=time.nanosecond,
                offset=(
                    dt.offset
                    if time.offset is None
                    else time.offset.total_seconds()
                ),
            )
            if time.second == 60:
                dt = dt.add_seconds(1)

        if (weekday := self._weekday) is not None:
            current = dt.weekday_monday0()
            ordinal = weekday.ordinal
            # 'next friday' on a Thursday is the next day, not 8 days later
            if weekday.day != current and ordinal > 0:
                ordinal -= 1
            dt = dt.add_days((weekday.day - current) % 7 + ordinal * 7)

        for relative in self._relative:
            dt = _apply_relative(dt, relative)

        if (rule := self._timezone) is not None:
            dt = dt.replace(offset=_resolve_zone(rule, dt))

        return dt


def _apply_relative(dt: ExtendedDateTime, relative: Relative) -> ExtendedDateTime:
    unit, amount = relative.unit, relative.amount
    if unit == "years":
        return dt.add_years(int(amount))
    elif unit == "months":
        # a month is the length of the current month, applied n times over
        return dt.add_days(int(amount) * days_in_month(dt.year, dt.month))
    elif unit == "days":
        return dt.add_days(int(amount))
    elif unit == "hours":
        return dt.add_hours(int(amount))
    elif unit == "minutes":
        return dt.add_minutes(int(amount))
    else:
        # fractional seconds are truncated toward zero
        return dt.add_seconds(int(amount))


def _resolve_zone(rule: TimeZoneRule, dt: ExtendedDateTime) -> int:
    if rule.offset is not None:
        return rule.offset
    assert rule.tz is not None
    try:
        return parse_fixed_offset(rule.tz)
    except ValueError:
        pass
    try:
        return offset_for_local(
            rule.tz, dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second
        )
    except TimeZoneNotFoundError:
        logger.debug("Unknown time zone %r, falling back to UTC", rule.tz)
        return 0


def system_now() -> ExtendedDateTime:
    """The current time, at the system's local UTC offset"""
    secs, nanos = divmod(time_ns(), _NANOS_PER_SEC)
    local = _fromtimestamp(secs, _UTC).astimezone(None)
    return ExtendedDateTime.from_unix_seconds(
        secs,
        nanosecond=nanos,
        offset=int(local.utcoffset().total_seconds()),  # type: ignore[union-attr]
    )


Clock = Callable[[], ExtendedDateTime]


def parse_datetime(
    s: str,
    /,
    *,
    base: Optional[ExtendedDateTime] = None,
    clock: Optional[Clock] = None,
) -> ExtendedDateTime:
    """Parse a free-form date string, the way GNU ``date --date`` does.

    Items that aren't given are taken from ``base``, which defaults to the
    current time. The clock is only consulted if there's no ``base``, and
    only once the whole string has been parsed.

    Example
    -------
    >>> base = ExtendedDateTime(2023, 7, 27, 13, 53, 54)
    >>> parse_datetime("next friday 10am", base=base)
    ExtendedDateTime(2023-07-28 10:00:00+00:00)
    >>> parse_datetime("2 days ago", base=base)
    ExtendedDateTime(2023-07-25 13:53:54+00:00)
    >>> parse_datetime('TZ="Europe/Paris" 2025-01-02 03:04', base=base)
    ExtendedDateTime(2025-01-02 03:04:00+01:00)

    Raises
    ------
    ParseError
        If the string can't be parsed. The subclass says why.
    OutOfRangeError
        If the result isn't a valid date or is outside of the supported years.
    """
    builder = DateTimeBuilder()
    for item in parse_items(s):
        builder.add(item)
    if base is None:
        base = (clock or system_now)()
    return builder.build(base)


def resolve_weekday(s: str, /, base: ExtendedDateTime) -> ExtendedDateTime:
    """Resolve a string consisting of only a weekday, like ``next monday``

    Example
    -------
    >>> resolve_weekday("fri", ExtendedDateTime(2023, 7, 27, 13, 53))
    ExtendedDateTime(2023-07-28 00:00:00+00:00)
    """
    builder = DateTimeBuilder()
    for item in scan_items(s, (parse_weekday,)):
        builder.add(item)
    if builder._weekday is None:
        raise ParseError(f"No weekday found in {s!r}")
    return builder.build(base)


def resolve_relative(s: str, /, base: ExtendedDateTime) -> ExtendedDateTime:
    """Apply one or more relative items, like ``+1 week 2 days ago``,
    to the base moment. The time of day is left as-is."""
    builder = DateTimeBuilder()
    for item in scan_items(s, (parse_relative,)):
        builder.add(item)
    if not builder._relative:
        raise ParseError(f"No relative items found in {s!r}")
    return builder.build(base)


def parse_timestamp(s: str, /) -> tuple[int, int]:
    """Parse a string of the form ``@seconds[.fraction]``

    Returns the seconds since the epoch and the (always positive)
    nanosecond. Negative values are floored.

    >>> parse_timestamp("@-1.5")
    (-2, 500000000)
    """
    try:
        timestamp, rest = parse_epoch(s)
    except NoMatch:
        raise ParseError(f"Invalid timestamp: {s!r}") from None
    if skip_space(rest):
        raise UnexpectedInputError.for_rest(skip_space(rest))
    return timestamp.seconds, timestamp.nanosecond


def _patch_time_frozen(dt: ExtendedDateTime) -> None:
    global time_ns

    def time_ns() -> int:
        return dt.unix_seconds() * _NANOS_PER_SEC + dt.nanosecond


def _patch_time_keep_ticking(dt: ExtendedDateTime) -> None:
    global time_ns

    _patched_at = time_ns()
    _time_ns = time_ns

    def time_ns() -> int:
        return (
            dt.unix_seconds() * _NANOS_PER_SEC
            + dt.nanosecond
            + _time_ns()
            - _patched_at
        )


def _unpatch_time() -> None:
    global time_ns

    from time import time_ns
