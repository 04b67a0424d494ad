"""Grammar for free-form date strings, as accepted by GNU ``date --date``.

Each parser takes the remaining input and returns the parsed value along with
the rest of the input. If a parser doesn't apply at the current position, it
raises :class:`NoMatch` so the caller can try something else. Input that has
the right shape but invalid contents (e.g. ``2022-02-30``) raises
:class:`InvalidItemError` instead, which aborts the whole parse.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterator, Optional, Sequence, TypeVar

from ._common import (
    DUMMY_LEAP_YEAR,
    GNU_MAX_YEAR,
    MAX_OFFSET,
    ConflictingItemsError,
    InvalidItemError,
    UnexpectedInputError,
)
from ._items import (
    Date,
    DateTime,
    Item,
    Offset,
    PureNumber,
    Relative,
    RelativeUnit,
    Time,
    TimeZoneRule,
    Timestamp,
    WeekdayRef,
)
from ._math import days_in_month

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class NoMatch(Exception):
    """The parser doesn't apply at this position"""


_WHITESPACE = " \t\n\r\v\f"
_DIGITS_RE = re.compile(r"[0-9]+")
_WORD_RE = re.compile(r"[A-Za-z]+")
_FRACTION_RE = re.compile(r"[.,]([0-9]+)")
# No number in the grammar is valid beyond this many significant digits
_MAX_DIGITS = 20


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def skip_comment(s: str) -> Optional[str]:
    """Skip a comment like ``(foo (bar))`` at the start of the string.
    Returns None if the parentheses are unbalanced."""
    depth = 0
    for idx, char in enumerate(s):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return s[idx + 1 :]
    return None


def skip_space(s: str) -> str:
    """Skip whitespace and comments, as well as any ``+`` or ``-`` that
    isn't followed by a digit."""
    while True:
        s = s.lstrip(_WHITESPACE)
        if s[:1] == "(":
            if (rest := skip_comment(s)) is None:
                return s
            s = rest
        elif s[:1] in ("+", "-") and not _DIGITS_RE.match(
            s[1:].lstrip(_WHITESPACE)
        ):
            s = s[1:]
        else:
            return s


def _token(pattern: re.Pattern[str], s: str) -> tuple[str, str]:
    s = skip_space(s)
    if (match := pattern.match(s)) is None:
        raise NoMatch()
    return match.group(), s[match.end() :]


def digits(s: str) -> tuple[str, str]:
    return _token(_DIGITS_RE, s)


def to_int(digits: str) -> int:
    if len(digits.lstrip("0")) > _MAX_DIGITS:
        raise InvalidItemError(f"number is too large: {digits}")
    return int(digits)


def uint(s: str) -> tuple[int, str]:
    """An unsigned integer. Leading zeros are allowed."""
    found, s = digits(s)
    return to_int(found), s


def word(s: str) -> tuple[str, str]:
    """A run of ASCII letters, lowercased"""
    found, s = _token(_WORD_RE, s)
    return found.lower(), s


def keyword(s: str, *options: str) -> tuple[str, str]:
    found, s = word(s)
    if found not in options:
        raise NoMatch()
    return found, s


def expect(s: str, literal: str) -> str:
    """Skip the given (lowercase) literal, ignoring case"""
    s = skip_space(s)
    if s[: len(literal)].lower() != literal:
        raise NoMatch()
    return s[len(literal) :]


def sign(s: str) -> tuple[int, str]:
    s = skip_space(s)
    if s[:1] == "+":
        return 1, s[1:]
    elif s[:1] == "-":
        return -1, s[1:]
    raise NoMatch()


def signed_int(s: str) -> tuple[int, str]:
    """An integer with an optional sign, which may be separated by spaces"""
    factor, s = optional(sign, s, 1)
    value, s = uint(s)
    return factor * value, s


def seconds_and_nanos(s: str) -> tuple[tuple[int, int], str]:
    """``seconds[.fraction]``, where ``,`` may also be the decimal separator"""
    secs, s = uint(s)
    if match := _FRACTION_RE.match(s):
        return (secs, parse_nanos(match.group(1))), s[match.end() :]
    return (secs, 0), s


def parse_nanos(fraction: str) -> int:
    # excess precision is discarded, not rounded
    return int(fraction[:9].ljust(9, "0"))


def optional(
    parser: Callable[[str], tuple[_T, str]], s: str, default: _T
) -> tuple[_T, str]:
    try:
        return parser(s)
    except NoMatch:
        return default, s


def first_of(s: str, *parsers: Callable[[str], tuple[_T, str]]) -> tuple[_T, str]:
    for parser in parsers:
        try:
            return parser(s)
        except NoMatch:
            pass
    raise NoMatch()


def _at_word_end(s: str) -> bool:
    return not s or s[0] in _WHITESPACE


# ---------------------------------------------------------------------------
# Calendar dates
# ---------------------------------------------------------------------------

_MONTHS = {
    "january": 1,
    "jan": 1,
    "february": 2,
    "feb": 2,
    "march": 3,
    "mar": 3,
    "april": 4,
    "apr": 4,
    "may": 5,
    "june": 6,
    "jun": 6,
    "july": 7,
    "jul": 7,
    "august": 8,
    "aug": 8,
    "september": 9,
    "sep": 9,
    "sept": 9,
    "october": 10,
    "oct": 10,
    "november": 11,
    "nov": 11,
    "december": 12,
    "dec": 12,
}
_MONTH_ABBREVIATIONS = frozenset(
    "jan feb mar apr jun jul aug sep sept oct nov dec".split()
)


def year_from_str(digits: str) -> int:
    """Interpret a written year. Two-digit years fall in 1969-2068,
    any other number of digits is taken as-is (``001`` is year 1)."""
    year = to_int(digits)
    if len(digits) == 2:
        year += 2000 if year <= 68 else 1900
    if year > GNU_MAX_YEAR:
        raise InvalidItemError(f"year must be no greater than {GNU_MAX_YEAR}")
    return year


def _checked_date(year: Optional[int], month: int, day: int) -> Date:
    if not 1 <= month <= 12:
        raise InvalidItemError("month must be between 1 and 12")
    # without a year, Feb 29 gets the benefit of the doubt
    if not 1 <= day <= days_in_month(
        DUMMY_LEAP_YEAR if year is None else year, month
    ):
        raise InvalidItemError(f"day {day} is not valid for month {month}")
    return Date(day, month, year)


def month_name(s: str) -> tuple[int, str]:
    name, s = word(s)
    if (month := _MONTHS.get(name)) is None:
        raise NoMatch()
    if name in _MONTH_ABBREVIATIONS and s[:1] == ".":
        s = s[1:]
    return month, s


def _day_of_month(s: str) -> tuple[int, str]:
    day, s = uint(s)
    if not 1 <= day <= 31:
        raise NoMatch()
    return day, s


def _year_at_word_end(s: str) -> tuple[int, str]:
    found, s = digits(s)
    # prevents reading the hour of e.g. 'nov 14 10:00' as a year
    if not _at_word_end(s):
        raise NoMatch()
    return year_from_str(found), s


def _iso_date_spaced(s: str) -> tuple[Date, str]:
    year, s = digits(s)
    month, s = uint(expect(s, "-"))
    day, s = uint(expect(s, "-"))
    return _checked_date(year_from_str(year), month, day), s


def _iso_date_compact(s: str) -> tuple[Date, str]:
    found, s = digits(s)
    if len(found) < 5:
        raise NoMatch()
    year, month, day = found[:-4], found[-4:-2], found[-2:]
    return _checked_date(year_from_str(year), int(month), int(day)), s


def _iso_date(s: str) -> tuple[Date, str]:
    return first_of(s, _iso_date_spaced, _iso_date_compact)


def _us_date(s: str) -> tuple[Date, str]:
    first, s = digits(s)
    second, s = uint(expect(s, "/"))
    try:
        third, s = digits(expect(s, "/"))
    except NoMatch:
        return _checked_date(None, to_int(first), second), s

    if len(first) >= 4:
        return _checked_date(year_from_str(first), second, to_int(third)), s
    return _checked_date(year_from_str(third), to_int(first), second), s


def _dash_year(s: str) -> tuple[int, str]:
    try:
        s = expect(s, "-")
    except NoMatch:
        pass
    return _year_at_word_end(s)


def _day_month_year(s: str) -> tuple[Date, str]:
    day, s = _day_of_month(s)
    month, s = month_name(s)
    year, s = optional(_dash_year, s, None)
    return _checked_date(year, month, day), s


def _comma_year(s: str) -> tuple[int, str]:
    try:
        rest = expect(s, ",")
    except NoMatch:
        return _year_at_word_end(s)
    # 'nov 14,2022' looks too much like a decimal number
    if not rest[:1] or rest[0] not in _WHITESPACE:
        raise NoMatch()
    return _year_at_word_end(rest)


def _month_day_year(s: str) -> tuple[Date, str]:
    month, s = month_name(s)
    day, s = _day_of_month(s)
    year, s = optional(_comma_year, s, None)
    return _checked_date(year, month, day), s


def parse_date(s: str) -> tuple[Date, str]:
    """A calendar date: ISO (``2022-11-14``, ``20221114``), US (``11/14/2022``)
    or with a month name (``14 nov 2022``, ``November 14, 2022``)"""
    return first_of(
        s, _iso_date, _us_date, _day_month_year, _month_day_year
    )


# ---------------------------------------------------------------------------
# Time of day and numeric offsets
# ---------------------------------------------------------------------------

_MERIDIEMS = (("a.m.", 0), ("p.m.", 12), ("am", 0), ("pm", 12))


def _checked_time(
    hour: int,
    minute: int,
    second: int,
    nanos: int,
    offset: Optional[Offset] = None,
) -> Time:
    if hour > 23:
        raise InvalidItemError("hour must be between 0 and 23")
    if minute > 59:
        raise InvalidItemError("minute must be between 0 and 59")
    if second > 60:
        raise InvalidItemError("second must be between 0 and 60")
    return Time(hour, minute, second, nanos, offset)


def _clock(s: str) -> tuple[tuple[int, Optional[int], int, int], str]:
    """``hour [: minute [: second [. fraction]]]``; the minute is None if absent"""
    hour, s = uint(s)
    try:
        minute, s = uint(expect(s, ":"))
    except NoMatch:
        return (hour, None, 0, 0), s
    try:
        (second, nanos), s = seconds_and_nanos(expect(s, ":"))
    except NoMatch:
        second, nanos = 0, 0
    return (hour, minute, second, nanos), s


def _meridiem(s: str) -> tuple[int, str]:
    s = skip_space(s)
    lowered = s[:4].lower()
    for text, shift in _MERIDIEMS:
        end = len(text)
        if lowered.startswith(text) and not _WORD_RE.match(s[end : end + 1]):
            return shift, s[end:]
    raise NoMatch()


def _time_12h(s: str) -> tuple[Time, str]:
    (hour, minute, second, nanos), s = _clock(s)
    shift, s = _meridiem(s)
    if not 1 <= hour <= 12:
        raise InvalidItemError("hour must be between 1 and 12 with am/pm")
    return _checked_time(hour % 12 + shift, minute or 0, second, nanos), s


def _time_24h(s: str) -> tuple[Time, str]:
    (hour, minute, second, nanos), s = _clock(s)
    offset, s = optional(parse_offset, s, None)
    if minute is None:
        # a lone hour is only a time if an offset follows, as in '10+0200'
        if offset is None or hour > 23:
            raise NoMatch()
        return Time(hour, offset=offset), s
    return _checked_time(hour, minute, second, nanos, offset), s


def parse_time(s: str) -> tuple[Time, str]:
    """A time of day, in 12-hour (``10:30pm``) or 24-hour (``22:30:00+01:00``)
    notation. Only the 24-hour form may carry an offset."""
    return first_of(s, _time_12h, _time_24h)


def _is_relative(s: str) -> bool:
    try:
        parse_relative(s)
    except (NoMatch, InvalidItemError):
        return False
    return True


def _offset_with_colon(s: str) -> tuple[Offset, str]:
    factor, s = sign(s)
    hours, s = uint(s)
    minutes, s = uint(expect(s, ":"))
    return Offset.checked(factor < 0, hours, minutes), s


def _offset_without_colon(s: str) -> tuple[Offset, str]:
    factor, s = sign(s)
    found, s = digits(s)
    # leading zeros are dropped: '+000000110' is '+0110'
    if len(found) > 4 and len(found.lstrip("0")) <= 4:
        found = found[-4:]
    if len(found) > 4:
        raise NoMatch()
    if len(found) <= 2:
        hours, minutes = found, "0"
    else:
        hours, minutes = found[:-2], found[-2:]
    return Offset.checked(factor < 0, int(hours), int(minutes)), s


def parse_offset(s: str) -> tuple[Offset, str]:
    """A numeric offset like ``+05:30``, ``-0800`` or ``+8``"""
    # '+8 years' is a displacement, not an offset followed by 'years'
    if _is_relative(s):
        raise NoMatch()
    return first_of(s, _offset_with_colon, _offset_without_colon)


# ---------------------------------------------------------------------------
# Relative items and weekdays
# ---------------------------------------------------------------------------

_DAY_SHIFTS = {"tomorrow": 1, "yesterday": -1, "today": 0, "now": 0}

_UNITS: dict[str, tuple[RelativeUnit, int]] = {
    "year": ("years", 1),
    "month": ("months", 1),
    "fortnight": ("days", 14),
    "week": ("days", 7),
    "day": ("days", 1),
    "hour": ("hours", 1),
    "minute": ("minutes", 1),
    "min": ("minutes", 1),
    "second": ("seconds", 1),
    "sec": ("seconds", 1),
}

# 'second' is missing on purpose: it's a unit
_ORDINALS = {
    "last": -1,
    "this": 0,
    "next": 1,
    "first": 1,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "sixth": 6,
    "seventh": 7,
    "eighth": 8,
    "ninth": 9,
    "tenth": 10,
    "eleventh": 11,
    "twelfth": 12,
}

_WEEKDAYS = {
    "monday": 0,
    "mon": 0,
    "tuesday": 1,
    "tue": 1,
    "tues": 1,
    "wednesday": 2,
    "wed": 2,
    "wednes": 2,
    "thursday": 3,
    "thu": 3,
    "thur": 3,
    "thurs": 3,
    "friday": 4,
    "fri": 4,
    "saturday": 5,
    "sat": 5,
    "sunday": 6,
    "sun": 6,
}
_WEEKDAY_ABBREVIATIONS = frozenset(
    "mon tue tues wed wednes thu thur thurs fri sat sun".split()
)


def _ordinal_word(s: str) -> tuple[int, str]:
    name, s = word(s)
    if (value := _ORDINALS.get(name)) is None:
        raise NoMatch()
    return value, s


def parse_ordinal(s: str) -> tuple[int, str]:
    """``last``, ``next``, ``third``, or a (signed) number"""
    return first_of(s, _ordinal_word, signed_int)


def _unit(s: str) -> tuple[tuple[RelativeUnit, int], str]:
    name, s = word(s)
    if name.endswith("s"):
        name = name[:-1]
    try:
        return _UNITS[name], s
    except KeyError:
        raise NoMatch() from None


def _ago(s: str) -> tuple[int, str]:
    try:
        _, s = keyword(s, "ago")
    except NoMatch:
        return 1, s
    return -1, s


def _day_shift(s: str) -> tuple[Relative, str]:
    name, s = word(s)
    if (days := _DAY_SHIFTS.get(name)) is None:
        raise NoMatch()
    return Relative("days", days), s


def _fractional_seconds(s: str) -> tuple[Relative, str]:
    factor, s = optional(sign, s, 1)
    secs, s = uint(s)
    # a zero fraction like '1.0' still counts
    if (match := _FRACTION_RE.match(s)) is None:
        raise NoMatch()
    nanos = parse_nanos(match.group(1))
    (unit, _), s = _unit(s[match.end() :])
    if unit != "seconds":
        raise NoMatch()
    direction, s = _ago(s)
    return Relative("seconds", factor * direction * (secs + nanos / 1e9)), s


def _displacement(s: str) -> tuple[Relative, str]:
    ordinal, s = optional(parse_ordinal, s, 1)
    (unit, multiplier), s = _unit(s)
    direction, s = _ago(s)
    return Relative(unit, ordinal * multiplier * direction), s


def parse_relative(s: str) -> tuple[Relative, str]:
    """A displacement like ``-3 weeks``, ``next year``, ``2 days ago``,
    ``1.5 seconds``, or one of ``tomorrow``, ``yesterday``, ``today``, ``now``"""
    return first_of(s, _day_shift, _fractional_seconds, _displacement)


def _day_name(s: str) -> tuple[int, str]:
    name, s = word(s)
    if (day := _WEEKDAYS.get(name)) is None:
        raise NoMatch()
    if name in _WEEKDAY_ABBREVIATIONS and s[:1] == ".":
        s = s[1:]
    return day, s


def parse_weekday(s: str) -> tuple[WeekdayRef, str]:
    """A day of the week, e.g. ``friday``, ``next tue``, ``-2 sun``"""
    try:
        ordinal, rest = parse_ordinal(s)
    except NoMatch:
        day, s = _day_name(s)
        try:
            s = expect(s, ",")
        except NoMatch:
            pass
        return WeekdayRef(0, day), s
    day, rest = _day_name(rest)
    return WeekdayRef(ordinal, day), rest


# ---------------------------------------------------------------------------
# Time zones
# ---------------------------------------------------------------------------

# Offsets in minutes. Military zones skip 'j'.
_ZONE_ABBREVIATIONS = {
    name: Offset(minutes < 0, *divmod(abs(minutes), 60))
    for name, minutes in {
        "utc": 0,
        "ut": 0,
        "gmt": 0,
        "z": 0,
        "wet": 0,
        "west": 60,
        "bst": 60,
        "wat": 60,
        "cet": 60,
        "cest": 120,
        "eet": 120,
        "eest": 180,
        "cat": 120,
        "sast": 120,
        "eat": 180,
        "msk": 180,
        "msd": 240,
        "gst": 240,
        "ist": 330,
        "sgt": 480,
        "jst": 540,
        "nzst": 720,
        "nzdt": 780,
        "nst": -210,
        "ndt": -150,
        "ast": -240,
        "adt": -180,
        "art": -180,
        "brt": -180,
        "brst": -120,
        "clt": -240,
        "clst": -180,
        "est": -300,
        "edt": -240,
        "cst": -360,
        "cdt": -300,
        "mst": -420,
        "mdt": -360,
        "pst": -480,
        "pdt": -420,
        "akst": -540,
        "akdt": -480,
        "hst": -600,
        "sst": -660,
        **{letter: 60 * (idx + 1) for idx, letter in enumerate("abcdefghi")},
        **{letter: 60 * (idx + 10) for idx, letter in enumerate("klm")},
        **{letter: -60 * (idx + 1) for idx, letter in enumerate("nopqrstuvwxy")},
    }.items()
}
_MAX_ZONE_NAME = 6


def _zone_from_offset(offset: Offset) -> TimeZoneRule:
    if abs(secs := offset.total_seconds()) > MAX_OFFSET:
        raise InvalidItemError(f"timezone offset {offset} is out of range")
    return TimeZoneRule(offset=secs)


def _named_zone(s: str) -> tuple[TimeZoneRule, str]:
    name, s = word(s)
    if len(name) > _MAX_ZONE_NAME or (offset := _ZONE_ABBREVIATIONS.get(name)) is None:
        raise NoMatch()
    try:
        extra, s = parse_offset(s)
    except NoMatch:
        pass
    else:
        offset = offset.merge(extra)
    return _zone_from_offset(offset), s


def _standalone_offset(s: str) -> tuple[TimeZoneRule, str]:
    offset, s = parse_offset(s)
    return _zone_from_offset(offset), s


def _tz_rule(s: str) -> tuple[TimeZoneRule, str]:
    s = skip_space(s)
    if s[:3].lower() != "tz=":
        raise NoMatch()
    if s[3:4] != '"':
        raise InvalidItemError('TZ rule must be quoted, as in TZ="Europe/Paris"')

    chars = []
    escaped = False
    for idx, char in enumerate(s[4:], start=4):
        if escaped:
            if char not in '\\"':
                raise InvalidItemError(f"invalid escape in TZ rule: \\{char}")
            chars.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            return TimeZoneRule(tz="".join(chars)), s[idx + 1 :]
        else:
            chars.append(char)
    raise InvalidItemError("unterminated TZ rule")


def parse_timezone(s: str) -> tuple[TimeZoneRule, str]:
    """A standalone time zone: ``TZ="Europe/Paris"``, an abbreviation like
    ``EST`` or ``utc+5:30``, or a numeric offset on its own"""
    return first_of(s, _tz_rule, _named_zone, _standalone_offset)


# ---------------------------------------------------------------------------
# Other items
# ---------------------------------------------------------------------------


def parse_epoch(s: str) -> tuple[Timestamp, str]:
    """Seconds since the epoch, as in ``@1690466034`` or ``@-1.5``"""
    s = expect(s, "@")
    factor, s = optional(sign, s, 1)
    (secs, nanos), s = seconds_and_nanos(s)
    if factor < 0 and nanos:
        # truncated toward minus infinity
        return Timestamp(-secs - 1, 1_000_000_000 - nanos), s
    return Timestamp(factor * secs, nanos), s


def parse_combined(s: str) -> tuple[DateTime, str]:
    """An ISO date and 24-hour time, separated by ``T`` or whitespace"""
    date, s = _iso_date(s)
    try:
        s = expect(s, "t")
    except NoMatch:
        if s[:1] not in _WHITESPACE or not s:
            raise
    time, s = _time_24h(s)
    return DateTime(date, time), s


def parse_pure_number(s: str) -> tuple[PureNumber, str]:
    found, s = digits(s)
    return PureNumber(found), s


# ---------------------------------------------------------------------------
# Sequencing
# ---------------------------------------------------------------------------

ITEM_PARSERS: Sequence[Callable[[str], tuple[Item, str]]] = (
    parse_epoch,
    parse_combined,
    parse_date,
    parse_time,
    parse_relative,
    parse_weekday,
    parse_timezone,
    parse_pure_number,
)


def scan_items(
    s: str, parsers: Sequence[Callable[[str], tuple[Item, str]]]
) -> Iterator[Item]:
    """Repeatedly take the first item the parsers recognize, until the
    input is exhausted. Input that nothing recognizes is an error."""
    rest = skip_space(s)
    while rest:
        try:
            item, rest = first_of(rest, *parsers)
        except NoMatch:
            raise UnexpectedInputError.for_rest(rest) from None
        logger.debug("Parsed item %r", item)
        yield item
        rest = skip_space(rest)


def parse_items(s: str) -> Iterator[Item]:
    """Split a date string into its items, in order of appearance"""
    rest = skip_space(s)
    if rest[:1] == "@":
        try:
            timestamp, rest = parse_epoch(rest)
        except NoMatch:
            pass
        else:
            # a timestamp can't be combined with anything
            if skip_space(rest):
                raise ConflictingItemsError.for_timestamp()
            yield timestamp
            return
    yield from scan_items(rest, ITEM_PARSERS)
