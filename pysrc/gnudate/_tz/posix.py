"""Parser for POSIX TZ strings with a fixed offset, like ``EST5`` or
``<+0330>-3:30``.

Strings with DST rules aren't handled here. They're looked up as
IANA time zone IDs instead.
"""

from __future__ import annotations

from string import ascii_letters as _LETTERS

from .._common import MAX_OFFSET


def parse_fixed_offset(s: str) -> int:
    """Parse a POSIX TZ string without DST rules.

    Returns the offset in seconds *east* of UTC. Components that are out
    of range are clamped, as are offsets beyond 24 hours.
    Raises ValueError if the string doesn't have this form.
    """
    if not s.isascii():
        raise ValueError("Invalid POSIX TZ string: non-ASCII characters found")
    offset, s = parse_offset(skip_tzname(s))
    if s:
        raise ValueError(f"Invalid POSIX TZ string: unexpected {s!r}")
    return offset


def skip_tzname(s: str) -> str:
    """Skip the timezone name, returning the rest of the string."""
    if s[:1] == "<":  # bracketed format, e.g. <+0330>
        stop = s.find(">") + 1
        if stop < 3:  # not found or empty name
            raise ValueError("Invalid TZ string: missing or empty name")
        return s[stop:]

    stop = len(s) - len(s.lstrip(_LETTERS))
    if stop == 0:
        raise ValueError("Invalid TZ string: invalid name")
    return s[stop:]


def parse_offset(s: str) -> tuple[int, str]:
    delta_s, s = parse_hms(s)
    # POSIX TZ strings count hours west of UTC
    return -delta_s, s


# Parse a time string in the format [+|-]h[h][:mm[:ss]]
def parse_hms(s: str) -> tuple[int, str]:
    sign = 1
    if s[:1] == "+":
        s = s[1:]
    elif s[:1] == "-":
        s = s[1:]
        sign = -1

    hour, s = parse_number(s)
    total = min(hour, 24) * 3600
    if s[:1] == ":":
        minute, s = parse_number(s[1:])
        total += min(minute, 59) * 60
        if s[:1] == ":":
            second, s = parse_number(s[1:])
            total += min(second, 59)

    return sign * min(total, MAX_OFFSET), s


def parse_number(s: str) -> tuple[int, str]:
    rest = s.lstrip("0123456789")
    if (stop := len(s) - len(rest)) == 0:
        raise ValueError(f"Invalid TZ string: expected digits, got {s!r}")
    significant = s[:stop].lstrip("0")
    # anything this long is clamped by the caller
    if len(significant) > 4:
        return 9999, rest
    return int(significant or "0"), rest
