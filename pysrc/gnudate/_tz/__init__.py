from .posix import parse_fixed_offset
from .store import TimeZoneNotFoundError, get_tz, offset_for_local

__all__ = [
    "TimeZoneNotFoundError",
    "get_tz",
    "offset_for_local",
    "parse_fixed_offset",
]
