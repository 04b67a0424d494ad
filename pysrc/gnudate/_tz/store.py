"""Timezone database access and caching."""

from __future__ import annotations

import logging
import os.path
from collections import OrderedDict
from datetime import datetime
from importlib.resources import open_text as _open_resource
from pathlib import Path
from threading import Lock
from typing import IO, Iterator, NewType, Optional
from weakref import WeakValueDictionary
from zoneinfo import ZoneInfo

from .._math import replace_year_saturating

__all__ = [
    "TimeZoneNotFoundError",
    "available_keys",
    "get_tz",
    "offset_for_local",
    "_clear_tz_cache",
    "_clear_tz_cache_by_keys",
    "_set_tzpath",
]

logger = logging.getLogger(__name__)

_TZPATH: tuple[str, ...] = ()

# Our cache for loaded tz files. The design is based off that of `zoneinfo`.
_TZCACHE_LRU_SIZE = 8
_tzcache_lru: OrderedDict[str, ZoneInfo] = OrderedDict()
_tzcache_lookup: WeakValueDictionary[str, ZoneInfo] = WeakValueDictionary()
_tzcache_lru_lock = Lock()

# Lowercased key -> key as it appears in the database.
# Built on the first lookup that doesn't match exactly.
_canonical_keys: Optional[dict[str, str]] = None


def _set_tzpath(to: tuple[str, ...]) -> None:
    global _TZPATH, _canonical_keys
    _TZPATH = to
    _canonical_keys = None


def _clear_tz_cache() -> None:
    global _canonical_keys
    _canonical_keys = None
    _tzcache_lookup.clear()
    with _tzcache_lru_lock:
        _tzcache_lru.clear()


def _clear_tz_cache_by_keys(keys: tuple[str, ...]) -> None:
    with _tzcache_lru_lock:
        for k in keys:
            _tzcache_lookup.pop(k, None)
            _tzcache_lru.pop(k, None)


def get_tz(key: str) -> ZoneInfo:
    instance = _tzcache_lookup.get(key)
    if instance is None:
        # Two threads may load the same zone at once. Either result is fine,
        # the last one to write wins.
        instance = _tzcache_lookup.setdefault(
            key, _load_tz(validate_tzid(key))
        )

    with _tzcache_lru_lock:
        _tzcache_lru[key] = _tzcache_lru.pop(key, instance)
        if len(_tzcache_lru) > _TZCACHE_LRU_SIZE:
            _tzcache_lru.popitem(last=False)

    return instance


def offset_for_local(
    key: str,
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
) -> int:
    """The UTC offset in seconds of a local time in the given zone.

    Years outside the range of :mod:`datetime` use the rules of the nearest
    year it supports. Ambiguous or skipped times resolve to the offset
    in effect before the transition.

    The key is matched without regard to case (``europe/paris``)
    if there's no exact match.
    """
    try:
        tz = get_tz(key)
    except TimeZoneNotFoundError:
        if (canonical := _find_key_insensitive(key)) is None:
            raise
        tz = get_tz(canonical)
    year, month, day = replace_year_saturating(
        min(max(year, 1), 9999), month, day
    )
    offset = datetime(
        year, month, day, hour, minute, second, tzinfo=tz
    ).utcoffset()
    assert offset is not None
    return int(offset.total_seconds())


def validate_tzid(key: str) -> SafeTzId:
    """Checks for invalid characters and path traversal in the key."""
    if (
        key.isascii()
        # There's no standard limit on IANA tz IDs, but we have to draw
        # the line somewhere to prevent abuse.
        and 0 < len(key) < 100
        and all(b.isalnum() or b in "-_+/." for b in key)
        # specific sequences not allowed
        and ".." not in key
        and "//" not in key
        and "/./" not in key
        # specific restrictions on the first and last characters
        and key[0] not in ".-+/"
        and key[-1] != "/"
    ):
        return SafeTzId(key)
    else:
        raise TimeZoneNotFoundError.for_key(key)


# Alias for a TZ key that has been confirmed not to be a path traversal
# or contain other "bad" characters.
SafeTzId = NewType("SafeTzId", str)


def _from_file(f: IO[bytes], key: SafeTzId) -> ZoneInfo:
    try:
        return ZoneInfo.from_file(f, key=key)
    except ValueError:
        # A file exists, but it isn't a TZif file
        raise TimeZoneNotFoundError.for_key(key) from None


def _try_tzif_from_path(key: SafeTzId) -> ZoneInfo | None:
    for search_path in _TZPATH:
        target = os.path.join(search_path, key)
        if os.path.isfile(target):
            with open(target, "rb") as f:
                return _from_file(f, key)
    return None


def _tzif_from_tzdata(key: SafeTzId) -> ZoneInfo:
    try:
        tzdata_path = __import__("tzdata.zoneinfo").zoneinfo.__path__[0]
        # We check before we read, since the resulting exceptions vary
        # on different platforms
        if os.path.isfile(
            relpath := os.path.join(tzdata_path, *key.split("/"))
        ):
            with open(relpath, "rb") as f:
                return _from_file(f, key)
        else:
            raise FileNotFoundError()
    # Several exceptions amount to "can't find the key"
    except (
        ImportError,
        FileNotFoundError,
        UnicodeEncodeError,
    ):
        raise TimeZoneNotFoundError.for_key(key)


def _load_tz(key: SafeTzId) -> ZoneInfo:
    tz = _try_tzif_from_path(key) or _tzif_from_tzdata(key)
    logger.debug("Loaded time zone %r", key)
    return tz


def _find_key_insensitive(key: str) -> str | None:
    global _canonical_keys
    if _canonical_keys is None:
        # sorted, so the choice between keys differing only in case is stable
        _canonical_keys = {k.lower(): k for k in sorted(available_keys())}
    canonical = _canonical_keys.get(key.lower())
    return None if canonical == key else canonical


def available_keys() -> set[str]:
    """All zone keys in the ``tzdata`` package and on the search path"""
    keys = set()
    try:
        with _open_resource("tzdata", "zones") as f:
            keys.update(map(str.strip, f))
    except (ImportError, FileNotFoundError):
        pass

    for base in _TZPATH:
        keys.update(_find_all_tznames(Path(base)))

    keys.discard("posixrules")  # a special file that shouldn't be included
    return keys


# Recursion is safe here since the file tree is trusted, and nesting doesn't
# even approach the recursion limit.
def _find_all_tznames(base: Path) -> Iterator[str]:
    if not base.is_dir():
        return
    for entry in base.iterdir():
        if entry.is_dir():
            # These directories contain special files that shouldn't be included
            if entry.name not in ("right", "posix"):
                for p in _find_nested_tzfiles(entry):
                    yield p.relative_to(base).as_posix()
        elif _is_tzifile(entry):
            yield entry.name


def _find_nested_tzfiles(path: Path) -> Iterator[Path]:
    for entry in path.iterdir():
        if entry.is_dir():
            yield from _find_nested_tzfiles(entry)
        elif _is_tzifile(entry):
            yield entry


def _is_tzifile(p: Path) -> bool:
    try:
        with p.open("rb") as f:
            return f.read(4) == b"TZif"
    except OSError:
        return False


class TimeZoneNotFoundError(ValueError):
    """A timezone with the given ID was not found"""

    @classmethod
    def for_key(cls, key: str) -> TimeZoneNotFoundError:
        return cls(f"No time zone found for key: {key!r}")
