from __future__ import annotations

from ._pygnudate import *
from ._pygnudate import (  # for the docs
    __all__,
    __version__,
    _patch_time_frozen,
    _patch_time_keep_ticking,
    _unpatch_time,
)

import logging as _logging
import os as _os
import sysconfig as _sysconfig
from contextlib import contextmanager as _contextmanager
from dataclasses import dataclass as _dataclass
from pathlib import Path as _Path
from typing import Iterable as _Iterable, Iterator as _Iterator

from ._tz.store import (
    _clear_tz_cache,
    _clear_tz_cache_by_keys,
    _set_tzpath,
    available_keys as _available_keys,
)

# Debug output is opt-in for applications
_logging.getLogger(__name__).addHandler(_logging.NullHandler())


@_dataclass
class _TimePatch:
    _pin: ExtendedDateTime
    _keep_ticking: bool

    def shift(
        self,
        *,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
    ) -> None:
        delta = days * 86_400 + hours * 3_600 + minutes * 60 + seconds
        if self._keep_ticking:
            self._pin = new = system_now().add_seconds(delta)
            _patch_time_keep_ticking(new)
        else:
            self._pin = new = self._pin.add_seconds(delta)
            _patch_time_frozen(new)


@_contextmanager
def patch_current_time(
    dt: ExtendedDateTime,
    /,
    *,
    keep_ticking: bool,
) -> _Iterator[_TimePatch]:
    """Patch the current time to a fixed value (for testing purposes).
    Behaves as a context manager or decorator, with similar semantics to
    ``unittest.mock.patch``.

    Important
    ---------

    * This function should be used only for testing purposes. It is not
      thread-safe or part of the stable API.
    * This function only affects :func:`system_now` and therefore the default
      base of :func:`parse_datetime`. It does not affect the standard library's
      time functions or any other libraries.
    * It doesn't affect the system timezone.
      If you need to patch the system timezone, set the ``TZ`` environment
      variable in combination with ``time.tzset``. Be aware that this only
      works on Unix-like systems.

    Example
    -------

    >>> from gnudate import ExtendedDateTime, system_now, patch_current_time
    >>> d = ExtendedDateTime(1980, 3, 2, hour=2)
    >>> with patch_current_time(d, keep_ticking=False) as p:
    ...     assert system_now().unix_seconds() == d.unix_seconds()
    ...     p.shift(hours=4)
    ...     assert system_now().unix_seconds() == d.add_hours(4).unix_seconds()
    ...
    """
    if keep_ticking:
        _patch_time_keep_ticking(dt)
    else:
        _patch_time_frozen(dt)

    try:
        yield _TimePatch(dt, keep_ticking)
    finally:
        _unpatch_time()


TZPATH: tuple[str, ...] = ()
"""The paths in which ``gnudate`` will search for timezone data
when resolving ``TZ="..."`` items. By default, this determined the same way
as :data:`zoneinfo.TZPATH`, although you can override it using
:func:`gnudate.reset_tzpath` for ``gnudate`` specifically.
"""


def reset_tzpath(target: _Iterable[str | _os.PathLike[str]] | None = None, /):
    """Reset or set the paths in which ``gnudate`` will search for timezone data.

    It does not affect the :mod:`zoneinfo` module or other libraries.

    Note
    ----
    Due to caching, you may find that looking up a timezone after setting the tzpath
    doesn't load the timezone data from the new path. You may need to call
    :func:`clear_tzcache` if you want to force loading *all* timezones from the new path.

    Behaves similarly to :func:`zoneinfo.reset_tzpath`
    """
    global TZPATH

    if target is not None:
        # This is such a common mistake, that we raise a descriptive error
        if isinstance(target, (str, bytes)):
            raise TypeError("tzpath must be an iterable of paths")

        if not all(map(_os.path.isabs, target)):
            raise ValueError("tzpaths must be absolute paths")
        TZPATH = tuple(str(_Path(p)) for p in target)
    else:
        TZPATH = _tzpath_from_env()
    _set_tzpath(TZPATH)


def _tzpath_from_env() -> tuple[str, ...]:
    try:
        env_var = _os.environ["PYTHONTZPATH"]
    except KeyError:
        env_var = _sysconfig.get_config_var("TZPATH")

    if not env_var:
        return ()

    raw_tzpath = env_var.split(_os.pathsep)
    # invalid paths are silently ignored, like zoneinfo does
    return tuple(filter(_os.path.isabs, raw_tzpath))


def clear_tzcache(*, only_keys: _Iterable[str] | None = None) -> None:
    """Clear the timezone cache. If ``only_keys`` is provided, only the cache for those
    keys will be cleared.

    Behaves similarly to :meth:`zoneinfo.ZoneInfo.clear_cache`.
    """
    if only_keys is None:
        _clear_tz_cache()
    else:
        _clear_tz_cache_by_keys(tuple(only_keys))


def available_timezones() -> set[str]:
    """Gather the set of all available timezones.

    Each call recalculates the names depending on the currently configured
    ``TZPATH``, and the presence of the ``tzdata`` package.
    ``TZ="..."`` items may use any of these names, in any case.

    Warning
    -------
    This function may open a large number of files, since the first few bytes
    of timezone files must be read to determine if they are valid.

    Note
    ----
    It should give the same result as :func:`zoneinfo.available_timezones`,
    unless ``gnudate`` was configured to use a different tzpath
    using :func:`reset_tzpath`.
    """
    return _available_keys()


reset_tzpath()  # populate the tzpath once at startup
