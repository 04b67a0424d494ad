"""Date, calendar, and time arithmetic helpers.

All functions work on the proleptic Gregorian calendar with plain integers,
so they aren't limited to the year range of the :mod:`datetime` module.
Day counts are relative to the unix epoch (1970-01-01 is day 0).
"""

SECS_PER_DAY = 86_400

# Days from 0000-03-01 to 1970-01-01
_EPOCH_SHIFT = 719_468
_DAYS_PER_ERA = 146_097


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


# 1-indexed days per month
_MONTHDAYS = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]

# 1-indexed days before the start of each month (non-leap year)
_DAYS_BEFORE_MONTH = [0, 0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334]


def days_in_month(year: int, month: int) -> int:
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def days_from_civil(year: int, month: int, day: int) -> int:
    """Number of days since the unix epoch for the given date.

    This is Howard Hinnant's algorithm: the year is shifted to start in March,
    so the leap day is the last day of the (shifted) year. The date is then
    split into a 400-year era, the year within the era, and the day within
    that year.
    """
    if month <= 2:
        year -= 1
    era = year // 400
    year_of_era = year - era * 400  # 0-399
    month_from_march = (month + 9) % 12  # March is 0
    day_of_year = (153 * month_from_march + 2) // 5 + day - 1  # 0-365
    day_of_era = (
        year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    )
    return era * _DAYS_PER_ERA + day_of_era - _EPOCH_SHIFT


def civil_from_days(days: int) -> tuple[int, int, int]:
    """Inverse of :func:`days_from_civil`"""
    days += _EPOCH_SHIFT
    era = days // _DAYS_PER_ERA
    day_of_era = days - era * _DAYS_PER_ERA  # 0-146096
    year_of_era = (
        day_of_era
        - day_of_era // 1460
        + day_of_era // 36524
        - day_of_era // 146096
    ) // 365  # 0-399
    day_of_year = day_of_era - (
        365 * year_of_era + year_of_era // 4 - year_of_era // 100
    )
    month_from_march = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * month_from_march + 2) // 5 + 1
    month = month_from_march + 3 if month_from_march < 10 else month_from_march - 9
    year = year_of_era + era * 400 + (month <= 2)
    return year, month, day


def day_of_year(year: int, month: int, day: int) -> int:
    return _DAYS_BEFORE_MONTH[month] + (month > 2 and is_leap(year)) + day


# Jan 1st 1970 was a Thursday
def weekday_sunday0(days: int) -> int:
    """Day of the week from an epoch day count. Sunday is 0, Saturday is 6."""
    return (days + 4) % 7


def weekday_monday0(days: int) -> int:
    """Day of the week from an epoch day count. Monday is 0, Sunday is 6."""
    return (days + 3) % 7


def unix_seconds(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    offset: int,
) -> int:
    return (
        days_from_civil(year, month, day) * SECS_PER_DAY
        + hour * 3600
        + minute * 60
        + second
        - offset
    )


def civil_from_unix_seconds(
    secs: int, offset: int
) -> tuple[int, int, int, int, int, int]:
    days, secs_of_day = divmod(secs + offset, SECS_PER_DAY)
    hour, rest = divmod(secs_of_day, 3600)
    minute, second = divmod(rest, 60)
    return (*civil_from_days(days), hour, minute, second)


def replace_year_saturating(
    year: int, month: int, day: int
) -> tuple[int, int, int]:
    # only Feb 29 can be invalid in another year
    if month == 2 and day == 29 and not is_leap(year):
        return year, 2, 28
    return year, month, day
