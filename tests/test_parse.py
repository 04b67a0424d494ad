import pytest
from hypothesis import given
from hypothesis.strategies import integers, text

from gnudate import (
    ConflictingItemsError,
    InvalidItemError,
    UnexpectedInputError,
)
from gnudate._items import (
    Date,
    DateTime,
    Offset,
    PureNumber,
    Relative,
    Time,
    TimeZoneRule,
    Timestamp,
    WeekdayRef,
)
from gnudate._parse import (
    NoMatch,
    parse_combined,
    parse_date,
    parse_epoch,
    parse_items,
    parse_offset,
    parse_relative,
    parse_time,
    parse_timezone,
    parse_weekday,
    skip_space,
    year_from_str,
)


class TestSkipSpace:

    @pytest.mark.parametrize(
        "s, expect",
        [
            ("", ""),
            ("   foo", "foo"),
            ("\t\n foo ", "foo "),
            ("(comment) foo", "foo"),
            ("(a (nested) comment)foo", "foo"),
            ("(one) (two) foo", "foo"),
            ("(unbalanced foo", "(unbalanced foo"),
            ("+ foo", "foo"),
            ("- -foo", "foo"),
            ("-", ""),
            ("+3", "+3"),
            ("- 3", "- 3"),
            ("-(c) 3", "3"),
        ],
    )
    def test_examples(self, s, expect):
        assert skip_space(s) == expect


@pytest.mark.parametrize(
    "s, expect",
    [
        ("00", 2000),
        ("68", 2068),
        ("69", 1969),
        ("99", 1999),
        ("0", 0),
        ("001", 1),
        ("2022", 2022),
        ("2147485547", 2_147_485_547),
    ],
)
def test_year_from_str(s, expect):
    assert year_from_str(s) == expect


def test_year_from_str_too_large():
    with pytest.raises(InvalidItemError, match="year"):
        year_from_str("2147485548")


class TestDate:

    @pytest.mark.parametrize(
        "s, expect, rest",
        [
            # ISO 8601
            ("2022-11-14", Date(14, 11, 2022), ""),
            ("22-11-14", Date(14, 11, 2022), ""),
            ("  2022 - 11 - 14 xyz", Date(14, 11, 2022), " xyz"),
            ("20221114", Date(14, 11, 2022), ""),
            ("221114", Date(14, 11, 2022), ""),
            ("120221114", Date(14, 11, 12022), ""),
            ("0001-01-01", Date(1, 1, 1), ""),
            # US
            ("11/14/2022", Date(14, 11, 2022), ""),
            ("11/14/22", Date(14, 11, 2022), ""),
            ("11/14", Date(14, 11, None), ""),
            ("2022/11/14", Date(14, 11, 2022), ""),
            ("2/29", Date(29, 2, None), ""),
            # day first
            ("14 november 2022", Date(14, 11, 2022), ""),
            ("14-nov-2022", Date(14, 11, 2022), ""),
            ("14nov2022", Date(14, 11, 2022), ""),
            ("14 Nov. 2022", Date(14, 11, 2022), ""),
            ("14 nov", Date(14, 11, None), ""),
            ("14 nov 10:00", Date(14, 11, None), " 10:00"),
            ("1 sept 22", Date(1, 9, 2022), ""),
            # month first
            ("november 14, 2022", Date(14, 11, 2022), ""),
            ("Nov 14 2022", Date(14, 11, 2022), ""),
            ("nov 14", Date(14, 11, None), ""),
            ("nov 14,2022", Date(14, 11, None), ",2022"),
            ("nov 14 10:00", Date(14, 11, None), " 10:00"),
            ("may 1", Date(1, 5, None), ""),
        ],
    )
    def test_valid(self, s, expect, rest):
        assert parse_date(s) == (expect, rest)

    @pytest.mark.parametrize(
        "s",
        [
            "2022-02-30",
            "2022-13-01",
            "2022-00-10",
            "20220230",
            "13/14/2022",
            "2/30",
            "30 feb",
            "april 31, 2022",
            "2023-02-29",
        ],
    )
    def test_invalid_contents(self, s):
        with pytest.raises(InvalidItemError):
            parse_date(s)

    @pytest.mark.parametrize(
        "s",
        [
            "",
            "hello",
            "1234",
            "10:00",
            "32 nov",
            "0 nov",
            "nov",
            "14 foo",
        ],
    )
    def test_no_match(self, s):
        with pytest.raises(NoMatch):
            parse_date(s)


class TestTime:

    @pytest.mark.parametrize(
        "s, expect, rest",
        [
            ("10:30", Time(10, 30), ""),
            ("10:30:59", Time(10, 30, 59), ""),
            ("23:59:60", Time(23, 59, 60), ""),
            ("10:30:59.123456789999", Time(10, 30, 59, 123_456_789), ""),
            ("10:30:59,5", Time(10, 30, 59, 500_000_000), ""),
            ("10 : 30", Time(10, 30), ""),
            ("10am", Time(10), ""),
            ("10 PM", Time(22), ""),
            ("12am", Time(0), ""),
            ("12pm", Time(12), ""),
            ("12:30 a.m.", Time(0, 30), ""),
            ("1:05:02 p.m. foo", Time(13, 5, 2), " foo"),
            ("10:30+02:00", Time(10, 30, offset=Offset(False, 2, 0)), ""),
            ("10:30 -0530", Time(10, 30, offset=Offset(True, 5, 30)), ""),
            ("10:30+5", Time(10, 30, offset=Offset(False, 5, 0)), ""),
            ("10+0200", Time(10, offset=Offset(False, 2, 0)), ""),
            # the number belongs to the relative item
            ("10:30 +3 days", Time(10, 30), " +3 days"),
        ],
    )
    def test_valid(self, s, expect, rest):
        assert parse_time(s) == (expect, rest)

    @pytest.mark.parametrize(
        "s",
        [
            "24:00",
            "10:60",
            "10:30:61",
            "13pm",
            "0am",
            "10:30+25",
            "10:30+02:60",
            "10:30+24:30",
        ],
    )
    def test_invalid_contents(self, s):
        with pytest.raises(InvalidItemError):
            parse_time(s)

    @pytest.mark.parametrize("s", ["", "10", "10 days", "am", "25+0100"])
    def test_no_match(self, s):
        with pytest.raises(NoMatch):
            parse_time(s)


class TestOffset:

    @pytest.mark.parametrize(
        "s, expect",
        [
            ("+5", Offset(False, 5, 0)),
            ("-05", Offset(True, 5, 0)),
            ("+530", Offset(False, 5, 30)),
            ("-0530", Offset(True, 5, 30)),
            ("+05:30", Offset(False, 5, 30)),
            ("- 5:30", Offset(True, 5, 30)),
            ("+000000110", Offset(False, 1, 10)),
            ("+24", Offset(False, 24, 0)),
            ("+2400", Offset(False, 24, 0)),
        ],
    )
    def test_valid(self, s, expect):
        assert parse_offset(s) == (expect, "")

    @pytest.mark.parametrize("s", ["+25", "+0060", "+24:01", "-99:00"])
    def test_invalid(self, s):
        with pytest.raises(InvalidItemError):
            parse_offset(s)

    @pytest.mark.parametrize(
        "s", ["", "5", "+123456", "+3 days", "-1 year ago", "+2 weeks"]
    )
    def test_no_match(self, s):
        with pytest.raises(NoMatch):
            parse_offset(s)

    def test_merge(self):
        assert Offset(True, 5, 0).merge(Offset(False, 1, 30)) == Offset(
            True, 3, 30
        )
        assert Offset(False, 12, 0).merge(Offset(False, 24, 0)) == Offset(
            False, 36, 0
        )
        assert str(Offset(True, 3, 30)) == "-03:30"


class TestRelative:

    @pytest.mark.parametrize(
        "s, expect",
        [
            ("day", Relative("days", 1)),
            ("3 days", Relative("days", 3)),
            ("-3 days", Relative("days", -3)),
            ("+ 3 days", Relative("days", 3)),
            ("3 days ago", Relative("days", -3)),
            ("-3 days ago", Relative("days", 3)),
            ("2 weeks", Relative("days", 14)),
            ("fortnight", Relative("days", 14)),
            ("last year", Relative("years", -1)),
            ("next month", Relative("months", 1)),
            ("this hour", Relative("hours", 0)),
            ("third min", Relative("minutes", 3)),
            ("twelfth seconds", Relative("seconds", 12)),
            ("5 MINUTES", Relative("minutes", 5)),
            ("1 sec", Relative("seconds", 1)),
            ("1.5 seconds", Relative("seconds", 1.5)),
            ("-1,25 sec ago", Relative("seconds", 1.25)),
            ("1.0 seconds", Relative("seconds", 1)),
            ("2,00 sec ago", Relative("seconds", -2)),
            ("0.0 sec", Relative("seconds", 0)),
            ("1.0000000001 seconds", Relative("seconds", 1)),
            ("tomorrow", Relative("days", 1)),
            ("yesterday", Relative("days", -1)),
            ("today", Relative("days", 0)),
            ("now", Relative("days", 0)),
        ],
    )
    def test_valid(self, s, expect):
        assert parse_relative(s) == (expect, "")

    def test_rest(self):
        assert parse_relative("2 days 10:00") == (Relative("days", 2), " 10:00")

    @pytest.mark.parametrize(
        "s", ["", "3", "3 foo", "last", "next friday", "1.5 days", "nows"]
    )
    def test_no_match(self, s):
        with pytest.raises(NoMatch):
            parse_relative(s)


class TestWeekday:

    @pytest.mark.parametrize(
        "s, expect, rest",
        [
            ("monday", WeekdayRef(0, 0), ""),
            ("Tues", WeekdayRef(0, 1), ""),
            ("wed.", WeekdayRef(0, 2), ""),
            ("wednes", WeekdayRef(0, 2), ""),
            ("thurs", WeekdayRef(0, 3), ""),
            ("fri, 14 nov", WeekdayRef(0, 4), " 14 nov"),
            ("next sat", WeekdayRef(1, 5), ""),
            ("last sunday", WeekdayRef(-1, 6), ""),
            ("-2 sun", WeekdayRef(-2, 6), ""),
            ("third friday", WeekdayRef(3, 4), ""),
            ("next fri, 10:00", WeekdayRef(1, 4), ", 10:00"),
            # the dot is only allowed after abbreviations
            ("friday.", WeekdayRef(0, 4), "."),
        ],
    )
    def test_valid(self, s, expect, rest):
        assert parse_weekday(s) == (expect, rest)

    @pytest.mark.parametrize("s", ["", "mond", "next", "3 days"])
    def test_no_match(self, s):
        with pytest.raises(NoMatch):
            parse_weekday(s)


class TestTimezone:

    @pytest.mark.parametrize(
        "s, expect",
        [
            ("UTC", TimeZoneRule(offset=0)),
            ("z", TimeZoneRule(offset=0)),
            ("est", TimeZoneRule(offset=-5 * 3600)),
            ("CEST", TimeZoneRule(offset=2 * 3600)),
            ("ist", TimeZoneRule(offset=5 * 3600 + 1800)),
            ("nst", TimeZoneRule(offset=-(3 * 3600 + 1800))),
            ("a", TimeZoneRule(offset=3600)),
            ("m", TimeZoneRule(offset=12 * 3600)),
            ("n", TimeZoneRule(offset=-3600)),
            ("y", TimeZoneRule(offset=-12 * 3600)),
            ("utc+5:30", TimeZoneRule(offset=5 * 3600 + 1800)),
            ("est+1", TimeZoneRule(offset=-4 * 3600)),
            ("m+12", TimeZoneRule(offset=24 * 3600)),
            ("+0100", TimeZoneRule(offset=3600)),
            ("-3", TimeZoneRule(offset=-3 * 3600)),
            ('TZ="Europe/Paris"', TimeZoneRule(tz="Europe/Paris")),
            ('tz="a\\"b\\\\c"', TimeZoneRule(tz='a"b\\c')),
            ('TZ=""', TimeZoneRule(tz="")),
        ],
    )
    def test_valid(self, s, expect):
        assert parse_timezone(s) == (expect, "")

    def test_zone_followed_by_relative(self):
        assert parse_timezone("utc +8 years") == (
            TimeZoneRule(offset=0),
            " +8 years",
        )

    @pytest.mark.parametrize(
        "s",
        [
            "utc+25",
            "m+13",
            "y-12:30",
            "TZ=Europe/Paris",
            'TZ="Europe/Paris',
            'TZ="a\\b"',
        ],
    )
    def test_invalid(self, s):
        with pytest.raises(InvalidItemError):
            parse_timezone(s)

    @pytest.mark.parametrize("s", ["", "j", "foo", "abcdefg", "+3 days"])
    def test_no_match(self, s):
        with pytest.raises(NoMatch):
            parse_timezone(s)


class TestEpoch:

    @pytest.mark.parametrize(
        "s, expect",
        [
            ("@0", Timestamp(0)),
            ("@1690466034", Timestamp(1_690_466_034)),
            ("@ 1690466034", Timestamp(1_690_466_034)),
            ("@+5", Timestamp(5)),
            ("@-5", Timestamp(-5)),
            ("@1.5", Timestamp(1, 500_000_000)),
            ("@-1.5", Timestamp(-2, 500_000_000)),
            ("@-0,000000001", Timestamp(-1, 999_999_999)),
        ],
    )
    def test_valid(self, s, expect):
        assert parse_epoch(s) == (expect, "")

    @pytest.mark.parametrize("s", ["", "1234", "@", "@foo"])
    def test_no_match(self, s):
        with pytest.raises(NoMatch):
            parse_epoch(s)


class TestCombined:

    @pytest.mark.parametrize(
        "s, expect",
        [
            (
                "2022-11-14T10:30",
                DateTime(Date(14, 11, 2022), Time(10, 30)),
            ),
            (
                "2022-11-14t10:30:00Z",
                DateTime(Date(14, 11, 2022), Time(10, 30)),
            ),
            (
                "2022-11-14 10:30:05.5+01:00",
                DateTime(
                    Date(14, 11, 2022),
                    Time(10, 30, 5, 500_000_000, Offset(False, 1, 0)),
                ),
            ),
            (
                "20221114T1030",
                None,
            ),
        ],
    )
    def test_examples(self, s, expect):
        if expect is None:
            # a compact time is a pure number, not part of a combined item
            with pytest.raises(NoMatch):
                parse_combined(s)
            return
        value, rest = parse_combined(s)
        assert value == expect
        assert rest in ("", "Z")

    def test_no_match(self):
        with pytest.raises(NoMatch):
            parse_combined("2022-11-14")
        with pytest.raises(NoMatch):
            parse_combined("11/14/2022 10:30")


class TestItems:

    def test_empty(self):
        assert list(parse_items("")) == []
        assert list(parse_items("  (just a comment) ")) == []

    def test_order(self):
        assert list(parse_items("fri 2022-11-14 10:00 +3 days utc 1230")) == [
            WeekdayRef(0, 4),
            DateTime(Date(14, 11, 2022), Time(10, 0)),
            Relative("days", 3),
            TimeZoneRule(offset=0),
            PureNumber("1230"),
        ]

    def test_pure_number_after_date(self):
        assert list(parse_items("nov 14 2022 7")) == [
            Date(14, 11, 2022),
            PureNumber("7"),
        ]

    def test_timestamp_alone(self):
        assert list(parse_items(" @1690466034 ")) == [Timestamp(1_690_466_034)]

    @pytest.mark.parametrize(
        "s",
        ["@1690466034 2025-05-19", "@0 +1 day", "@0 @1", "@5 (comment) x"],
    )
    def test_timestamp_with_others(self, s):
        with pytest.raises(ConflictingItemsError):
            list(parse_items(s))

    def test_unexpected(self):
        with pytest.raises(UnexpectedInputError, match="'foo bar'"):
            list(parse_items("2022-11-14 foo bar"))

    def test_invalid_item(self):
        with pytest.raises(InvalidItemError) as exc_info:
            list(parse_items("tomorrow 2022-02-30"))
        assert "30" in exc_info.value.reason

    def test_number_too_large(self):
        with pytest.raises(InvalidItemError):
            list(parse_items("9" * 25 + " days"))

    @given(text())
    def test_fuzzing(self, s):
        try:
            list(parse_items(s))
        except ValueError:
            pass

    @given(integers(-(10**15), 10**15))
    def test_any_timestamp(self, n):
        assert list(parse_items(f"@{n}")) == [Timestamp(n)]
