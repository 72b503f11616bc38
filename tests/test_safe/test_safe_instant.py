from __future__ import annotations

import logging
import pickle
from datetime import datetime, timezone, tzinfo

import pytest

from safedate.core.errors import DateTimeError
from safedate.native import Interval, NativeDateTime, NativeDateTimeError, NativeMutableDateTime
from safedate.safe import SafeInstant


class _OpaqueZone(tzinfo):
    """A zone that cannot tell its offset."""

    def utcoffset(self, dt):
        return None

    def dst(self, dt):
        return None

    def tzname(self, dt):
        return None


@pytest.mark.parametrize(
    "fmt, text",
    [
        ("Y-m-d H:i:s", "2024-02-29 13:05:09"),
        ("d/m/Y", "31/12/1999"),
        ("D, d M Y", "Thu, 29 Feb 2024"),
        ("Y-m-d\\TH:i:sP", "2024-06-01T08:30:00+02:00"),
        ("U", "1700000000"),
        ("j F Y g:i a", "5 March 2024 3:07 pm"),
        ("H:i:s.u", "23:59:59.000123"),
    ],
)
def test_create_from_format_then_format_should_reproduce_text(fmt: str, text: str) -> None:
    assert SafeInstant.create_from_format(fmt, text).format(fmt) == text


def test_create_from_format_should_reject_invalid_calendar_date() -> None:
    with pytest.raises(DateTimeError, match="parsed date was invalid") as excinfo:
        SafeInstant.create_from_format("Y-m-d", "2024-02-30")
    assert excinfo.value.operation == "create_from_format"


def test_create_from_format_should_accept_leap_day() -> None:
    instant = SafeInstant.create_from_format("Y-m-d", "2024-02-29")
    assert instant.format("Y-m-d") == "2024-02-29"


def test_create_from_format_should_reject_trailing_data() -> None:
    with pytest.raises(DateTimeError, match="Trailing data"):
        SafeInstant.create_from_format("Y-m-d", "2024-01-01 10:00")


def test_modify_should_shift_by_one_month(instant_factory) -> None:
    shifted = instant_factory("2024-01-01 00:00:00").modify("+1 month")
    assert shifted.format("Y-m-d H:i:s") == "2024-02-01 00:00:00"


def test_modify_should_raise_for_unparsable_expression(instant_factory) -> None:
    with pytest.raises(DateTimeError, match="modify"):
        instant_factory().modify("gibberish")


def test_modify_should_leave_receiver_untouched(instant_factory) -> None:
    original = instant_factory("2024-01-01 00:00:00")
    snapshot = SafeInstant.from_interface(original)
    shifted = original.modify("+1 day")

    assert original == snapshot
    assert original.equals(snapshot)
    assert shifted > original
    assert shifted.after(original)
    assert original.before(shifted)
    assert original.format("Y-m-d") == "2024-01-01"


def test_instants_from_same_source_should_compare_equal(instant_factory) -> None:
    first = instant_factory("2024-05-05 05:05:05")
    second = instant_factory("2024-05-05 05:05:05")
    assert first == second
    assert not first < second
    assert first <= second and first >= second


def test_derived_instant_should_be_a_new_object(instant_factory) -> None:
    original = instant_factory()
    derived = original.set_time(0, 0)
    assert derived is not original
    assert derived.to_native() is not original.to_native()


def test_instant_should_be_immutable(instant_factory) -> None:
    instant = instant_factory()
    with pytest.raises(AttributeError):
        instant._inner = NativeDateTime("2020-01-01")  # type: ignore[misc]


@pytest.mark.parametrize("timestamp", [0, 1_700_000_000, -86_400, 951_782_400])
def test_set_timestamp_then_get_timestamp_should_round_trip(instant_factory, timestamp: int) -> None:
    assert instant_factory().set_timestamp(timestamp).get_timestamp() == timestamp


def test_set_timestamp_should_raise_when_out_of_range(instant_factory) -> None:
    with pytest.raises(DateTimeError, match="out of range"):
        instant_factory().set_timestamp(10**12)


@pytest.mark.parametrize("spec", ["P1D", "PT36H", "P1Y2M3DT4H5M6S", "P2W"])
def test_add_then_sub_should_return_to_original(instant_factory, spec: str) -> None:
    original = instant_factory("2024-01-15 12:00:00")
    interval = Interval.from_spec(spec)
    assert original.add(interval).sub(interval) == original


def test_sub_should_raise_when_result_is_out_of_range(instant_factory) -> None:
    earliest = instant_factory().set_date(1, 1, 1)
    with pytest.raises(DateTimeError, match="out of range"):
        earliest.sub(Interval.from_spec("P1D"))


def test_add_should_let_native_overflow_propagate(instant_factory) -> None:
    latest = instant_factory().set_date(9999, 12, 31)
    with pytest.raises(OverflowError):
        latest.add(Interval.from_spec("P1D"))


@pytest.mark.parametrize("year, month, day", [(2024, 2, 30), (2023, 2, 29), (2024, 13, 1), (2024, 4, 0)])
def test_set_date_should_raise_for_invalid_dates(instant_factory, year: int, month: int, day: int) -> None:
    with pytest.raises(DateTimeError, match="set_date"):
        instant_factory().set_date(year, month, day)


def test_set_date_should_keep_time_of_day(instant_factory) -> None:
    result = instant_factory("2024-01-01 08:15:00").set_date(2025, 7, 4)
    assert result.format("Y-m-d H:i:s") == "2025-07-04 08:15:00"


def test_set_isodate_should_resolve_week_date(instant_factory) -> None:
    assert instant_factory().set_isodate(2024, 1).format("Y-m-d") == "2024-01-01"
    assert instant_factory().set_isodate(2020, 53, 7).format("Y-m-d") == "2021-01-03"


@pytest.mark.parametrize("week, day", [(54, 1), (53, 1), (1, 8), (0, 1)])
def test_set_isodate_should_raise_for_invalid_week_dates(instant_factory, week: int, day: int) -> None:
    with pytest.raises(DateTimeError):
        instant_factory().set_isodate(2024, week, day)


def test_set_time_should_keep_microseconds(instant_factory) -> None:
    result = instant_factory().set_time(13, 5, 9, 123456)
    assert result.format("H:i:s.u") == "13:05:09.123456"


@pytest.mark.parametrize("args", [(24, 0), (0, 60), (0, 0, 60), (0, 0, 0, 1_000_000)])
def test_set_time_should_raise_for_out_of_range_components(instant_factory, args) -> None:
    with pytest.raises(DateTimeError, match="set_time"):
        instant_factory().set_time(*args)


def test_set_timezone_should_convert_keeping_the_instant(instant_factory) -> None:
    utc = instant_factory("2024-01-01 00:00:00", "UTC")
    paris = utc.set_timezone("Europe/Paris")
    assert paris.format("Y-m-d H:i T") == "2024-01-01 01:00 CET"
    assert paris == utc
    assert paris.get_timestamp() == utc.get_timestamp()


def test_set_timezone_should_raise_for_unknown_zone(instant_factory) -> None:
    with pytest.raises(DateTimeError, match="set_timezone"):
        instant_factory().set_timezone("Mars/Olympus_Mons")


def test_get_offset_should_return_zero_for_utc(instant_factory) -> None:
    offset = instant_factory("2024-01-01 00:00:00", "UTC").get_offset()
    assert offset == 0
    assert offset is not False


def test_get_offset_should_follow_the_zone(instant_factory) -> None:
    assert instant_factory("2024-01-01 12:00:00", "Europe/Paris").get_offset() == 3600
    assert instant_factory("2024-07-01 12:00:00", "Europe/Paris").get_offset() == 7200


def test_get_offset_should_raise_when_zone_has_no_offset() -> None:
    instant = SafeInstant.from_interface(datetime(2024, 1, 1, tzinfo=_OpaqueZone()))
    with pytest.raises(DateTimeError, match="get_offset"):
        instant.get_offset()


def test_format_should_return_empty_string_without_raising(instant_factory) -> None:
    assert instant_factory().format("") == ""


def test_format_should_raise_for_trailing_escape(instant_factory) -> None:
    with pytest.raises(DateTimeError, match="Trailing escape"):
        instant_factory().format("Y\\")


def test_diff_should_return_interval(instant_factory) -> None:
    start = instant_factory("2024-01-01 00:00:00")
    end = instant_factory("2024-03-15 12:30:00")
    interval = start.diff(end)
    assert (interval.months, interval.days, interval.hours, interval.minutes) == (2, 14, 12, 30)
    assert interval.total_days == 74
    assert interval.invert is False
    assert end.diff(start).invert is True
    assert end.diff(start, absolute=True).invert is False


def test_diff_should_accept_native_and_datetime_values(instant_factory) -> None:
    start = instant_factory("2024-01-01 00:00:00")
    assert start.diff(NativeDateTime("2024-01-02 00:00:00")).total_days == 1
    assert start.diff(datetime(2024, 1, 3, tzinfo=timezone.utc)).total_days == 2


def test_diff_should_raise_for_non_date_argument(instant_factory) -> None:
    with pytest.raises(DateTimeError, match="diff"):
        instant_factory().diff("2024-01-01")  # type: ignore[arg-type]


def test_constructor_should_propagate_native_errors() -> None:
    with pytest.raises(NativeDateTimeError) as excinfo:
        SafeInstant("not a date at all")
    assert not isinstance(excinfo.value, DateTimeError)


def test_get_timezone_should_return_inner_zone(instant_factory) -> None:
    zone = instant_factory("2024-01-01 00:00:00", "Europe/Paris").get_timezone()
    assert getattr(zone, "key") == "Europe/Paris"


def test_from_mutable_should_copy_current_state() -> None:
    mutable = NativeMutableDateTime("2024-01-01 00:00:00")
    instant = SafeInstant.from_mutable(mutable)
    mutable.modify("+1 day")
    assert instant.format("Y-m-d") == "2024-01-01"
    assert mutable.format("Y-m-d") == "2024-01-02"


def test_from_state_should_rebuild_instant(instant_factory) -> None:
    original = instant_factory("2024-01-01 12:00:00.250000", "Europe/Paris")
    state = original.to_state()
    assert state == {"date": "2024-01-01 12:00:00.250000", "timezone_type": 3, "timezone": "Europe/Paris"}
    assert SafeInstant.from_state(state) == original


def test_from_state_should_propagate_native_errors() -> None:
    with pytest.raises(NativeDateTimeError):
        SafeInstant.from_state({"date": "yesterday-ish", "timezone_type": 3, "timezone": "UTC"})


def test_instant_should_survive_pickling(instant_factory) -> None:
    original = instant_factory("2024-01-01 12:00:00", "Europe/Paris")
    restored = pickle.loads(pickle.dumps(original))
    assert restored == original
    assert restored.format("e") == "Europe/Paris"


def test_equal_instants_in_different_zones_should_hash_alike(instant_factory) -> None:
    paris = instant_factory("2024-01-01 12:00:00", "Europe/Paris")
    utc = instant_factory("2024-01-01 11:00:00", "UTC")
    assert paris == utc
    assert len({paris, utc}) == 1


def test_sentinel_conversion_should_be_logged(instant_factory, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="safedate.safe.instant"):
        with pytest.raises(DateTimeError):
            instant_factory().format("\\")
    records = [record for record in caplog.records if getattr(record, "operation", None) == "format"]
    assert len(records) == 1
    assert "Trailing escape" in records[0].diagnostic


# New York repeats 01:00-02:00 on 2024-11-03: EDT first, then EST.
_REPEATED = "2024-11-03 01:30:00"


@pytest.fixture
def repeated_hour() -> tuple[SafeInstant, SafeInstant]:
    first = SafeInstant(_REPEATED, "America/New_York")
    return first, first.modify("+1 hour")


def test_repeated_hour_should_order_by_instant(repeated_hour) -> None:
    first, second = repeated_hour
    assert first.format("Y-m-d H:i T") == "2024-11-03 01:30 EDT"
    assert second.format("Y-m-d H:i T") == "2024-11-03 01:30 EST"
    assert second.get_timestamp() - first.get_timestamp() == 3600
    assert second.after(first)
    assert first.before(second)
    assert not second.equals(first)
    assert first != second
    assert first < second and second >= first


def test_repeated_hour_diff_should_count_elapsed_time(repeated_hour) -> None:
    first, second = repeated_hour
    interval = first.diff(second)
    assert str(interval) == "PT1H"
    assert interval.total_days == 0
    assert second.diff(first).invert is True


def test_diff_across_dst_change_should_count_calendar_days() -> None:
    start = SafeInstant("2024-11-02 12:00:00", "America/New_York")
    end = SafeInstant("2024-11-03 12:00:00", "America/New_York")
    interval = start.diff(end)
    assert (interval.days, interval.hours, interval.total_days) == (1, 0, 1)


def test_equal_instants_in_repeated_hour_should_hash_alike(repeated_hour) -> None:
    _, second = repeated_hour
    converted = SafeInstant("2024-11-03 06:30:00", "UTC").set_timezone("America/New_York")
    assert converted == second
    assert hash(converted) == hash(second)
    assert len({converted, second}) == 1


@pytest.mark.parametrize("index, timestamp", [(0, 1_730_611_800), (1, 1_730_615_400)])
def test_repeated_hour_should_survive_pickling(repeated_hour, index: int, timestamp: int) -> None:
    original = repeated_hour[index]
    restored = pickle.loads(pickle.dumps(original))
    assert restored.get_timestamp() == timestamp
    assert restored == original
    assert restored.format("T") == original.format("T")


def test_to_state_should_mark_second_occurrence_only(repeated_hour) -> None:
    first, second = repeated_hour
    assert "fold" not in first.to_state()
    assert second.to_state() == {
        "date": "2024-11-03 01:30:00.000000",
        "timezone_type": 3,
        "timezone": "America/New_York",
        "fold": 1,
    }


@pytest.mark.parametrize("text", ["99999999999999999", "-99999999999999999"])
def test_create_from_format_should_raise_for_unrepresentable_timestamp(text: str) -> None:
    with pytest.raises(DateTimeError, match="parsed date was invalid"):
        SafeInstant.create_from_format("U", text)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-01-01 10:00 Etc/GMT+5", "2024-01-01T10:00:00-05:00 Etc/GMT+5"),
        ("2024-01-01 10:00 Etc/GMT-3", "2024-01-01T10:00:00+03:00 Etc/GMT-3"),
        ("2024-01-01 10:00 America/Argentina/Buenos_Aires", "2024-01-01T10:00:00-03:00 America/Argentina/Buenos_Aires"),
    ],
)
def test_constructor_should_read_signed_zone_identifiers(text: str, expected: str) -> None:
    assert SafeInstant(text).format("c e") == expected


def test_zero_offset_should_serialize_as_utc() -> None:
    state = SafeInstant("2024-01-01 00:00:00", "+00:00").to_state()
    assert (state["timezone_type"], state["timezone"]) == (3, "UTC")
