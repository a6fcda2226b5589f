from datetime import datetime, timedelta, timezone

from healthconnect.core.utils import to_utc, utc_now


def test_naive_datetimes_are_taken_as_utc():
    assert to_utc(datetime(2026, 11, 2, 9, 30)) == datetime(2026, 11, 2, 9, 30, tzinfo=timezone.utc)


def test_offsets_are_converted_to_utc():
    one_hour_ahead = datetime(2026, 11, 2, 10, 30, tzinfo=timezone(timedelta(hours=1)))

    converted = to_utc(one_hour_ahead)

    assert converted == datetime(2026, 11, 2, 9, 30, tzinfo=timezone.utc)
    assert converted.tzinfo is timezone.utc


def test_none_passes_through():
    assert to_utc(None) is None


def test_utc_now_is_aware():
    assert utc_now().utcoffset() == timedelta(0)
