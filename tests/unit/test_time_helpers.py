from datetime import UTC, datetime, timedelta, timezone

from app.utils.time_helpers import format_for_display, to_utc, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo is not None
    assert utc_now().utcoffset() == timedelta(0)


def test_to_utc_treats_naive_as_utc():
    naive = datetime(2030, 1, 1, 12, 0)
    assert to_utc(naive) == datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


def test_to_utc_converts_offsets():
    ist = timezone(timedelta(hours=5, minutes=30))
    value = datetime(2030, 1, 1, 17, 30, tzinfo=ist)
    assert to_utc(value) == datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


def test_format_for_display_uses_zone():
    value = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)
    assert format_for_display(value, "Asia/Kolkata") == "2030-01-01 17:30 IST"


def test_format_for_display_unknown_zone_falls_back_to_utc():
    value = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)
    assert format_for_display(value, "Mars/Olympus") == "2030-01-01 12:00 UTC"
