import pytest

from pomosync.core.clock import format_duration, format_time, iso_from_ts, ts_from_iso


@pytest.mark.parametrize(
    "seconds, text",
    [(1500, "25:00"), (59, "00:59"), (0, "00:00"), (-4, "00:00"), (3600, "60:00")],
)
def test_format_time(seconds, text):
    assert format_time(seconds) == text


def test_format_duration():
    assert format_duration(249) == "4m 09s"
    assert format_duration(3900) == "1h 05m"


def test_iso_is_utc_and_whole_seconds():
    assert iso_from_ts(0.9) == "1970-01-01T00:00:00+00:00"
    assert ts_from_iso(iso_from_ts(1_760_000_000)) == 1_760_000_000


def test_naive_iso_is_treated_as_utc():
    assert ts_from_iso("1970-01-01T00:01:00") == 60
