import pandas as pd
import pytest

from flow_app.analytics.metrics.bucketing import (
    bucket_key,
    bucket_range,
    bucket_series,
    format_bucket_key,
    get_granularity_config,
)


def test_granularity_config_values():
    assert get_granularity_config("hourly").hours_per_bucket == 1
    assert get_granularity_config("hourly").display_unit == "hours"
    assert get_granularity_config("4-hourly").hours_per_bucket == 4
    assert get_granularity_config("4-hourly").display_unit == "hours"
    assert get_granularity_config("8-hourly").hours_per_bucket == 8
    assert get_granularity_config("8-hourly").display_unit == "days"
    assert get_granularity_config("daily").hours_per_bucket == 24
    assert get_granularity_config("daily").display_unit == "days"


def test_unknown_granularity_raises():
    with pytest.raises(ValueError):
        get_granularity_config("weekly")


@pytest.mark.parametrize(
    "granularity, expected",
    [
        ("hourly", "2024-01-01T13:00:00Z"),
        ("4-hourly", "2024-01-01T12:00:00Z"),
        ("8-hourly", "2024-01-01T08:00:00Z"),
        ("daily", "2024-01-01T00:00:00Z"),
    ],
)
def test_bucket_key_alignment(granularity, expected):
    key = bucket_key("2024-01-01T13:45:30Z", granularity, tz="UTC")
    assert key == pd.Timestamp(expected)


def test_bucket_key_midnight():
    assert bucket_key("2024-01-01T00:00:00Z", "daily", tz="UTC") == pd.Timestamp("2024-01-01T00:00:00Z")
    assert bucket_key("2024-01-01T00:00:00Z", "8-hourly", tz="UTC") == pd.Timestamp("2024-01-01T00:00:00Z")


def test_bucket_key_uses_local_calendar():
    # 02:30 UTC on Jan 1 is 23:30 on Dec 31 in Santiago (UTC-3 in summer)
    key = bucket_key("2024-01-01T02:30:00Z", "daily", tz="America/Santiago")
    assert key == pd.Timestamp("2023-12-31T03:00:00Z")
    assert key.strftime("%Y-%m-%d %H:%M") == "2023-12-31 00:00"


def test_same_bucket_iff_same_window():
    a = bucket_key("2024-03-05T12:01:00Z", "4-hourly", tz="UTC")
    b = bucket_key("2024-03-05T15:59:59Z", "4-hourly", tz="UTC")
    c = bucket_key("2024-03-05T16:00:00Z", "4-hourly", tz="UTC")
    assert a == b
    assert a != c


def test_bucket_key_unparseable_returns_none():
    assert bucket_key("not a date", "daily") is None
    assert bucket_key(None, "daily") is None


def test_bucket_series_keeps_nat():
    series = pd.Series(pd.to_datetime(["2024-01-01T05:10:00Z", None], utc=True))
    out = bucket_series(series, "4-hourly", tz="UTC")
    assert out.iloc[0] == pd.Timestamp("2024-01-01 04:00")
    assert pd.isna(out.iloc[1])


def test_bucket_range_is_gap_free():
    start = pd.Timestamp("2024-01-01T09:30:00Z")
    end = pd.Timestamp("2024-01-03T01:00:00Z")
    daily = bucket_range(start, end, "daily", tz="UTC")
    assert [d.strftime("%Y-%m-%d") for d in daily] == ["2024-01-01", "2024-01-02", "2024-01-03"]
    eight = bucket_range(start, end, "8-hourly", tz="UTC")
    assert len(eight) == 6
    assert eight[0] == pd.Timestamp("2024-01-01 08:00")
    assert eight[-1] == pd.Timestamp("2024-01-03 00:00")


def test_bucket_range_empty_when_end_before_start():
    start = pd.Timestamp("2024-01-03T00:00:00Z")
    end = pd.Timestamp("2024-01-01T00:00:00Z")
    assert len(bucket_range(start, end, "daily", tz="UTC")) == 0


def test_format_bucket_key():
    ts = pd.Timestamp("2024-01-15 13:00")
    assert format_bucket_key(ts, "daily") == "2024-01-15"
    assert format_bucket_key(ts, "hourly") == "2024-01-15 13:00"
    assert format_bucket_key(ts, "4-hourly") == "2024-01-15 13:00"
    assert format_bucket_key(pd.Timestamp("2024-01-15 00:00"), "8-hourly") == "2024-01-15 00:00"
