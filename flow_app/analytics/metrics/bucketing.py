"""Time bucketing utilities.

This module maps timestamps onto discrete, calendar-aligned buckets for a
chosen granularity. Buckets follow the *local* wall clock of the configured
timezone: daily buckets start at local midnight and sub-daily buckets start
at ``hour - hour % hours_per_bucket``.
"""

from __future__ import annotations

import pandas as pd
import pytz

from flow_app.core.config import GRANULARITY_OPTIONS, TIMEZONE, GranularityConfig
from flow_app.core.mappers import normalize_timestamp


def get_granularity_config(granularity: str) -> GranularityConfig:
    """Return the configuration for a granularity value.

    Raises
    ------
    ValueError
        If ``granularity`` is not one of the known options.
    """
    for option in GRANULARITY_OPTIONS:
        if option.value == granularity:
            return option
    known = ", ".join(o.value for o in GRANULARITY_OPTIONS)
    raise ValueError(f"Unknown granularity {granularity!r}; expected one of: {known}")


def resolve_tz(tz=None):
    if tz is None:
        return pytz.timezone(TIMEZONE)
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def to_local_wall(series: pd.Series, tz=None) -> pd.Series:
    """Convert UTC timestamps to naive local wall-clock timestamps."""
    local = pd.to_datetime(series, utc=True, errors="coerce").dt.tz_convert(resolve_tz(tz))
    return local.dt.tz_localize(None)


def bucket_wall_series(wall: pd.Series, granularity: str) -> pd.Series:
    """Floor naive wall-clock timestamps to their bucket start."""
    config = get_granularity_config(granularity)
    if config.hours_per_bucket >= 24:
        return wall.dt.normalize()
    hours = wall.dt.floor("h")
    offset = pd.to_timedelta(wall.dt.hour % config.hours_per_bucket, unit="h")
    return hours - offset


def bucket_series(series: pd.Series, granularity: str, tz=None) -> pd.Series:
    """Vectorized bucketing of a timestamp Series.

    Returns naive local wall-clock bucket starts (NaT stays NaT), which is
    the form used for comparisons and enumeration across DST changes.
    """
    return bucket_wall_series(to_local_wall(series, tz), granularity)


def localize_wall(wall: pd.Timestamp, tz=None) -> pd.Timestamp:
    # Spring-forward gaps shift to the next valid instant; fall-back repeats
    # resolve to the first (DST) occurrence.
    return wall.tz_localize(resolve_tz(tz), ambiguous=True, nonexistent="shift_forward")


def bucket_key(timestamp, granularity: str, tz=None) -> pd.Timestamp | None:
    """Map a timestamp to the tz-aware start of its bucket.

    Two timestamps map to the same bucket iff they fall in the same aligned
    window. Returns None when the timestamp cannot be parsed.
    """
    ts = normalize_timestamp(timestamp)
    if ts is None:
        return None
    wall = bucket_series(pd.Series([ts]), granularity, tz).iloc[0]
    return localize_wall(wall, tz)


def bucket_range(start, end, granularity: str, tz=None) -> pd.DatetimeIndex:
    """Every naive wall-clock bucket start from ``start``'s bucket to ``end``'s.

    Inclusive on both ends and without gaps. Empty when ``end`` precedes
    ``start``.
    """
    config = get_granularity_config(granularity)
    edges = bucket_series(pd.Series([start, end]), granularity, tz)
    first, last = edges.iloc[0], edges.iloc[1]
    if pd.isna(first) or pd.isna(last) or last < first:
        return pd.DatetimeIndex([])
    freq = "D" if config.hours_per_bucket >= 24 else f"{config.hours_per_bucket}h"
    return pd.date_range(first, last, freq=freq)


def format_bucket_key(bucket: pd.Timestamp, granularity: str) -> str:
    """Format a bucket start for display.

    ``YYYY-MM-DD`` for daily buckets, ``YYYY-MM-DD HH:00`` otherwise.
    """
    config = get_granularity_config(granularity)
    if config.hours_per_bucket >= 24:
        return bucket.strftime("%Y-%m-%d")
    return bucket.strftime("%Y-%m-%d %H:00")
