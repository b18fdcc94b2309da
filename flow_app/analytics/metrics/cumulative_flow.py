"""Cumulative flow diagram series.

Builds a gap-free, time-bucketed series of running opened/closed counts and
per-bucket throughput from the earliest creation time through ``now``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from flow_app.analytics.metrics.aging import as_of, resolve_now
from flow_app.analytics.metrics.bucketing import (
    bucket_range,
    bucket_series,
    format_bucket_key,
    get_granularity_config,
    localize_wall,
)
from flow_app.core.config import CFD_SUB_DAILY_LIMIT_DAYS, TimeGranularity
from flow_app.core.mappers import issues_to_dataframe
from flow_app.core.models import IssueModel


@dataclass(frozen=True, slots=True)
class FlowPoint:
    date: str
    timestamp: pd.Timestamp
    opened: int
    closed: int
    open: int
    throughput: int


def default_window_days(granularity: TimeGranularity) -> int | None:
    """Trailing window for sub-daily charts; daily charts show all history."""
    if get_granularity_config(granularity).hours_per_bucket < 24:
        return CFD_SUB_DAILY_LIMIT_DAYS
    return None


def flow_series_from_frame(
    df: pd.DataFrame,
    now,
    granularity: TimeGranularity,
    *,
    tz=None,
    window_days: int | None = None,
) -> list[FlowPoint]:
    """Flow series for an issues frame (``created_dt``/``closed_dt`` columns).

    Parameters
    ----------
    df : pd.DataFrame
        Frame from ``issues_to_dataframe`` (tombstones already dropped).
        Issues created after ``now`` are left out and closes after ``now``
        do not count yet.
    now : datetime-like
        Last instant covered; its bucket is the final point.
    granularity : str
        Bucket width (hourly, 4-hourly, 8-hourly, daily).
    tz : timezone or str, optional
        Local calendar for bucket alignment (defaults to config TIMEZONE).
    window_days : int, optional
        Only emit buckets from the last ``window_days`` days. Cumulative
        counts still include everything before the window.

    Returns
    -------
    list[FlowPoint]
        One point per bucket with no gaps; empty when no issue has a
        usable creation time.
    """
    if df.empty:
        return []
    now_ts = resolve_now(now)
    df = as_of(df, now_ts)
    # A closed issue with no close time cannot be placed on the timeline
    valid = df[df["created_dt"].notna() & ~(df["is_closed"] & df["closed_dt"].isna())]
    if valid.empty:
        return []

    start = valid["created_dt"].min()
    if window_days is not None:
        start = max(start, now_ts - pd.Timedelta(days=window_days))
    buckets = bucket_range(start, now_ts, granularity, tz)
    if len(buckets) == 0:
        return []

    created_buckets = bucket_series(valid["created_dt"], granularity, tz)
    closed_mask = valid["is_closed"] & valid["closed_dt"].notna()
    closed_buckets = bucket_series(valid.loc[closed_mask, "closed_dt"], granularity, tz)

    # Counts at each boundary come from binary search over sorted bucket keys
    buckets = buckets.as_unit("ns")
    created_sorted = pd.DatetimeIndex(created_buckets.sort_values()).as_unit("ns")
    closed_sorted = pd.DatetimeIndex(closed_buckets.sort_values()).as_unit("ns")
    opened_cum = created_sorted.searchsorted(buckets, side="right")
    closed_cum = closed_sorted.searchsorted(buckets, side="right")
    closed_before = closed_sorted.searchsorted(buckets, side="left")

    points: list[FlowPoint] = []
    for idx, bucket in enumerate(buckets):
        opened = int(opened_cum[idx])
        closed = int(closed_cum[idx])
        points.append(
            FlowPoint(
                date=format_bucket_key(bucket, granularity),
                timestamp=localize_wall(bucket, tz),
                opened=opened,
                closed=closed,
                open=opened - closed,
                throughput=closed - int(closed_before[idx]),
            )
        )
    return points


def build_flow_series(
    issues: Iterable[IssueModel],
    now,
    granularity: TimeGranularity,
    *,
    tz=None,
    window_days: int | None = None,
) -> list[FlowPoint]:
    """Cumulative flow series for a list of issues (tombstones excluded)."""
    return flow_series_from_frame(
        issues_to_dataframe(issues), now, granularity, tz=tz, window_days=window_days
    )
