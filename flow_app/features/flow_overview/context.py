"""Pure helpers to build the flow metrics dashboard context (no I/O)."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass

import pandas as pd

from flow_app.analytics.metrics.age_distribution import AgeBucket, age_histogram_from_frame
from flow_app.analytics.metrics.aging import (
    add_aging_metrics,
    as_of,
    closed_cycle_rows,
    resolve_now,
)
from flow_app.analytics.metrics.bucketing import (
    bucket_series,
    format_bucket_key,
    get_granularity_config,
    localize_wall,
)
from flow_app.analytics.metrics.cumulative_flow import FlowPoint, flow_series_from_frame
from flow_app.analytics.metrics.formatting import format_time_value, get_age_color
from flow_app.analytics.metrics.percentiles import percentiles
from flow_app.core.config import DEFAULT_GRANULARITY, TimeGranularity
from flow_app.core.mappers import issues_to_dataframe
from flow_app.core.models import IssueModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LeadTimePoint:
    id: str
    closed_date: pd.Timestamp
    closed_date_str: str
    cycle_time_hours: float
    cycle_time_days: float
    title: str


@dataclass(frozen=True, slots=True)
class AgingWipPoint:
    id: str
    status: str
    age_hours: float
    age_days: float
    title: str
    color: str


@dataclass(frozen=True, slots=True)
class Metrics:
    avg_age: str
    avg_age_raw: float
    display_unit: str
    open_count: int
    cycle_time_p50: float
    cycle_time_p85: float
    lead_time_data: list[LeadTimePoint]
    aging_wip_data: list[AgingWipPoint]
    flow_chart_data: list[FlowPoint]
    age_chart_data: list[AgeBucket]
    granularity: str


def _lead_time_points(closed: pd.DataFrame, granularity: str, tz) -> list[LeadTimePoint]:
    if closed.empty:
        return []
    out = closed.assign(closed_bucket=bucket_series(closed["closed_dt"], granularity, tz))
    out = out.sort_values("closed_bucket", kind="mergesort")
    return [
        LeadTimePoint(
            id=row.id,
            closed_date=localize_wall(row.closed_bucket, tz),
            closed_date_str=format_bucket_key(row.closed_bucket, granularity),
            cycle_time_hours=float(row.cycle_time_hours),
            cycle_time_days=float(row.cycle_time_hours) / 24.0,
            title=row.title,
        )
        for row in out.itertuples(index=False)
    ]


def _aging_wip_points(open_df: pd.DataFrame, granularity: str) -> list[AgingWipPoint]:
    return [
        AgingWipPoint(
            id=row.id,
            status=row.status,
            age_hours=float(row.age_hours),
            age_days=float(row.age_days),
            title=row.title,
            color=get_age_color(row.age_hours, granularity),
        )
        for row in open_df.itertuples(index=False)
    ]


def calculate_metrics(
    issues: Iterable[IssueModel],
    now,
    granularity: TimeGranularity = DEFAULT_GRANULARITY,
    *,
    tz=None,
    flow_window_days: int | None = None,
) -> Metrics | None:
    """Compute every dashboard metric from one issue set and one ``now``.

    Parameters
    ----------
    issues : iterable of IssueModel
        Issue snapshot; tombstones are filtered here.
    now : datetime-like
        Reference instant (never read from the clock here).
    granularity : str
        Bucket width for flow and lead-time charts.
    tz : timezone or str, optional
        Local calendar for bucket alignment.
    flow_window_days : int, optional
        Trailing window for the cumulative flow series.

    Returns
    -------
    Metrics or None
        None when there are no issues (or only tombstones).
    """
    issues = list(issues)
    if not issues:
        return None
    config = get_granularity_config(granularity)
    now_ts = resolve_now(now)

    df = issues_to_dataframe(issues)
    if df.empty:
        return None
    df = add_aging_metrics(df, now_ts)

    skipped = int(df["created_dt"].isna().sum())
    if skipped:
        logger.debug("Excluded %s issues with unusable created_at from metrics", skipped)

    # Open work, the histogram and the flow series all read the same snapshot
    snapshot = as_of(df, now_ts)
    open_df = snapshot[snapshot["is_open"] & snapshot["created_dt"].notna()]

    lead_time_data = _lead_time_points(closed_cycle_rows(df), granularity, tz)
    cycle_times = [p.cycle_time_hours for p in lead_time_data]
    p50, p85 = 0.0, 0.0
    if cycle_times:
        stats = percentiles(cycle_times, (0.5, 0.85))
        p50, p85 = stats[0.5], stats[0.85]

    if open_df.empty:
        avg_hours = 0.0
        avg_age = "0h" if config.display_unit == "hours" else "0d"
    else:
        avg_hours = float(open_df["age_hours"].mean())
        avg_age = format_time_value(avg_hours, config.display_unit)

    return Metrics(
        avg_age=avg_age,
        avg_age_raw=avg_hours,
        display_unit=config.display_unit,
        open_count=len(open_df),
        cycle_time_p50=p50,
        cycle_time_p85=p85,
        lead_time_data=lead_time_data,
        aging_wip_data=_aging_wip_points(open_df, granularity),
        flow_chart_data=flow_series_from_frame(
            snapshot, now_ts, granularity, tz=tz, window_days=flow_window_days
        ),
        age_chart_data=age_histogram_from_frame(snapshot),
        granularity=config.value,
    )


def metrics_to_frames(metrics: Metrics) -> dict[str, pd.DataFrame]:
    """Tabular views of a Metrics result for chart and table consumers."""
    return {
        "lead_time": pd.DataFrame([asdict(p) for p in metrics.lead_time_data]),
        "aging_wip": pd.DataFrame([asdict(p) for p in metrics.aging_wip_data]),
        "flow": pd.DataFrame([asdict(p) for p in metrics.flow_chart_data]),
        "age": pd.DataFrame([asdict(p) for p in metrics.age_chart_data]),
    }
