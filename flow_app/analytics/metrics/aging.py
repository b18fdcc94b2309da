"""Aging metrics and alert classification (pure functions)."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from flow_app.analytics.metrics.formatting import format_age_display
from flow_app.core.mappers import normalize_timestamp
from flow_app.core.models import AgingThresholdConfig, IssueModel
from flow_app.core.status import is_open_status

HOURS_PER_DAY = 24.0


@dataclass(frozen=True, slots=True)
class AgingCounts:
    warning_count: int
    critical_count: int

    @property
    def total(self) -> int:
        return self.warning_count + self.critical_count


@dataclass(frozen=True, slots=True)
class AgingIssue:
    issue: IssueModel
    age_hours: float
    age_display: str
    status: str


def resolve_now(now) -> pd.Timestamp:
    ts = normalize_timestamp(now)
    if ts is None:
        raise ValueError(f"Invalid 'now' timestamp: {now!r}")
    return ts


def threshold_to_hours(value: float, unit: str) -> float:
    if unit == "hours":
        return float(value)
    if unit == "days":
        return float(value) * HOURS_PER_DAY
    raise ValueError(f"Unknown threshold unit {unit!r}; expected 'hours' or 'days'")


def get_issue_age_hours(issue: IssueModel, now) -> float | None:
    """Hours since ``created_at``; None when the creation time is unusable."""
    created = normalize_timestamp(issue.created_at)
    if created is None:
        return None
    return (resolve_now(now) - created).total_seconds() / 3600.0


def classify_age_hours(age_hours: float, warning_hours: float, critical_hours: float) -> str:
    if age_hours >= critical_hours:
        return "critical"
    if age_hours >= warning_hours:
        return "warning"
    return "normal"


def classify_issue_age(issue: IssueModel, config: AgingThresholdConfig, now) -> str:
    """Classify one issue's age against a threshold configuration.

    Closed and tombstoned issues are always ``normal``, as are issues
    whose creation time cannot be parsed. Boundaries are inclusive: an
    issue exactly at the warning threshold is ``warning``.
    """
    if not is_open_status(issue.status):
        return "normal"
    age_hours = get_issue_age_hours(issue, now)
    if age_hours is None:
        return "normal"
    return classify_age_hours(
        age_hours,
        threshold_to_hours(config.warning_threshold, config.warning_unit),
        threshold_to_hours(config.critical_threshold, config.critical_unit),
    )


def count_issues_by_aging_status(
    issues: Iterable[IssueModel], config: AgingThresholdConfig, now
) -> AgingCounts:
    warning_count = 0
    critical_count = 0
    for issue in issues:
        status = classify_issue_age(issue, config, now)
        if status == "critical":
            critical_count += 1
        elif status == "warning":
            warning_count += 1
    return AgingCounts(warning_count=warning_count, critical_count=critical_count)


def get_aging_issues(issues: Iterable[IssueModel], config: AgingThresholdConfig, now) -> list[AgingIssue]:
    """Every warning/critical issue, oldest first.

    Parameters
    ----------
    issues : iterable of IssueModel
        Issues to scan; closed and tombstoned ones never appear.
    config : AgingThresholdConfig
        Thresholds to classify against.
    now : datetime-like
        Reference instant.

    Returns
    -------
    list[AgingIssue]
        Sorted by descending ``age_hours`` so the head of the list is the
        most overdue work.
    """
    now_ts = resolve_now(now)
    aging: list[AgingIssue] = []
    for issue in issues:
        status = classify_issue_age(issue, config, now_ts)
        if status == "normal":
            continue
        age_hours = get_issue_age_hours(issue, now_ts)
        aging.append(
            AgingIssue(
                issue=issue,
                age_hours=age_hours,
                age_display=format_age_display(age_hours),
                status=status,
            )
        )
    aging.sort(key=lambda item: item.age_hours, reverse=True)
    return aging


def add_aging_metrics(df: pd.DataFrame, now) -> pd.DataFrame:
    """Add age and cycle-time columns to an issues frame.

    Adds ``age_hours``/``age_days`` (from ``created_dt`` to ``now``) and
    ``cycle_time_hours`` (from ``created_dt`` to ``closed_dt``, clamped at
    zero; NaN for issues without a close time).
    """
    if df.empty:
        return df
    out = df.copy()
    now_ts = resolve_now(now)
    out["age_hours"] = (now_ts - out["created_dt"]).dt.total_seconds() / 3600.0
    out["age_days"] = out["age_hours"] / HOURS_PER_DAY
    cycle = (out["closed_dt"] - out["created_dt"]).dt.total_seconds() / 3600.0
    out["cycle_time_hours"] = cycle.clip(lower=0)
    return out


def as_of(df: pd.DataFrame, now) -> pd.DataFrame:
    """Issues frame as it stood at ``now``.

    Issues created after ``now`` are dropped and issues closed after ``now``
    count as still open. Rows with no usable ``created_dt`` are kept so
    callers can report them.
    """
    if df.empty:
        return df
    now_ts = resolve_now(now)
    out = df[~(df["created_dt"] > now_ts)].copy()
    reopened = out["is_closed"] & (out["closed_dt"] > now_ts)
    if reopened.any():
        out.loc[reopened, "closed_dt"] = pd.NaT
        out.loc[reopened, "is_closed"] = False
        out.loc[reopened, "is_open"] = True
    return out


def closed_cycle_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Closed issues with both a creation and a resolvable close time.

    This is the single cycle-time sample behind lead-time charts, P50/P85
    and percentile-derived thresholds.
    """
    if df.empty:
        return df
    return df[df["is_closed"] & df["created_dt"].notna() & df["closed_dt"].notna()]
