"""Helpers to build aging alert badge/list context; I/O only through an injected store."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from flow_app.analytics.metrics.aging import AgingCounts, AgingIssue, get_aging_issues, resolve_now
from flow_app.analytics.metrics.thresholds import (
    ThresholdHours,
    effective_thresholds,
    hours_config,
    suggest_threshold_config,
)
from flow_app.core.config import AGING_ALERT_PREVIEW_LIMIT
from flow_app.core.models import AgingThresholdConfig, IssueModel
from flow_app.core.threshold_store import ThresholdConfigStore


@dataclass(slots=True)
class AgingAlertContext:
    """Context data for the aging badge, alert list, and threshold preview."""

    thresholds: ThresholdHours
    counts: AgingCounts
    badge_severity: str
    badge_text: str
    items: list[AgingIssue] = field(default_factory=list)
    preview: list[AgingIssue] = field(default_factory=list)
    filtered: list[AgingIssue] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)


def badge_text(counts: AgingCounts) -> str:
    if counts.critical_count > 0 and counts.warning_count > 0:
        return f"{counts.critical_count} critical, {counts.warning_count} warning"
    if counts.critical_count > 0:
        return f"{counts.critical_count} critical"
    if counts.warning_count > 0:
        return f"{counts.warning_count} warning"
    return "No alerts"


def badge_severity(counts: AgingCounts) -> str:
    if counts.critical_count > 0:
        return "critical"
    if counts.warning_count > 0:
        return "warning"
    return "none"


def filter_aging_issues(
    items: Iterable[AgingIssue],
    status: str = "all",
    assignee: str | None = None,
) -> list[AgingIssue]:
    """Narrow an alert list by aging status and/or assignee (order kept)."""
    out = []
    for item in items:
        if status != "all" and item.status != status:
            continue
        if assignee and item.issue.assignee != assignee:
            continue
        out.append(item)
    return out


def build_aging_alert_context(
    issues: Iterable[IssueModel],
    config: AgingThresholdConfig,
    now,
    *,
    status_filter: str = "all",
    assignee_filter: str | None = None,
    preview_limit: int = AGING_ALERT_PREVIEW_LIMIT,
) -> AgingAlertContext:
    """Build aging alert context for one issue snapshot.

    When ``config.use_auto_calculation`` is set, issues are classified
    against the percentile-derived thresholds rather than the stored ones.
    """
    issues = list(issues)
    now_ts = resolve_now(now)
    thresholds = effective_thresholds(config, issues, now_ts)
    items = get_aging_issues(issues, hours_config(config, thresholds), now_ts)

    critical = sum(1 for item in items if item.status == "critical")
    counts = AgingCounts(warning_count=len(items) - critical, critical_count=critical)
    assignees = sorted({item.issue.assignee for item in items if item.issue.assignee})

    return AgingAlertContext(
        thresholds=thresholds,
        counts=counts,
        badge_severity=badge_severity(counts),
        badge_text=badge_text(counts),
        items=items,
        preview=items[:preview_limit],
        filtered=filter_aging_issues(items, status_filter, assignee_filter),
        assignees=assignees,
    )


def apply_suggested_thresholds(
    store: ThresholdConfigStore, issues: Iterable[IssueModel], now
) -> AgingThresholdConfig:
    """Recalculate thresholds from history and persist them through ``store``.

    The stored percentile settings pick the thresholds; every other stored
    field is kept. Returns the saved configuration.
    """
    suggested = suggest_threshold_config(store.load(), list(issues), now)
    store.save(suggested)
    return suggested
