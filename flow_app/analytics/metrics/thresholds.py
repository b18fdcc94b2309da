"""Aging threshold calibration from historical cycle times.

Thresholds can be configured by hand or derived from percentiles of how long
closed issues took. This module derives them, resolves the thresholds that
apply to a given configuration, and reports advisory configuration problems.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import NamedTuple

from flow_app.analytics.metrics.aging import add_aging_metrics, closed_cycle_rows, threshold_to_hours
from flow_app.analytics.metrics.percentiles import percentile
from flow_app.core.config import DEFAULT_THRESHOLDS
from flow_app.core.mappers import issues_to_dataframe
from flow_app.core.models import AgingThresholdConfig, IssueModel

THRESHOLD_UNITS = ("hours", "days")


class ThresholdHours(NamedTuple):
    warning_hours: float
    critical_hours: float


def default_threshold_hours() -> ThresholdHours:
    return ThresholdHours(
        threshold_to_hours(DEFAULT_THRESHOLDS.warning_threshold, DEFAULT_THRESHOLDS.warning_unit),
        threshold_to_hours(DEFAULT_THRESHOLDS.critical_threshold, DEFAULT_THRESHOLDS.critical_unit),
    )


def cycle_time_sample(issues: Iterable[IssueModel], now) -> list[float]:
    """Cycle times in hours of every closed issue with a resolvable close time.

    Issues without a usable creation time are left out. The sample is the
    same one the flow overview uses for P50/P85.
    """
    df = add_aging_metrics(issues_to_dataframe(issues), now)
    closed = closed_cycle_rows(df)
    if closed.empty:
        return []
    return closed["cycle_time_hours"].dropna().astype(float).tolist()


def calculate_thresholds_from_percentiles(
    issues: Iterable[IssueModel],
    p_warning: float,
    p_critical: float,
    now,
) -> ThresholdHours:
    """Derive warning/critical hours from historical cycle-time percentiles.

    Falls back to the DEFAULT_THRESHOLDS hours when no closed issue has a
    usable cycle time. The result is not clamped: ``critical_hours`` is
    only guaranteed to be at least ``warning_hours`` when
    ``p_critical >= p_warning``.
    """
    sample = cycle_time_sample(issues, now)
    if not sample:
        return default_threshold_hours()
    return ThresholdHours(percentile(sample, p_warning), percentile(sample, p_critical))


def effective_thresholds(config: AgingThresholdConfig, issues: Iterable[IssueModel], now) -> ThresholdHours:
    """Thresholds in hours that actually apply under ``config``."""
    if config.use_auto_calculation:
        return calculate_thresholds_from_percentiles(
            issues,
            config.auto_calc_percentile_warning,
            config.auto_calc_percentile_critical,
            now,
        )
    return ThresholdHours(
        threshold_to_hours(config.warning_threshold, config.warning_unit),
        threshold_to_hours(config.critical_threshold, config.critical_unit),
    )


def hours_config(config: AgingThresholdConfig, hours: ThresholdHours) -> AgingThresholdConfig:
    """Copy of ``config`` with both thresholds expressed in hours."""
    return replace(
        config,
        warning_threshold=hours.warning_hours,
        warning_unit="hours",
        critical_threshold=hours.critical_hours,
        critical_unit="hours",
    )


def _to_display_unit(hours: float) -> tuple[float, str]:
    if hours < 24:
        return float(round(hours)), "hours"
    return round(hours / 24, 1), "days"


def suggest_threshold_config(
    config: AgingThresholdConfig, issues: Iterable[IssueModel], now
) -> AgingThresholdConfig:
    """Fill the thresholds of ``config`` from its percentile settings.

    Values under a day become whole hours; longer ones become days with one
    decimal. Every other field carries over unchanged.
    """
    derived = calculate_thresholds_from_percentiles(
        issues,
        config.auto_calc_percentile_warning,
        config.auto_calc_percentile_critical,
        now,
    )
    warning_value, warning_unit = _to_display_unit(derived.warning_hours)
    critical_value, critical_unit = _to_display_unit(derived.critical_hours)
    return replace(
        config,
        warning_threshold=warning_value,
        warning_unit=warning_unit,
        critical_threshold=critical_value,
        critical_unit=critical_unit,
    )


def validate_threshold_config(config: AgingThresholdConfig) -> list[str]:
    """Advisory problems with a threshold configuration (empty when fine).

    Nothing here is enforced by the classifier; callers decide whether to
    block a save or just show the messages.
    """
    problems: list[str] = []
    for label, value, unit in (
        ("Warning", config.warning_threshold, config.warning_unit),
        ("Critical", config.critical_threshold, config.critical_unit),
    ):
        if unit not in THRESHOLD_UNITS:
            problems.append(f"{label} unit must be 'hours' or 'days', got {unit!r}")
        if value is None or value <= 0:
            problems.append(f"{label} threshold must be greater than zero")
    if not problems:
        warning_hours = threshold_to_hours(config.warning_threshold, config.warning_unit)
        critical_hours = threshold_to_hours(config.critical_threshold, config.critical_unit)
        if critical_hours < warning_hours:
            problems.append(
                f"Critical threshold ({critical_hours:g}h) is below warning threshold ({warning_hours:g}h)"
            )
    percentiles_ok = True
    for label, p in (
        ("Warning", config.auto_calc_percentile_warning),
        ("Critical", config.auto_calc_percentile_critical),
    ):
        if p is None or p <= 0 or p > 1:
            problems.append(f"{label} percentile must be within (0, 1], got {p}")
            percentiles_ok = False
    if percentiles_ok and config.auto_calc_percentile_critical < config.auto_calc_percentile_warning:
        problems.append("Critical percentile is below warning percentile")
    return problems
