"""Display formatting and labeling helpers for flow metrics."""

from __future__ import annotations

import math

from flow_app.analytics.metrics.bucketing import get_granularity_config
from flow_app.core.config import (
    AGE_COLOR_AGING,
    AGE_COLOR_FRESH,
    AGE_COLOR_LIMITS_HOURS,
    AGE_COLOR_STALE,
    DisplayUnit,
)

AGING_STATUS_LABELS: dict[str, str] = {
    "normal": "Normal",
    "warning": "Warning",
    "critical": "Critical",
}


def format_time_value(hours: float, unit: DisplayUnit) -> str:
    """Render a duration in the granularity's display unit (``12.5h``, ``1.5d``)."""
    if unit == "hours":
        return f"{hours:.1f}h"
    return f"{hours / 24:.1f}d"


def format_age_display(hours: float) -> str:
    """Compact age label for alert lists.

    Under a day: ``"2h 30m"`` (``"2h"`` when minutes round to zero).
    From a day on: ``"3d 22h"`` (``"3d"`` when leftover hours round to zero).
    """
    hours = max(0.0, float(hours))
    if hours < 24:
        h = math.floor(hours)
        m = round((hours - h) * 60)
        if m == 60:
            h, m = h + 1, 0
        if h >= 24:
            return "1d"
        return f"{h}h {m}m" if m > 0 else f"{h}h"
    days = math.floor(hours / 24)
    remaining = round(hours - days * 24)
    if remaining == 24:
        days, remaining = days + 1, 0
    return f"{days}d {remaining}h" if remaining > 0 else f"{days}d"


def get_age_color(age_hours: float, granularity: str) -> str:
    """Severity color for an aging-WIP point.

    Hour-unit granularities color at 4h/12h, day-unit ones at 7d/30d.
    """
    config = get_granularity_config(granularity)
    fresh_limit, aging_limit = AGE_COLOR_LIMITS_HOURS[config.display_unit]
    if age_hours <= fresh_limit:
        return AGE_COLOR_FRESH
    if age_hours <= aging_limit:
        return AGE_COLOR_AGING
    return AGE_COLOR_STALE


def aging_status_label(status: str) -> str:
    return AGING_STATUS_LABELS.get(status, status.title())
