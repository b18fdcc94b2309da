"""Central configuration, constants, and default values for flow analytics."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .models import AgingThresholdConfig

# =============================================================================
# Time Settings
# =============================================================================
# Local calendar used to align time buckets (midnight, 4h/8h windows)
TIMEZONE = "UTC"

TimeGranularity = Literal["hourly", "4-hourly", "8-hourly", "daily"]
DisplayUnit = Literal["hours", "days"]


@dataclass(frozen=True, slots=True)
class GranularityConfig:
    value: TimeGranularity
    label: str
    hours_per_bucket: int
    display_unit: DisplayUnit


GRANULARITY_OPTIONS: Sequence[GranularityConfig] = (
    GranularityConfig("hourly", "Hourly", 1, "hours"),
    GranularityConfig("4-hourly", "4-Hour", 4, "hours"),
    GranularityConfig("8-hourly", "8-Hour", 8, "days"),
    GranularityConfig("daily", "Daily", 24, "days"),
)

DEFAULT_GRANULARITY = "daily"

# =============================================================================
# Issue Status Configuration
# =============================================================================
ISSUE_STATUSES: Sequence[str] = (
    "open",
    "in_progress",
    "blocked",
    "closed",
    "tombstone",
    "deferred",
    "pinned",
    "hooked",
)

# Statuses whose close time feeds cycle-time and throughput numbers
CLOSED_STATUSES: frozenset[str] = frozenset({"closed"})

# Deleted issues; dropped before any analytics run
EXCLUDED_STATUSES: frozenset[str] = frozenset({"tombstone"})

# =============================================================================
# Priority Configuration
# =============================================================================
PRIORITY_LABELS: dict[int, str] = {
    0: "Critical",
    1: "High",
    2: "Medium",
    3: "Low",
    4: "Lowest",
}

DEFAULT_PRIORITY = 2

# =============================================================================
# Age Distribution
# =============================================================================
# Upper edges are inclusive on whole days: 0..7, 8..14, 15..30, 31+
AGE_BUCKET_LABELS: Sequence[str] = ("0-7d", "8-14d", "15-30d", "30d+")
AGE_BUCKET_EDGES_DAYS: Sequence[float] = (float("-inf"), 7, 14, 30, float("inf"))

# =============================================================================
# Chart Colors
# =============================================================================
AGE_COLOR_FRESH = "#10b981"
AGE_COLOR_AGING = "#f59e0b"
AGE_COLOR_STALE = "#ef4444"

# (fresh limit, aging limit) in hours per display unit
AGE_COLOR_LIMITS_HOURS: dict[str, tuple[float, float]] = {
    "hours": (4, 12),
    "days": (7 * 24, 30 * 24),
}

# =============================================================================
# Flow & Alert Defaults
# =============================================================================
# Sub-daily cumulative flow charts only show this many trailing days
CFD_SUB_DAILY_LIMIT_DAYS: int = 30

# Number of rows in the aging alert preview dropdown
AGING_ALERT_PREVIEW_LIMIT: int = 10

WARNING_PERCENTILE_OPTIONS: Sequence[tuple[float, str]] = (
    (0.75, "P75 (75th percentile)"),
    (0.85, "P85 (85th percentile)"),
    (0.90, "P90 (90th percentile)"),
    (0.95, "P95 (95th percentile)"),
    (0.99, "P99 (99th percentile)"),
)

CRITICAL_PERCENTILE_OPTIONS: Sequence[tuple[float, str]] = (
    (0.85, "P85 (85th percentile)"),
    (0.90, "P90 (90th percentile)"),
    (0.95, "P95 (95th percentile)"),
    (0.99, "P99 (99th percentile)"),
    (0.999, "P99.9 (99.9th percentile)"),
)

# Quick-select presets offered next to the threshold inputs
THRESHOLD_PRESETS: Sequence[tuple[float, str, str]] = (
    (1, "1 hour", "hours"),
    (2, "2 hours", "hours"),
    (4, "4 hours", "hours"),
    (8, "8 hours", "hours"),
    (1, "1 day", "days"),
    (3, "3 days", "days"),
    (7, "1 week", "days"),
)

# =============================================================================
# Aging Thresholds
# =============================================================================
# Agent workflows move fast: 4h warning, 8h critical
DEFAULT_THRESHOLDS = AgingThresholdConfig(
    warning_threshold=4,
    warning_unit="hours",
    critical_threshold=8,
    critical_unit="hours",
    use_auto_calculation=False,
    auto_calc_percentile_warning=0.85,
    auto_calc_percentile_critical=0.95,
)

THRESHOLD_CONFIG_ENV = "FLOW_APP_THRESHOLD_CONFIG"
THRESHOLD_CONFIG_PATH = Path(
    os.environ.get(THRESHOLD_CONFIG_ENV)
    or Path.home() / ".beads-dashboard" / "aging-thresholds.yaml"
)
