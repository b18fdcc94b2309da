"""Domain data models for issues and aging threshold settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class IssueModel:
    id: str
    title: str | None
    status: str
    created_at: datetime | str | None
    issue_type: str | None = "task"
    priority: int | None = None
    updated_at: datetime | str | None = None
    closed_at: datetime | str | None = None
    assignee: str | None = None
    description: str | None = None
    parent_id: str | None = None
    labels: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AgingThresholdConfig:
    """Warning/critical age limits for open issues.

    Thresholds are stored in the unit the user picked; analytics convert them
    to hours before comparing. When ``use_auto_calculation`` is set the
    percentile fields drive thresholds derived from historical cycle times.
    """

    warning_threshold: float
    warning_unit: str
    critical_threshold: float
    critical_unit: str
    use_auto_calculation: bool = False
    auto_calc_percentile_warning: float = 0.85
    auto_calc_percentile_critical: float = 0.95
