"""Aging alerts feature: badge counts, sorted alert lists, and filters."""

from flow_app.features.aging_alerts.context import (
    AgingAlertContext,
    apply_suggested_thresholds,
    badge_severity,
    badge_text,
    build_aging_alert_context,
    filter_aging_issues,
)

__all__ = [
    "AgingAlertContext",
    "apply_suggested_thresholds",
    "badge_severity",
    "badge_text",
    "build_aging_alert_context",
    "filter_aging_issues",
]
