"""Flow overview feature: the metrics behind the dashboard charts."""

from flow_app.features.flow_overview.context import (
    AgingWipPoint,
    LeadTimePoint,
    Metrics,
    calculate_metrics,
    metrics_to_frames,
)

__all__ = [
    "AgingWipPoint",
    "LeadTimePoint",
    "Metrics",
    "calculate_metrics",
    "metrics_to_frames",
]
