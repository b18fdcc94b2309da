"""Age distribution histogram for open work."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from flow_app.analytics.metrics.aging import add_aging_metrics, as_of
from flow_app.core.config import AGE_BUCKET_EDGES_DAYS, AGE_BUCKET_LABELS
from flow_app.core.mappers import issues_to_dataframe
from flow_app.core.models import IssueModel


@dataclass(frozen=True, slots=True)
class AgeBucket:
    range: str
    count: int
    bucket_index: int


def age_histogram_from_frame(df: pd.DataFrame) -> list[AgeBucket]:
    """Histogram of open issues in an enriched frame (needs ``age_hours``).

    Every range is always present, in fixed order, so ``bucket_index`` can
    drive consistent coloring.
    """
    counts = [0] * len(AGE_BUCKET_LABELS)
    open_df = df
    if not df.empty and "age_hours" in df.columns:
        open_df = df[df["is_open"] & df["created_dt"].notna()]
    if not open_df.empty and "age_hours" in open_df.columns:
        age_days = (open_df["age_hours"] // 24).clip(lower=0)
        codes = pd.cut(age_days, bins=list(AGE_BUCKET_EDGES_DAYS), right=True, labels=False)
        for code, count in codes.value_counts().items():
            counts[int(code)] = int(count)
    return [
        AgeBucket(range=label, count=counts[idx], bucket_index=idx)
        for idx, label in enumerate(AGE_BUCKET_LABELS)
    ]


def build_age_histogram(issues: Iterable[IssueModel], now) -> list[AgeBucket]:
    """Histogram current ages of open issues into fixed day ranges.

    ``age_days = floor((now - created_at) / 24h)``; ranges are 0-7d, 8-14d,
    15-30d and 30d+ (31 days or more). Closed and tombstoned issues, issues
    created after ``now`` and issues without a usable creation time are not
    counted; an issue closed after ``now`` still counts as open.
    """
    df = add_aging_metrics(issues_to_dataframe(issues), now)
    return age_histogram_from_frame(as_of(df, now))
