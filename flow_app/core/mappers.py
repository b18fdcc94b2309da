"""Mapping raw issue records into IssueModel instances and analytics frames."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import pandas as pd
import pytz

from .config import DEFAULT_PRIORITY
from .models import IssueModel
from .status import is_closed_status, is_excluded_status, is_open_status, normalize_issue_status

logger = logging.getLogger(__name__)

ISSUE_FRAME_COLUMNS = (
    "id",
    "title",
    "status",
    "issue_type",
    "priority",
    "assignee",
    "created_dt",
    "closed_dt",
    "is_open",
    "is_closed",
)


def normalize_timestamp(value, target_tz=pytz.UTC) -> pd.Timestamp | None:
    """Normalize a timestamp-like value into `target_tz`.

    Naive values are assumed to be UTC. Returns None when the input cannot
    be parsed.
    """
    if value is None or value == "":
        return None
    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError):
        return None
    # NaT and array results (list input) are both rejected here
    if not isinstance(ts, pd.Timestamp):
        return None
    try:
        if ts.tzinfo is None:
            ts = ts.tz_localize(pytz.UTC)
        return ts.tz_convert(target_tz)
    except (TypeError, ValueError):
        return None


def map_priority(value: Any) -> int:
    try:
        priority = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY
    if priority < 0 or priority > 4:
        return DEFAULT_PRIORITY
    return priority


def map_issue(raw: dict[str, Any]) -> IssueModel:
    def parse_dt(field_name: str) -> datetime | None:
        val = raw.get(field_name)
        ts = normalize_timestamp(val)
        if ts is None:
            if val:
                logger.debug("Issue %s has unparseable %s: %r", raw.get("id"), field_name, val)
            return None
        return ts.to_pydatetime()

    return IssueModel(
        id=str(raw.get("id")),
        title=raw.get("title"),
        status=normalize_issue_status(raw.get("status")),
        created_at=parse_dt("created_at"),
        issue_type=raw.get("issue_type") or "task",
        priority=map_priority(raw.get("priority")),
        updated_at=parse_dt("updated_at"),
        closed_at=parse_dt("closed_at"),
        assignee=raw.get("assignee") or None,
        description=raw.get("description"),
        parent_id=raw.get("parent_id"),
        labels=list(raw.get("labels") or []),
        dependencies=list(raw.get("dependencies") or []),
    )


def map_issues(records: Iterable[dict[str, Any]]) -> list[IssueModel]:
    issues = []
    skipped = 0
    for raw in records:
        if not isinstance(raw, dict) or not raw.get("id"):
            skipped += 1
            continue
        issues.append(map_issue(raw))
    if skipped:
        logger.warning("Skipped %s issue records without an id", skipped)
    return issues


def resolve_close_time(issue: IssueModel) -> pd.Timestamp | None:
    """Return the authoritative close time of a closed issue.

    ``closed_at`` wins; ``updated_at`` is the fallback for records written
    before close times were tracked. Open issues have no close time.
    """
    if not is_closed_status(issue.status):
        return None
    closed = normalize_timestamp(issue.closed_at)
    if closed is None:
        closed = normalize_timestamp(issue.updated_at)
    return closed


def issues_to_dataframe(issues: Iterable[IssueModel]) -> pd.DataFrame:
    """Build the analytics frame for non-tombstoned issues.

    ``created_dt``/``closed_dt`` are UTC timestamps (NaT when missing or
    malformed); ``is_open``/``is_closed`` come from the normalized status.
    """
    rows = []
    for i in issues:
        if is_excluded_status(i.status):
            continue
        rows.append(
            {
                "id": i.id,
                "title": i.title or i.id,
                "status": normalize_issue_status(i.status),
                "issue_type": i.issue_type,
                "priority": i.priority,
                "assignee": i.assignee,
                "created_dt": normalize_timestamp(i.created_at),
                "closed_dt": resolve_close_time(i),
                "is_open": is_open_status(i.status),
                "is_closed": is_closed_status(i.status),
            }
        )
    if not rows:
        return pd.DataFrame(columns=list(ISSUE_FRAME_COLUMNS))
    df = pd.DataFrame(rows, columns=list(ISSUE_FRAME_COLUMNS))
    for col in ("created_dt", "closed_dt"):
        df[col] = pd.to_datetime(df[col], utc=True, errors="coerce")
    return df
