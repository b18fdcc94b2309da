"""Status normalization and categorization utilities.

Centralized status handling shared by every analytics module. It uses the
status configuration from config.py (ISSUE_STATUSES, CLOSED_STATUSES,
EXCLUDED_STATUSES).
"""

from __future__ import annotations

from .config import CLOSED_STATUSES, DEFAULT_PRIORITY, EXCLUDED_STATUSES, ISSUE_STATUSES, PRIORITY_LABELS

# Variants seen in hand-edited issue files
STATUS_ALIASES: dict[str, str] = {
    "in progress": "in_progress",
    "in-progress": "in_progress",
    "inprogress": "in_progress",
    "done": "closed",
    "resolved": "closed",
    "deleted": "tombstone",
}


def normalize_issue_status(value: str | None) -> str:
    """Map a raw status string to its canonical lowercase form.

    Unknown values are returned lowercased rather than rejected, so they are
    treated as open work by the analytics.

    Examples
    --------
    >>> normalize_issue_status(" In Progress ")
    'in_progress'
    >>> normalize_issue_status("CLOSED")
    'closed'
    """
    if not value:
        return "open"
    text = str(value).strip().lower()
    if text in ISSUE_STATUSES:
        return text
    return STATUS_ALIASES.get(text, text)


def is_excluded_status(value: str | None) -> bool:
    """True for statuses dropped from all analytics (tombstones)."""
    return normalize_issue_status(value) in EXCLUDED_STATUSES


def is_closed_status(value: str | None) -> bool:
    return normalize_issue_status(value) in CLOSED_STATUSES


def is_open_status(value: str | None) -> bool:
    """Check if status counts as work in progress.

    Parameters
    ----------
    value : str | None
        Raw or normalized status string.

    Returns
    -------
    bool
        True unless the issue is closed or tombstoned.
    """
    status = normalize_issue_status(value)
    return status not in CLOSED_STATUSES and status not in EXCLUDED_STATUSES


def priority_label(priority: int | None) -> str:
    if priority is None:
        priority = DEFAULT_PRIORITY
    return PRIORITY_LABELS.get(int(priority), "Unknown")
