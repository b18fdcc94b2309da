from datetime import datetime, timedelta

import pytz

from flow_app.analytics.metrics.age_distribution import build_age_histogram
from flow_app.core.models import IssueModel

NOW = pytz.UTC.localize(datetime(2024, 6, 15, 12, 0, 0))


def _issue(issue_id, status, age):
    return IssueModel(id=issue_id, title=None, status=status, created_at=NOW - age)


def _sample_issues():
    return [
        _issue("fresh", "open", timedelta(hours=2)),
        _issue("week", "in_progress", timedelta(days=7, hours=23)),
        _issue("eight", "blocked", timedelta(days=8)),
        _issue("fortnight", "open", timedelta(days=14, hours=23)),
        _issue("fifteen", "deferred", timedelta(days=15)),
        _issue("month", "hooked", timedelta(days=30, hours=5)),
        _issue("old", "pinned", timedelta(days=31)),
        _issue("done", "closed", timedelta(days=40)),
        _issue("gone", "tombstone", timedelta(days=2)),
    ]


def test_histogram_ranges_and_counts():
    buckets = build_age_histogram(_sample_issues(), NOW)
    assert [b.range for b in buckets] == ["0-7d", "8-14d", "15-30d", "30d+"]
    assert [b.count for b in buckets] == [2, 2, 2, 1]
    assert [b.bucket_index for b in buckets] == [0, 1, 2, 3]


def test_histogram_sum_equals_open_count():
    issues = _sample_issues()
    buckets = build_age_histogram(issues, NOW)
    open_count = sum(1 for i in issues if i.status not in {"closed", "tombstone"})
    assert sum(b.count for b in buckets) == open_count


def test_empty_buckets_still_present():
    buckets = build_age_histogram([_issue("a", "open", timedelta(days=40))], NOW)
    assert [b.count for b in buckets] == [0, 0, 0, 1]
    assert build_age_histogram([], NOW)[0].count == 0
    assert len(build_age_histogram([], NOW)) == 4


def test_future_and_undatable_issues_are_not_counted():
    issues = [
        _issue("future", "open", timedelta(hours=-5)),
        IssueModel(id="bad", title=None, status="open", created_at="not-a-date"),
    ]
    buckets = build_age_histogram(issues, NOW)
    assert [b.count for b in buckets] == [0, 0, 0, 0]


def test_issue_closed_after_now_is_still_open():
    issue = IssueModel(
        id="later",
        title=None,
        status="closed",
        created_at=NOW - timedelta(days=10),
        closed_at=NOW + timedelta(hours=1),
    )
    assert [b.count for b in build_age_histogram([issue], NOW)] == [0, 1, 0, 0]
