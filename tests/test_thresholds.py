from dataclasses import replace
from datetime import datetime, timedelta

import pytest
import pytz

from flow_app.analytics.metrics.thresholds import (
    calculate_thresholds_from_percentiles,
    cycle_time_sample,
    effective_thresholds,
    suggest_threshold_config,
    validate_threshold_config,
)
from flow_app.core.config import DEFAULT_THRESHOLDS
from flow_app.core.models import IssueModel

NOW = pytz.UTC.localize(datetime(2024, 6, 15, 12, 0, 0))
START = NOW - timedelta(days=30)


def _closed(issue_id, cycle_hours, *, use_updated=False):
    closed = START + timedelta(hours=cycle_hours)
    return IssueModel(
        id=issue_id,
        title=None,
        status="closed",
        created_at=START,
        closed_at=None if use_updated else closed,
        updated_at=closed if use_updated else None,
    )


def _history(cycles):
    return [_closed(f"H-{i}", hours) for i, hours in enumerate(cycles)]


def test_thresholds_from_closed_cycle_times():
    issues = _history([10, 20, 30, 40, 50])
    result = calculate_thresholds_from_percentiles(issues, 0.75, 0.95, NOW)
    assert result.warning_hours == pytest.approx(40)
    assert result.critical_hours == pytest.approx(48)


def test_open_issues_do_not_feed_the_sample():
    issues = _history([10, 20, 30, 40, 50]) + [
        IssueModel(id="open", title=None, status="open", created_at=START),
        IssueModel(id="gone", title=None, status="tombstone", created_at=START),
    ]
    result = calculate_thresholds_from_percentiles(issues, 0.75, 0.95, NOW)
    assert result.warning_hours == pytest.approx(40)


def test_updated_at_fallback_and_missing_close_time():
    issues = [
        _closed("A", 10, use_updated=True),
        _closed("B", 30),
        IssueModel(id="C", title=None, status="closed", created_at=START),
    ]
    assert sorted(cycle_time_sample(issues, NOW)) == pytest.approx([10, 30])


def test_closes_after_now_still_feed_the_sample():
    issues = _history([10, 20]) + [_closed("late", 24 * 40)]
    assert sorted(cycle_time_sample(issues, NOW)) == pytest.approx([10, 20, 960])


def test_empty_sample_falls_back_to_defaults():
    only_open = [IssueModel(id="o", title=None, status="open", created_at=START)]
    for issues in ([], only_open):
        result = calculate_thresholds_from_percentiles(issues, 0.85, 0.95, NOW)
        assert result.warning_hours == 4
        assert result.critical_hours == 8


def test_effective_thresholds_manual_and_auto():
    issues = _history([10, 20, 30, 40, 50])
    manual = replace(DEFAULT_THRESHOLDS, warning_threshold=1, warning_unit="days")
    assert effective_thresholds(manual, issues, NOW) == (24.0, 8.0)
    auto = replace(
        DEFAULT_THRESHOLDS,
        use_auto_calculation=True,
        auto_calc_percentile_warning=0.75,
        auto_calc_percentile_critical=0.95,
    )
    warning, critical = effective_thresholds(auto, issues, NOW)
    assert (warning, critical) == (pytest.approx(40), pytest.approx(48))


def test_suggest_threshold_config_picks_display_units():
    long_history = _history([10, 20, 30, 40, 50])
    config = replace(DEFAULT_THRESHOLDS, auto_calc_percentile_warning=0.75)
    suggested = suggest_threshold_config(config, long_history, NOW)
    # 40h -> 1.7 days, P95 = 48h -> 2.0 days
    assert (suggested.warning_threshold, suggested.warning_unit) == (1.7, "days")
    assert (suggested.critical_threshold, suggested.critical_unit) == (2.0, "days")
    assert suggested.auto_calc_percentile_warning == 0.75

    short_history = _history([2, 4, 6, 8, 10])
    config = replace(DEFAULT_THRESHOLDS, auto_calc_percentile_warning=0.5, auto_calc_percentile_critical=0.75)
    suggested = suggest_threshold_config(config, short_history, NOW)
    assert (suggested.warning_threshold, suggested.warning_unit) == (6, "hours")
    assert (suggested.critical_threshold, suggested.critical_unit) == (8, "hours")


def test_validate_default_config_is_clean():
    assert validate_threshold_config(DEFAULT_THRESHOLDS) == []


def test_validate_reports_inverted_thresholds():
    config = replace(DEFAULT_THRESHOLDS, warning_threshold=2, warning_unit="days", critical_threshold=8)
    problems = validate_threshold_config(config)
    assert len(problems) == 1
    assert "below warning threshold" in problems[0]


def test_validate_reports_bad_values():
    config = replace(
        DEFAULT_THRESHOLDS,
        warning_threshold=0,
        critical_unit="weeks",
        auto_calc_percentile_warning=0.99,
        auto_calc_percentile_critical=1.5,
    )
    problems = validate_threshold_config(config)
    assert any("Warning threshold must be greater than zero" in p for p in problems)
    assert any("Critical unit" in p for p in problems)
    assert any("Critical percentile must be within" in p for p in problems)


def test_validate_reports_inverted_percentiles():
    config = replace(DEFAULT_THRESHOLDS, auto_calc_percentile_warning=0.95, auto_calc_percentile_critical=0.85)
    assert validate_threshold_config(config) == ["Critical percentile is below warning percentile"]
