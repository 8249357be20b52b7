"""Tests for activity summaries."""
from __future__ import annotations

from datetime import date, datetime, timedelta

from analytics import SessionAnalytics
from models import ActivityRecord, Category

DAY = datetime(2024, 1, 10, 9, 0)


def _record(app, category, start, seconds):
    return ActivityRecord(app=app, title="", category=category, start=start,
                          end=start + timedelta(seconds=seconds))


def _records():
    return [
        _record("Code", Category.PRODUCTIVE, DAY, 1800),
        _record("Code", Category.PRODUCTIVE, DAY + timedelta(hours=1), 1800),
        _record("Slack", Category.BREAK, DAY + timedelta(hours=2), 600),
        _record("YouTube", Category.DISTRACTED, DAY + timedelta(hours=3), 1200),
        _record("Code", Category.PRODUCTIVE, DAY - timedelta(days=1), 3600),
    ]


def test_time_by_app_sorted():
    usage = SessionAnalytics(_records()).get_time_by_app()
    assert list(usage) == ["Code", "YouTube", "Slack"]
    assert usage["Code"] == 7200


def test_productivity_summary():
    since = datetime(2024, 1, 10)
    summary = SessionAnalytics(_records()).get_productivity_summary(since=since)
    assert summary["total_time"] == 5400
    assert summary["times"][Category.PRODUCTIVE] == 3600
    assert round(summary["percentages"][Category.BREAK], 2) == round(600 / 5400 * 100, 2)
    assert summary["details"][Category.DISTRACTED] == {"YouTube": 1200}


def test_empty_summary():
    summary = SessionAnalytics([]).get_productivity_summary()
    assert summary["total_time"] == 0
    assert all(value == 0.0 for value in summary["percentages"].values())
    assert SessionAnalytics([]).get_most_used_app() is None


def test_most_used_app_window():
    analytics = SessionAnalytics(_records())
    until = datetime(2024, 1, 10)
    assert analytics.get_most_used_app(until=until) == "Code"
    assert analytics.get_most_used_app(since=DAY + timedelta(hours=2)) == "YouTube"


def test_daily_summary():
    days = SessionAnalytics(_records()).get_daily_summary(days=3, today=date(2024, 1, 10))
    assert [d["date"] for d in days] == [date(2024, 1, 10), date(2024, 1, 9), date(2024, 1, 8)]
    assert days[0]["productive_time"] == 3600
    assert days[0]["distracted_time"] == 1200
    assert days[1]["total_time"] == 3600
    assert days[2]["total_time"] == 0
