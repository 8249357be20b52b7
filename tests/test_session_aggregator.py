"""Tests for merging focus samples into sessions."""
from __future__ import annotations

from datetime import timedelta

from models import Category, FocusSample, SessionEventType
from session_aggregator import SessionAggregator


def _types(events):
    return [event.type for event in events]


def test_first_sample_opens(sample_at):
    aggregator = SessionAggregator()
    events = aggregator.ingest(sample_at("Code", "main.py"))
    assert _types(events) == [SessionEventType.OPENED]
    assert aggregator.current.start == aggregator.current.end


def test_merge_within_gap(sample_at):
    aggregator = SessionAggregator()
    aggregator.ingest(sample_at("Code", "main.py", 0))
    events = aggregator.ingest(sample_at("Code", "main.py", 5))
    assert _types(events) == [SessionEventType.EXTENDED]
    assert aggregator.current.duration_ms == 5000
    assert events[0].session.end == aggregator.current.end


def test_split_on_large_gap(sample_at):
    aggregator = SessionAggregator()
    aggregator.ingest(sample_at("Code", "main.py", 0))
    events = aggregator.ingest(sample_at("Code", "main.py", 5.001))
    assert _types(events) == [SessionEventType.CLOSED, SessionEventType.OPENED]
    closed, opened = events[0].session, events[1].session
    assert closed.duration_ms == 0
    assert opened.start > closed.end


def test_split_on_title_change(sample_at):
    aggregator = SessionAggregator()
    aggregator.ingest(sample_at("Code", "main.py", 0))
    aggregator.ingest(sample_at("Code", "main.py", 2))
    events = aggregator.ingest(sample_at("Code", "utils.py", 3))
    assert _types(events) == [SessionEventType.CLOSED, SessionEventType.OPENED]
    assert events[0].session.title == "main.py"
    assert events[0].session.duration_ms == 2000
    assert events[1].session.title == "utils.py"


def test_no_overlap_on_one_track(sample_at):
    aggregator = SessionAggregator()
    offsets = [0, 2, 4, 20, 22, 40, 41, 60]
    closed = []
    for seconds in offsets:
        closed += [e.session for e in aggregator.ingest(sample_at("Code", "main.py", seconds))
                   if e.type == SessionEventType.CLOSED]
    closed += [e.session for e in aggregator.close()]

    assert len(closed) == 4
    for earlier, later in zip(closed, closed[1:]):
        assert earlier.end <= later.start


def test_malformed_samples_are_dropped(sample_at, now):
    aggregator = SessionAggregator()
    aggregator.ingest(sample_at("Code", "main.py"))
    assert aggregator.ingest(FocusSample(app="", title="x", timestamp=now)) == []
    assert aggregator.ingest(FocusSample(app="Code", title=None, timestamp=now)) == []
    assert aggregator.ingest(FocusSample(app="Code", title="main.py", timestamp=None)) == []
    assert aggregator.current.title == "main.py"


def test_empty_title_is_a_sample(now):
    aggregator = SessionAggregator()
    events = aggregator.ingest(FocusSample(app="Explorer", title="", timestamp=now))
    assert _types(events) == [SessionEventType.OPENED]
    events = aggregator.ingest(FocusSample(app="Explorer", title="", timestamp=now + timedelta(seconds=3)))
    assert _types(events) == [SessionEventType.EXTENDED]

    closed = aggregator.close()[0].session
    assert closed.title == ""
    assert closed.duration_ms == 3000


def test_clock_stepping_back_never_shrinks(sample_at):
    aggregator = SessionAggregator()
    aggregator.ingest(sample_at("Code", "main.py", 0))
    aggregator.ingest(sample_at("Code", "main.py", 4))
    events = aggregator.ingest(sample_at("Code", "main.py", 1))
    assert _types(events) == [SessionEventType.EXTENDED]
    assert aggregator.current.duration_ms == 4000
    assert aggregator.gap(aggregator.current.start) == timedelta(0)


def test_close_is_idempotent(sample_at):
    aggregator = SessionAggregator()
    assert aggregator.close() == []
    aggregator.ingest(sample_at("Code", "main.py"))
    assert _types(aggregator.close()) == [SessionEventType.CLOSED]
    assert aggregator.close() == []
    assert aggregator.current is None


def test_closed_event_carries_final_session(sample_at):
    aggregator = SessionAggregator()
    opened = aggregator.ingest(sample_at("Code", "main.py", 0))[0].session
    aggregator.ingest(sample_at("Code", "main.py", 3))
    closed = aggregator.close()[0].session
    # the opened snapshot is not mutated by later extensions
    assert opened.end == opened.start
    assert closed.duration_ms == 3000


def test_url_is_kept_from_first_sample_that_has_one(sample_at):
    aggregator = SessionAggregator()
    aggregator.ingest(sample_at("Chrome", "Docs", 0))
    aggregator.ingest(sample_at("Chrome", "Docs", 1, url="docs.python.org"))
    aggregator.ingest(sample_at("Chrome", "Docs", 2, url="other.org"))
    assert aggregator.current.url == "docs.python.org"


def test_labeler_sets_category_on_open(sample_at):
    calls = []

    def labeler(sample):
        calls.append(sample.title)
        return Category.PRODUCTIVE

    aggregator = SessionAggregator(labeler=labeler)
    aggregator.ingest(sample_at("Code", "main.py", 0))
    aggregator.ingest(sample_at("Code", "main.py", 1))
    assert calls == ["main.py"]
    assert aggregator.current.category == Category.PRODUCTIVE
    aggregator.relabel(Category.DISTRACTED)
    assert aggregator.current.category == Category.DISTRACTED


def test_app_streak_spans_title_changes(sample_at, now):
    aggregator = SessionAggregator()
    aggregator.ingest(sample_at("Code", "main.py", 0))
    aggregator.ingest(sample_at("Code", "utils.py", 3))
    at = now + timedelta(seconds=4)
    assert aggregator.app_streak_ms("Code", at) == 4000
    assert aggregator.app_streak_ms("Chrome", at) == 0

    # a long pause restarts the streak
    aggregator.ingest(sample_at("Code", "main.py", 60))
    assert aggregator.app_streak_ms("Code", now + timedelta(seconds=61)) == 1000


def test_custom_merge_gap(sample_at):
    aggregator = SessionAggregator(merge_gap_ms=1000)
    aggregator.ingest(sample_at("Code", "main.py", 0))
    events = aggregator.ingest(sample_at("Code", "main.py", 2))
    assert _types(events) == [SessionEventType.CLOSED, SessionEventType.OPENED]
