# engine.py
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from categorizer import Categorizer
from config import EngineConfig
from contextual_rules import ContextualRuleEngine
from learning_store import UserLearningStore
from models import (ActivityRecord, Category, FocusSample, Session, SessionEvent,
                    SessionEventType)
from pattern_scorer import PatternScorer, build_tables
from session_aggregator import SessionAggregator
from similarity import SimilarityMatcher

logger = logging.getLogger(__name__)


class ActivityEngine:
    """
    Session aggregation + categorization engine.

    One instance is owned by the host and passed to whatever feeds samples or
    edits activities. The engine does no I/O; it is not thread-safe on its own
    (see tracker.ActivityTracker for a serialized host).
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.config = config or EngineConfig()
        self.clock = clock

        self.learning_store = UserLearningStore(self.config)
        self.rules = ContextualRuleEngine(self.config, long_session=self._is_long_session)
        self.categorizer = Categorizer(
            self.config,
            learning_store=self.learning_store,
            scorer=PatternScorer(build_tables(self.config.patterns)),
            rules=self.rules,
            clock=clock,
        )
        self.matcher = SimilarityMatcher(self.config.suggestion_threshold, self.config.suggestion_limit)
        self.aggregator = SessionAggregator(self.config.merge_gap_ms, labeler=self._label)

        self.activity_log: List[ActivityRecord] = []
        # records created since the host last collected them
        self._new_records: List[ActivityRecord] = []

    # --------- ingestion ---------

    def _label(self, sample: FocusSample) -> Category:
        return self.categorizer.categorize_and_maybe_learn(
            sample.app, sample.title, sample.url, at=sample.timestamp
        )

    def _is_long_session(self, app: str, at: datetime) -> bool:
        return self.aggregator.app_streak_ms(app, at) > self.config.long_session_threshold_ms

    def ingest(self, sample: FocusSample) -> List[SessionEvent]:
        events = self.aggregator.ingest(sample)
        self._handle_closed(events, sample.timestamp if sample.is_valid else None)
        return events

    def flush(self) -> List[SessionEvent]:
        """Close the open session (autosave/shutdown). Safe to call repeatedly."""
        events = self.aggregator.close()
        self._handle_closed(events, None)
        return events

    def _handle_closed(self, events: List[SessionEvent], now: Optional[datetime]):
        closed = [e.session for e in events if e.type == SessionEventType.CLOSED]
        if not closed:
            return
        for session in closed:
            record = ActivityRecord.from_session(session)
            self.activity_log.append(record)
            self._new_records.append(record)
        self.apply_retention(now or closed[-1].end)

    def apply_retention(self, now: Optional[datetime] = None) -> int:
        """Drop activities whose start is at or beyond the retention boundary. Returns how many."""
        now = now or self.clock()
        cutoff = now - timedelta(days=self.config.retention_days)
        kept = [record for record in self.activity_log if record.start > cutoff]
        removed = len(self.activity_log) - len(kept)
        if removed:
            logger.info(f"Retention removed {removed} activities older than {self.config.retention_days} days")
        self.activity_log = kept
        return removed

    # --------- categorization ---------

    def categorize(self, app: str, title: str = "", url: Optional[str] = "") -> Category:
        return self.categorizer.categorize(app, title, url)

    def categorize_and_maybe_learn(self, app: str, title: str = "", url: Optional[str] = "") -> Category:
        return self.categorizer.categorize_and_maybe_learn(app, title, url)

    def learn_from_user(self, app: str, actual, predicted) -> bool:
        """Record a correction and re-check the open session if it belongs to the same app."""
        learned = self.categorizer.learn_from_user(app, actual, predicted)
        current = self.aggregator.current
        if learned and current is not None and current.app == app:
            category = self.categorizer.categorize(current.app, current.title, current.url)
            if category != current.category:
                logger.info(f"Re-categorized open session {current.app}: "
                            f"{current.category.value} -> {category.value}")
                self.aggregator.relabel(category)
        return learned

    def correct_activity(self, record_id: str, category) -> ActivityRecord:
        """The user changed an activity's category in the UI."""
        category = Category.from_value(category)
        for record in self.activity_log:
            if record.id == record_id:
                if record.category != category:
                    self.learn_from_user(record.app, category, record.category)
                    record.category = category
                return record
        raise KeyError(record_id)

    def add_manual_activity(self, app: str, title: str, category, start: datetime,
                            duration_ms: int) -> ActivityRecord:
        if duration_ms < 0:
            raise ValueError(f"Negative duration: {duration_ms}")
        record = ActivityRecord(
            app=app,
            title=title or "",
            category=Category.from_value(category),
            start=start,
            end=start + timedelta(milliseconds=duration_ms),
            manual=True,
        )
        self.activity_log.append(record)
        self._new_records.append(record)
        self.apply_retention()
        logger.info(f"Added manual activity {app} ({record.category.value}, {duration_ms} ms)")
        return record

    def suggest(self, app: str) -> List[Dict]:
        return self.matcher.suggest(app, self.learning_store.history_entries())

    # --------- state ---------

    def current_session(self) -> Optional[Session]:
        current = self.aggregator.current
        return current.snapshot() if current is not None else None

    def activities(self) -> List[ActivityRecord]:
        return list(self.activity_log)

    def pop_new_records(self) -> List[ActivityRecord]:
        """Records closed or added since the last call, for the host to persist."""
        records, self._new_records = self._new_records, []
        return records

    def export_state(self) -> Dict:
        state = self.learning_store.export()
        state["manualCategories"] = {
            app: category.value for app, category in self.categorizer.manual_categories.items()
        }
        state["autoPromoted"] = sorted(self.categorizer.auto_promoted)
        return state

    def import_state(self, data: Dict):
        self.learning_store.import_state(data)
        if "manualCategories" in data:
            manual = {}
            for app, value in (data.get("manualCategories") or {}).items():
                try:
                    manual[app] = Category.from_value(value)
                except ValueError:
                    logger.warning(f"Skipping manual category {app}={value!r}")
            self.categorizer.manual_categories = manual
            self.categorizer.auto_promoted = {
                app for app in data.get("autoPromoted") or [] if app in manual
            }
