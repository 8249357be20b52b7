# session_aggregator.py
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from config import MERGE_GAP_MS
from models import Category, FocusSample, Session, SessionEvent, SessionEventType

logger = logging.getLogger(__name__)

Labeler = Callable[[FocusSample], Category]


class SessionAggregator:
    """
    Turns the focus-sample stream into sessions.
    Holds at most one open session; closed sessions are handed to the caller.
    """

    def __init__(self, merge_gap_ms: int = MERGE_GAP_MS, labeler: Optional[Labeler] = None):
        self.merge_gap = timedelta(milliseconds=merge_gap_ms)
        self.labeler = labeler
        self.current: Optional[Session] = None

        # start of the uninterrupted run of the current app, across title changes
        self._streak_start: Optional[datetime] = None

    def ingest(self, sample: FocusSample) -> List[SessionEvent]:
        """
        Returns the events caused by one sample:
        [] for a dropped sample, [EXTENDED] on merge, [OPENED] or [CLOSED, OPENED] on a split.
        """
        if not sample.is_valid:
            logger.warning(f"Dropping malformed sample: app={sample.app!r} title={sample.title!r}")
            return []

        if not self._should_start_new_session(sample):
            self._update_current_session(sample)
            logger.debug(f"Extended: {self.current.app} - {self.current.title}")
            return [SessionEvent(SessionEventType.EXTENDED, self.current.snapshot())]

        events = []
        previous = self.current
        if previous is not None:
            events.append(SessionEvent(SessionEventType.CLOSED, self._end_current_session()))

        self._start_new_session(sample, previous)
        events.append(SessionEvent(SessionEventType.OPENED, self.current.snapshot()))
        return events

    def gap(self, timestamp: datetime) -> timedelta:
        """Time since the open session was last extended; never negative."""
        if self.current is None:
            return timedelta(0)
        return max(timedelta(0), timestamp - self.current.end)

    def _should_start_new_session(self, sample: FocusSample) -> bool:
        if self.current is None:
            return True
        if self.current.app != sample.app or self.current.title != sample.title:
            return True
        return self.gap(sample.timestamp) > self.merge_gap

    def _start_new_session(self, sample: FocusSample, previous: Optional[Session]):
        timestamp = sample.timestamp
        continues_app = (
            previous is not None
            and previous.app == sample.app
            and self._streak_start is not None
            and max(timedelta(0), timestamp - previous.end) <= self.merge_gap
        )
        if not continues_app:
            self._streak_start = timestamp

        self.current = Session(
            app=sample.app,
            title=sample.title,
            url=sample.url,
            start=timestamp,
            end=timestamp,
        )
        if self.labeler is not None:
            self.current.category = self.labeler(sample)
        logger.info(f"Opened session: {sample.app} - {sample.title} ({self.current.category.value})")

    def _update_current_session(self, sample: FocusSample):
        session = self.current
        # a clock that steps backwards never shrinks the session
        if sample.timestamp > session.end:
            session.end = sample.timestamp
        if sample.url and not session.url:
            session.url = sample.url

    def _end_current_session(self) -> Session:
        closed = self.current
        self.current = None
        logger.info(f"Closed session: {closed.app} - {closed.title} "
                    f"({closed.duration_ms / 1000:.1f}s, {closed.category.value})")
        return closed

    def close(self) -> List[SessionEvent]:
        """Force-close the open session. A no-op when nothing is open."""
        if self.current is None:
            return []
        self._streak_start = None
        return [SessionEvent(SessionEventType.CLOSED, self._end_current_session())]

    def relabel(self, category: Category):
        """Replace the category of the open session (after a user correction)."""
        if self.current is not None:
            self.current.category = category

    def app_streak_ms(self, app: str, at: datetime) -> int:
        """How long `app` has been continuously focused, 0 if it is not the open app."""
        if self.current is None or self.current.app != app or self._streak_start is None:
            return 0
        return max(0, int((at - self._streak_start).total_seconds() * 1000))
