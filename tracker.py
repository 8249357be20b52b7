# tracker.py
import threading
import logging
from typing import Callable, List, Optional

from engine import ActivityEngine
from models import ActivityRecord, FocusSample, SessionEvent
from database.database_manager import DatabaseManager

logger = logging.getLogger(__name__)

SampleSource = Callable[[], Optional[FocusSample]]


class ActivityTracker:
    """
    Host around one ActivityEngine.

    Every call into the engine goes through one lock, so polling, autosave and UI
    corrections never interleave. Persistence failures are logged and retried on
    the next autosave; the engine state is not affected by them.
    """

    def __init__(self, engine: Optional[ActivityEngine] = None,
                 sample_source: Optional[SampleSource] = None,
                 db_manager: Optional[DatabaseManager] = None,
                 interval: float = 5.0, autosave_every: int = 12):
        self.engine = engine or ActivityEngine()
        self.sample_source = sample_source
        self.db_manager = db_manager
        self.interval = interval
        self.autosave_every = max(1, autosave_every)

        self.lock = threading.Lock()
        self.is_tracking = False
        self.tracking_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._polls = 0

        # closed records not yet written to the database
        self.pending: List[ActivityRecord] = []

    # --------- engine entry points (serialized) ---------

    def ingest(self, sample: FocusSample) -> List[SessionEvent]:
        with self.lock:
            events = self.engine.ingest(sample)
            self._collect()
            return events

    def learn_from_user(self, app: str, actual, predicted) -> bool:
        with self.lock:
            return self.engine.learn_from_user(app, actual, predicted)

    def correct_activity(self, record_id: str, category) -> ActivityRecord:
        with self.lock:
            record = self.engine.correct_activity(record_id, category)
            if self.db_manager is not None:
                try:
                    if not self.db_manager.update_activity_category(record_id, record.category):
                        self._queue(record)
                except Exception as e:
                    logger.error(f"Could not store correction for {record_id}: {e}")
                    self._queue(record)
            return record

    def add_manual_activity(self, *args, **kwargs) -> ActivityRecord:
        with self.lock:
            record = self.engine.add_manual_activity(*args, **kwargs)
            self._collect()
            return record

    def flush(self) -> List[SessionEvent]:
        with self.lock:
            events = self.engine.flush()
            self._collect()
            return events

    def _queue(self, record: ActivityRecord):
        if all(r.id != record.id for r in self.pending):
            self.pending.append(record)

    def _collect(self):
        for record in self.engine.pop_new_records():
            self._queue(record)

    # --------- persistence ---------

    def load(self) -> bool:
        """Restore learned state from the database."""
        if self.db_manager is None:
            return False
        try:
            state = self.db_manager.load_learned_state()
        except Exception as e:
            logger.error(f"Could not load learned state: {e}")
            return False
        if not state:
            return False
        with self.lock:
            self.engine.import_state(state)
        return True

    def save(self) -> bool:
        """Write queued activities and the learned state. Returns False if anything failed."""
        if self.db_manager is None:
            return True
        with self.lock:
            batch = list(self.pending)
            saved = {r.id: r.category for r in batch}
            state = self.engine.export_state()
            retention_days = self.engine.config.retention_days

        try:
            if batch:
                self.db_manager.save_activities(batch)
            self.db_manager.save_learned_state(state)
            self.db_manager.cleanup_old_data(retention_days)
        except Exception as e:
            logger.error(f"Autosave failed, will retry: {e}")
            return False

        with self.lock:
            # a record corrected while saving stays queued
            self.pending = [r for r in self.pending if saved.get(r.id) != r.category]
        if batch:
            logger.info(f"Saved {len(batch)} activities")
        return True

    # --------- polling loop ---------

    def poll_once(self) -> List[SessionEvent]:
        sample = None
        try:
            sample = self.sample_source() if self.sample_source else None
        except Exception as e:
            logger.error(f"Error reading focused window: {e}")

        events = self.ingest(sample) if sample is not None else []
        self._polls += 1
        if self._polls % self.autosave_every == 0:
            self.save()
        return events

    def _track_loop(self):
        """The internal loop that runs on a separate thread."""
        logger.info("Activity tracking started.")
        while not self._stop_event.is_set():
            self.poll_once()
            self._stop_event.wait(self.interval)
        logger.info("Activity tracking stopped.")

    def start(self):
        """Starts polling in a background thread."""
        if self.is_tracking:
            logger.warning("Tracking is already running.")
            return
        if self.sample_source is None:
            raise RuntimeError("No sample source configured")

        self.is_tracking = True
        self._stop_event.clear()
        self.tracking_thread = threading.Thread(target=self._track_loop, daemon=True)
        self.tracking_thread.start()

    def stop(self, timeout: float = 5.0):
        """Stops polling, closes the open session and saves."""
        if self.is_tracking:
            self.is_tracking = False
            self._stop_event.set()
            if self.tracking_thread and self.tracking_thread.is_alive():
                self.tracking_thread.join(timeout=timeout)
                if self.tracking_thread.is_alive():
                    logger.warning("Tracking thread did not stop gracefully")
            self.tracking_thread = None

        self.flush()
        self.save()

