# database/database_manager.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any, Iterable, Tuple
import logging
from .config import DatabaseConfig
from .models import Base, ActivityRecordDB, LearnedStateDB
from models import ActivityRecord, Category

logger = logging.getLogger(__name__)

STATE_ROW_ID = 1


class DatabaseManager:
    """Manages database operations for activity records and learned state"""

    def __init__(self, database_url: str = "sqlite:///focus_sessions.db", **engine_kwargs):
        if not engine_kwargs:
            engine_kwargs = DatabaseConfig.get_engine_kwargs(database_url)
        self.engine = create_engine(database_url, **engine_kwargs)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine)

    def get_session(self) -> Session:
        return self.SessionLocal()

    def save_activity(self, record: ActivityRecord) -> str:
        """Save (or overwrite) a single activity record"""
        return self.save_activities([record])[0]

    def save_activities(self, records: Iterable[ActivityRecord]) -> List[str]:
        """Save a batch of activity records in one transaction"""
        records = list(records)
        with self.get_session() as db_session:
            try:
                for record in records:
                    db_session.merge(self._convert_record_to_db(record))
                db_session.commit()
                return [record.id for record in records]
            except Exception as e:
                db_session.rollback()
                logger.error(f"Error saving activities: {e}")
                raise

    def update_activity_category(self, record_id: str, category: Category) -> bool:
        """Change the category of a stored activity"""
        with self.get_session() as db_session:
            try:
                row = db_session.query(ActivityRecordDB).filter_by(id=record_id).first()
                if row is None:
                    return False
                row.category = Category.from_value(category).value
                db_session.commit()
                return True
            except Exception as e:
                db_session.rollback()
                logger.error(f"Error updating activity {record_id}: {e}")
                raise

    def get_activities(self, since: Optional[datetime] = None,
                       until: Optional[datetime] = None) -> List[ActivityRecord]:
        """Get activities ordered by start time, optionally bounded"""
        with self.get_session() as db_session:
            query = db_session.query(ActivityRecordDB)
            if since is not None:
                query = query.filter(ActivityRecordDB.start_time >= since)
            if until is not None:
                query = query.filter(ActivityRecordDB.start_time < until)
            rows = query.order_by(ActivityRecordDB.start_time).all()
            return [self._convert_db_to_record(row) for row in rows]

    def get_recent_activities(self, hours: int = 24) -> List[ActivityRecord]:
        return self.get_activities(since=datetime.now() - timedelta(hours=hours))

    def get_activities_by_period(self, period: str, offset: int = 0) -> List[ActivityRecord]:
        """Get activities for a 'day', 'week' or 'month', `offset` periods back"""
        start_date, end_date = self._calculate_period_range(period, offset)
        return self.get_activities(since=start_date, until=end_date)

    def cleanup_old_data(self, days: int = 7, now: Optional[datetime] = None) -> int:
        """Remove activities whose start is at or beyond the retention boundary"""
        with self.get_session() as db_session:
            try:
                cutoff_time = (now or datetime.now()) - timedelta(days=days)
                deleted = db_session.query(ActivityRecordDB).filter(
                    ActivityRecordDB.start_time <= cutoff_time
                ).delete()
                db_session.commit()
                if deleted:
                    logger.info(f"Cleaned up {deleted} activities older than {days} days")
                return deleted
            except Exception as e:
                db_session.rollback()
                logger.error(f"Error during cleanup: {e}")
                raise

    def save_learned_state(self, state: Dict[str, Any]):
        """Store the engine's learned-state export, replacing the previous one"""
        with self.get_session() as db_session:
            try:
                row = db_session.get(LearnedStateDB, STATE_ROW_ID)
                if row is None:
                    row = LearnedStateDB(id=STATE_ROW_ID)
                    db_session.add(row)
                row.user_patterns = state.get("userPatterns", {})
                row.category_history = state.get("categoryHistory", [])
                row.manual_categories = state.get("manualCategories", {})
                row.auto_promoted = state.get("autoPromoted", [])
                row.updated_at = datetime.now()
                db_session.commit()
            except Exception as e:
                db_session.rollback()
                logger.error(f"Error saving learned state: {e}")
                raise

    def load_learned_state(self) -> Optional[Dict[str, Any]]:
        with self.get_session() as db_session:
            row = db_session.get(LearnedStateDB, STATE_ROW_ID)
            if row is None:
                return None
            return {
                "userPatterns": row.user_patterns or {},
                "categoryHistory": row.category_history or [],
                "manualCategories": row.manual_categories or {},
                "autoPromoted": row.auto_promoted or [],
            }

    def _calculate_period_range(self, period: str, offset: int) -> Tuple[datetime, datetime]:
        """Calculate start and end dates for a period"""
        now = datetime.now()

        if period == 'day':
            start_date = now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=offset)
            end_date = start_date + timedelta(days=1)
        elif period == 'week':
            days_since_monday = now.weekday()
            start_date = now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(
                days=days_since_monday + (offset * 7)
            )
            end_date = start_date + timedelta(days=7)
        elif period == 'month':
            start_date = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
            for _ in range(offset):
                start_date = (start_date - timedelta(days=1)).replace(day=1)

            if start_date.month == 12:
                end_date = start_date.replace(year=start_date.year + 1, month=1)
            else:
                end_date = start_date.replace(month=start_date.month + 1)
        else:
            raise ValueError("Period must be 'day', 'week', or 'month'")

        return start_date, end_date

    def _convert_record_to_db(self, record: ActivityRecord) -> ActivityRecordDB:
        return ActivityRecordDB(
            id=record.id,
            app=record.app,
            title=record.title,
            url=record.url,
            category=record.category.value,
            start_time=record.start,
            end_time=record.end,
            duration_ms=record.duration_ms,
            manual=record.manual,
        )

    def _convert_db_to_record(self, row: ActivityRecordDB) -> ActivityRecord:
        return ActivityRecord(
            id=row.id,
            app=row.app,
            title=row.title or "",
            url=row.url,
            category=Category.from_value(row.category),
            start=row.start_time,
            end=row.end_time,
            manual=bool(row.manual),
        )
