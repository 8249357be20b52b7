# database/models.py
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, JSON
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class ActivityRecordDB(Base):
    """Finalized sessions (one row per activity record)"""
    __tablename__ = 'activities'

    id = Column(String(32), primary_key=True)
    app = Column(String(255), nullable=False, index=True)
    title = Column(Text, default="")
    url = Column(Text)
    category = Column(String(20), nullable=False, index=True)  # productive / break / distracted

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    duration_ms = Column(Integer, default=0)
    manual = Column(Boolean, default=False)


class LearnedStateDB(Base):
    """Learned-state export, kept as a single JSON row"""
    __tablename__ = 'learned_state'

    id = Column(Integer, primary_key=True)
    user_patterns = Column(JSON)  # {key: {category: score}}
    category_history = Column(JSON)  # [{app, category, timestamp}]
    manual_categories = Column(JSON)  # {app: category}
    auto_promoted = Column(JSON)  # [app]

    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
