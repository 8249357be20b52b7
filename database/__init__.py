# database/__init__.py
"""Database package for activity and learned-state persistence."""

from .config import DatabaseConfig
from .database_manager import DatabaseManager
from .models import Base, ActivityRecordDB, LearnedStateDB

__all__ = ['DatabaseConfig', 'DatabaseManager', 'Base', 'ActivityRecordDB', 'LearnedStateDB']
