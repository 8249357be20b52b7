# models.py
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum, auto
from typing import Dict, Optional, Any


class Category(Enum):
    """Productivity label attached to a session. Declaration order is the tie-break priority."""
    PRODUCTIVE = "productive"
    BREAK = "break"
    DISTRACTED = "distracted"

    @classmethod
    def from_value(cls, value) -> "Category":
        """Parse a persisted label ("productive", "Break", Category.BREAK ...)."""
        if isinstance(value, Category):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown category: {value!r}")


# Tie-break priority when two categories score the same
CATEGORY_ORDER = (Category.PRODUCTIVE, Category.BREAK, Category.DISTRACTED)


@dataclass
class FocusSample:
    """One observation of the focused window."""
    app: Optional[str]
    title: Optional[str]
    timestamp: datetime
    url: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        # an empty title (desktop, shell windows) is still a sample
        return bool(self.app) and self.title is not None and self.timestamp is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FocusSample":
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            app=data.get("app"),
            title=data.get("title"),
            url=data.get("url"),
            timestamp=timestamp,
        )


@dataclass
class Session:
    """A contiguous span attributed to one (app, title) pair."""
    app: str
    title: str
    start: datetime
    end: datetime
    url: Optional[str] = None
    category: Category = Category.BREAK
    manual: bool = False

    @property
    def duration_ms(self) -> int:
        return int((self.end - self.start).total_seconds() * 1000)

    def snapshot(self) -> "Session":
        return replace(self)


class SessionEventType(Enum):
    OPENED = auto()
    EXTENDED = auto()
    CLOSED = auto()


@dataclass
class SessionEvent:
    type: SessionEventType
    session: Session


@dataclass
class ActivityRecord:
    """A finalized session as handed to persistence and UI."""
    app: str
    title: str
    category: Category
    start: datetime
    end: datetime
    manual: bool = False
    url: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def duration_ms(self) -> int:
        return int((self.end - self.start).total_seconds() * 1000)

    @classmethod
    def from_session(cls, session: Session) -> "ActivityRecord":
        return cls(
            app=session.app,
            title=session.title,
            url=session.url,
            category=session.category,
            start=session.start,
            end=session.end,
            manual=session.manual,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "app": self.app,
            "title": self.title,
            "url": self.url,
            "category": self.category.value,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration": self.duration_ms,
            "manual": self.manual,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityRecord":
        kwargs = dict(
            app=data["app"],
            title=data.get("title", ""),
            url=data.get("url"),
            category=Category.from_value(data["category"]),
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(data["end"]),
            manual=bool(data.get("manual", False)),
        )
        if data.get("id"):
            kwargs["id"] = data["id"]
        return cls(**kwargs)


@dataclass
class CategoryHistoryEntry:
    app: str
    category: Category
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app": self.app,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategoryHistoryEntry":
        return cls(
            app=str(data["app"]),
            category=Category.from_value(data["category"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class CategorizationResult:
    """Outcome of one categorization, with where it came from."""
    category: Category
    source: str  # "manual", "learned", "patterns" or "default"
    scores: Dict[Category, float] = field(default_factory=dict)
    confidence: float = 0.0
