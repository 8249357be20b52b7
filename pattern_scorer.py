# pattern_scorer.py
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Mapping, Sequence

from config import DEFAULT_PATTERNS
from models import Category, CATEGORY_ORDER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternEntry:
    """A group of keywords sharing one weight."""
    keywords: FrozenSet[str]
    weight: float

    @classmethod
    def from_dict(cls, data: Mapping) -> "PatternEntry":
        keywords = frozenset(str(k).lower() for k in data.get("keywords", []) if str(k).strip())
        return cls(keywords=keywords, weight=float(data.get("weight", 0)))

    def to_dict(self) -> dict:
        return {"keywords": sorted(self.keywords), "weight": self.weight}


PatternTable = List[PatternEntry]


def build_tables(raw: Mapping[str, Sequence[Mapping]]) -> Dict[Category, PatternTable]:
    """Turns the JSON shape {"productive": [{"keywords": [...], "weight": n}], ...} into tables."""
    tables: Dict[Category, PatternTable] = {category: [] for category in CATEGORY_ORDER}
    for name, entries in raw.items():
        category = Category.from_value(name)
        tables[category] = [PatternEntry.from_dict(entry) for entry in entries]
    return tables


class PatternScorer:
    """Weighted keyword scoring of a text blob against one table per category."""

    def __init__(self, tables: Mapping[Category, PatternTable] = None):
        if tables is None:
            tables = build_tables(DEFAULT_PATTERNS)
        self.tables: Dict[Category, PatternTable] = {
            category: list(tables.get(category, [])) for category in CATEGORY_ORDER
        }

    @staticmethod
    def score_table(text: str, table: Sequence[PatternEntry]) -> float:
        """
        Sum of (matched keywords * weight) over the table, divided by the largest
        weight among entries that matched. A table with no match scores 0.
        """
        text = (text or "").lower()
        total = 0.0
        max_weight = 0.0
        for entry in table:
            matches = sum(1 for keyword in entry.keywords if keyword in text)
            if matches > 0:
                total += matches * entry.weight
                max_weight = max(max_weight, entry.weight)
        return total / max_weight if max_weight > 0 else 0.0

    def score(self, text: str) -> Dict[Category, float]:
        scores = {category: self.score_table(text, self.tables[category]) for category in CATEGORY_ORDER}
        logger.debug(f"Pattern scores for '{text}': {scores}")
        return scores
