# learning_store.py
import logging
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List, Optional, Tuple

from config import EngineConfig
from models import Category, CategoryHistoryEntry, CATEGORY_ORDER
from similarity import normalize_app_name

logger = logging.getLogger(__name__)

CORRECT_STEP = 1.0
WRONG_STEP = 0.5


def _squash(text: str) -> str:
    return " ".join(text.split())


def best_category(scores: Dict[Category, float]) -> Tuple[Optional[Category], float]:
    """Highest score, ties resolved by CATEGORY_ORDER."""
    best, best_score = None, 0.0
    for category in CATEGORY_ORDER:
        if category in scores and (best is None or scores[category] > best_score):
            best, best_score = category, scores[category]
    return best, best_score


class UserLearningStore:
    """
    Holds learned per-app category scores from user corrections,
    and a bounded log of past categorizations used for suggestions.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.user_patterns: Dict[str, Dict[Category, float]] = {}
        self.history: Deque[CategoryHistoryEntry] = deque(maxlen=self.config.history_limit)

    def learn_from_user(self, app: str, actual: Category, predicted: Category) -> bool:
        """
        Record a correction. Returns False when nothing was learned
        (matching categories or an app name with no usable characters).
        """
        if actual == predicted:
            return False
        key = normalize_app_name(app)
        if not key:
            logger.warning(f"Ignoring correction for app '{app}': empty key after normalization")
            return False

        scores = self.user_patterns.setdefault(key, {})
        scores[actual] = scores.get(actual, 0.0) + CORRECT_STEP
        if predicted in scores:
            scores[predicted] = max(0.0, scores[predicted] - WRONG_STEP)

        logger.info(f"Learned '{key}': {predicted.value} -> {actual.value} ({scores[actual]:.1f})")
        return True

    def lookup(self, context: str) -> Optional[Tuple[str, Category, float]]:
        """
        Finds learned keys contained in the context text and returns (key, category, score)
        for the most confident one at or above the threshold.
        Ties: higher score, then longer key, then alphabetical key.
        """
        # keys are normalized app names, so the context is normalized the same way
        context = _squash(normalize_app_name(context))
        candidates = []
        for key, scores in self.user_patterns.items():
            needle = _squash(key)
            if not needle or needle not in context:
                continue
            category, score = best_category(scores)
            if category is not None and score >= self.config.learned_confidence_threshold:
                candidates.append((key, category, score))

        if not candidates:
            return None
        candidates.sort(key=lambda c: (-c[2], -len(c[0]), c[0]))
        return candidates[0]

    def record(self, app: str, category: Category, timestamp: datetime):
        # deque(maxlen) drops the oldest entry first
        self.history.append(CategoryHistoryEntry(app=app, category=category, timestamp=timestamp))

    def history_entries(self) -> List[CategoryHistoryEntry]:
        return list(self.history)

    def export(self) -> Dict:
        limit = self.config.history_export_limit
        recent = list(self.history)[-limit:] if limit > 0 else []
        return {
            "userPatterns": {
                key: {category.value: score for category, score in scores.items()}
                for key, scores in self.user_patterns.items()
            },
            "categoryHistory": [entry.to_dict() for entry in recent],
        }

    def import_state(self, data: Dict):
        """Replaces learned patterns and history with a previous export; bad entries are skipped."""
        patterns = self.user_patterns
        if "userPatterns" in data:
            patterns = {}
            for key, raw_scores in (data.get("userPatterns") or {}).items():
                scores = {}
                for name, value in (raw_scores or {}).items():
                    try:
                        scores[Category.from_value(name)] = max(0.0, float(value))
                    except (TypeError, ValueError):
                        logger.warning(f"Skipping learned score {key}/{name}={value!r}")
                if key and scores:
                    patterns[key] = scores

        history = self.history
        if "categoryHistory" in data:
            history = deque(maxlen=self.config.history_limit)
            for raw in data.get("categoryHistory") or []:
                try:
                    history.append(CategoryHistoryEntry.from_dict(raw))
                except (KeyError, TypeError, ValueError):
                    logger.warning(f"Skipping history entry {raw!r}")

        self.user_patterns = patterns
        self.history = history
        logger.info(f"Imported {len(patterns)} learned patterns and {len(history)} history entries")
