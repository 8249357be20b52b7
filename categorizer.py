# categorizer.py
import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from config import EngineConfig
from contextual_rules import ContextualRuleEngine
from learning_store import UserLearningStore, best_category
from models import Category, CategorizationResult
from pattern_scorer import PatternScorer, build_tables

logger = logging.getLogger(__name__)


def build_context(app: str, title: str = "", url: Optional[str] = "") -> str:
    """Lower-cased 'app title url' text that every matcher searches."""
    return f"{app or ''} {title or ''} {url or ''}".lower()


class Categorizer:
    """
    Assigns one of the three categories to an (app, title, url) tuple with this priority:
    1. Manual category map, exact app name
    2. Manual category map, case-insensitive substring either way
    3. Learned user patterns above the confidence threshold
    4. Pattern scores adjusted by contextual rules
    5. Default fallback when nothing scored
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 learning_store: Optional[UserLearningStore] = None,
                 scorer: Optional[PatternScorer] = None,
                 rules: Optional[ContextualRuleEngine] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.config = config or EngineConfig()
        self.learning_store = learning_store or UserLearningStore(self.config)
        self.scorer = scorer or PatternScorer(build_tables(self.config.patterns))
        self.rules = rules or ContextualRuleEngine(self.config)
        self.clock = clock
        self.manual_categories: Dict[str, Category] = {
            app: Category.from_value(category)
            for app, category in self.config.manual_categories.items()
        }
        # apps written into the manual map by auto-promotion, not by the user
        self.auto_promoted = set()

    # --------- manual map ---------

    def set_manual_category(self, app: str, category: Category):
        self.manual_categories[app] = Category.from_value(category)
        self.auto_promoted.discard(app)

    def remove_manual_category(self, app: str) -> bool:
        self.auto_promoted.discard(app)
        return self.manual_categories.pop(app, None) is not None

    def learn_from_user(self, app: str, actual: Category, predicted: Category) -> bool:
        """
        Feeds a user correction to the learning store. An auto-promoted override
        for the same app is dropped so the correction can take effect.
        """
        try:
            actual, predicted = Category.from_value(actual), Category.from_value(predicted)
        except ValueError as e:
            logger.warning(f"Ignoring correction for '{app}': {e}")
            return False
        learned = self.learning_store.learn_from_user(app, actual, predicted)
        if learned and app in self.auto_promoted:
            self.remove_manual_category(app)
            logger.info(f"Dropped auto-promoted override for '{app}' after user correction")
        return learned

    def _check_manual(self, app: str) -> Optional[Category]:
        if app in self.manual_categories:
            return self.manual_categories[app]

        app_lower = (app or "").lower()
        if not app_lower:
            return None
        for key, category in self.manual_categories.items():
            key_lower = key.lower()
            if key_lower and (key_lower in app_lower or app_lower in key_lower):
                return category
        return None

    def default_category(self, app: str) -> Category:
        app_lower = (app or "").lower()
        if any(keyword in app_lower for keyword in self.config.system_keywords):
            return Category.PRODUCTIVE
        return Category.BREAK

    # --------- resolution ---------

    def resolve(self, app: str, title: str = "", url: Optional[str] = "",
                at: Optional[datetime] = None) -> CategorizationResult:
        """Runs the full resolution order without side effects."""
        app = app or ""
        manual = self._check_manual(app)
        if manual is not None:
            return CategorizationResult(manual, "manual", confidence=1.0)

        context = build_context(app, title, url)
        learned = self.learning_store.lookup(context)
        if learned is not None:
            key, category, score = learned
            logger.debug(f"Learned pattern '{key}' -> {category.value} ({score})")
            return CategorizationResult(category, "learned", confidence=1.0)

        raw_scores = self.scorer.score(context)
        adjusted = self.rules.adjust(raw_scores, app, context, at or self.clock())
        category, top = best_category(adjusted)

        if top <= 0:
            return CategorizationResult(self.default_category(app), "default", adjusted, 0.0)

        return CategorizationResult(category, "patterns", adjusted, self.confidence(raw_scores, category))

    @staticmethod
    def confidence(scores: Dict[Category, float], category: Optional[Category] = None) -> float:
        """
        Share of `category` (default: the top score) in the total; 0 when nothing scored.
        Pattern results measure the category chosen after contextual adjustment.
        """
        total = sum(scores.values())
        if total <= 0:
            return 0.0
        score = max(scores.values()) if category is None else scores.get(category, 0.0)
        return score / total

    def categorize(self, app: str, title: str = "", url: Optional[str] = "",
                   at: Optional[datetime] = None) -> Category:
        """Pure categorization: no history, no auto-promotion."""
        return self.resolve(app, title, url, at).category

    def categorize_and_maybe_learn(self, app: str, title: str = "", url: Optional[str] = "",
                                   at: Optional[datetime] = None) -> Category:
        """
        Categorizes like `categorize` and, for pattern-based results, records the
        outcome in the history and promotes very confident results into the manual map.
        """
        at = at or self.clock()
        result = self.resolve(app, title, url, at)
        if result.source != "patterns":
            return result.category

        self.learning_store.record(app, result.category, at)

        if (self.config.auto_promote_enabled and app
                and result.confidence > self.config.auto_promote_confidence
                and app not in self.manual_categories):
            self.manual_categories[app] = result.category
            self.auto_promoted.add(app)
            logger.info(f"Auto-promoted '{app}' to {result.category.value} "
                        f"(confidence {result.confidence:.2f})")
        return result.category

    def category_confidence(self, app: str, title: str = "", url: Optional[str] = "") -> float:
        return self.confidence(self.scorer.score(build_context(app, title, url)))
