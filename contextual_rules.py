# contextual_rules.py
import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Tuple

from config import EngineConfig
from models import Category

logger = logging.getLogger(__name__)

LongSessionPredicate = Callable[[str, datetime], bool]


def hour_in_range(hour: int, hours: Tuple[int, int]) -> bool:
    """Inclusive hour range; (18, 8) wraps past midnight."""
    start, end = hours
    if start <= end:
        return start <= hour <= end
    return hour >= start or hour <= end


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


class ContextualRuleEngine:
    """
    Post-processes raw category scores with:
    1. Browser/site bonuses (at most one applies)
    2. Time-of-day multipliers
    3. A long-session bonus for focused work
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 long_session: Optional[LongSessionPredicate] = None):
        self.config = config or EngineConfig()
        self.long_session = long_session

    def is_browser(self, app: str) -> bool:
        return _contains_any((app or "").lower(), self.config.browsers)

    def adjust(self, scores: Dict[Category, float], app: str, text: str,
               at: datetime) -> Dict[Category, float]:
        """Returns a new score dict; the input is left untouched."""
        cfg = self.config
        adjusted = dict(scores)
        app_lower = (app or "").lower()
        text = (text or "").lower()

        if self.is_browser(app_lower):
            if _contains_any(text, cfg.productive_sites):
                adjusted[Category.PRODUCTIVE] += cfg.productive_site_bonus
            elif _contains_any(text, cfg.social_sites):
                adjusted[Category.DISTRACTED] += cfg.distracted_site_bonus
            elif _contains_any(text, cfg.learning_sites):
                adjusted[Category.BREAK] += cfg.break_site_bonus

        if hour_in_range(at.hour, cfg.work_hours):
            adjusted[Category.PRODUCTIVE] *= cfg.work_hours_multiplier
        if hour_in_range(at.hour, cfg.off_hours):
            adjusted[Category.DISTRACTED] *= cfg.off_hours_multiplier

        if (self.long_session is not None and adjusted[Category.PRODUCTIVE] > 0
                and self.long_session(app, at)):
            adjusted[Category.PRODUCTIVE] += cfg.long_session_bonus

        if adjusted != scores:
            logger.debug(f"Contextual adjustment for '{app}': {scores} -> {adjusted}")
        return adjusted
