# config.py
"""Engine configuration. Everything here is data and can be replaced from JSON (see config_manager)."""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

# files
CONFIG_ROOT = 'config'
ENGINE_CONFIG_FILE = 'engine.json'
PATTERNS_FILE = 'patterns.json'
MANUAL_CATEGORIES_FILE = 'manual_categories.json'

MERGE_GAP_MS = 5000
RETENTION_DAYS = 7
LEARNED_CONFIDENCE_THRESHOLD = 3.0
AUTO_PROMOTE_CONFIDENCE = 0.8

DEFAULT_PATTERNS: Dict[str, List[dict]] = {
    "productive": [
        # Development
        {"keywords": ["code", "studio", "intellij", "webstorm", "pycharm", "atom", "sublime", "vim", "emacs", "notepad++"], "weight": 10},
        {"keywords": ["git", "github", "gitlab", "bitbucket", "sourcetree"], "weight": 9},
        {"keywords": ["terminal", "cmd", "powershell", "bash", "console", "command"], "weight": 8},
        {"keywords": ["docker", "kubernetes", "postman", "insomnia"], "weight": 9},
        # Design & creative
        {"keywords": ["photoshop", "illustrator", "figma", "sketch", "canva", "gimp", "blender"], "weight": 8},
        {"keywords": ["premiere", "after effects", "davinci", "obs", "camtasia"], "weight": 8},
        # Office
        {"keywords": ["word", "excel", "powerpoint", "outlook", "onenote", "notion", "obsidian"], "weight": 7},
        {"keywords": ["jira", "confluence", "trello", "asana", "monday", "clickup"], "weight": 8},
        {"keywords": ["calculator", "calendar", "notepad", "notes", "reminder"], "weight": 6},
        # Data & analysis
        {"keywords": ["tableau", "power bi", "excel", "stata", "spss", "matlab", "rstudio"], "weight": 9},
        {"keywords": ["database", "mysql", "postgres", "mongodb", "redis"], "weight": 8},
        # System
        {"keywords": ["task manager", "activity monitor", "system preferences", "control panel"], "weight": 5},
    ],
    "break": [
        {"keywords": ["slack", "teams", "zoom", "skype", "discord", "telegram", "whatsapp"], "weight": 7},
        {"keywords": ["email", "gmail", "outlook", "mail"], "weight": 6},
        {"keywords": ["chrome", "firefox", "safari", "edge", "browser", "internet"], "weight": 5},
        {"keywords": ["kindle", "books", "reader", "pdf", "documentation", "manual"], "weight": 6},
        {"keywords": ["news", "medium", "wikipedia", "stack overflow", "reddit"], "weight": 4},
        {"keywords": ["spotify", "apple music", "itunes", "podcast", "audible"], "weight": 6},
        {"keywords": ["amazon", "ebay", "shopping", "bank", "finance", "wallet"], "weight": 3},
    ],
    "distracted": [
        {"keywords": ["facebook", "instagram", "twitter", "tiktok", "snapchat", "linkedin"], "weight": 10},
        {"keywords": ["social", "feed", "timeline"], "weight": 8},
        {"keywords": ["youtube", "netflix", "hulu", "disney", "prime video", "twitch"], "weight": 9},
        {"keywords": ["games", "gaming", "steam", "epic", "xbox", "playstation"], "weight": 10},
        {"keywords": ["entertainment", "movie", "tv", "series", "streaming"], "weight": 8},
        {"keywords": ["meme", "funny", "joke", "viral", "trending"], "weight": 9},
        {"keywords": ["dating", "tinder", "bumble"], "weight": 8},
    ],
}

DEFAULT_BROWSERS = ["chrome", "firefox", "safari", "edge", "opera", "brave"]

DEFAULT_PRODUCTIVE_SITES = [
    "github", "stackoverflow", "documentation", "docs", "api",
    "jira", "confluence", "trello", "notion", "figma",
    "aws", "azure", "google cloud", "analytics",
    "learning", "course", "tutorial", "education",
]

DEFAULT_SOCIAL_SITES = [
    "facebook", "instagram", "twitter", "tiktok", "snapchat",
    "linkedin", "reddit", "pinterest", "tumblr",
]

DEFAULT_LEARNING_SITES = [
    "news", "bbc", "cnn", "medium", "wikipedia", "coursera",
    "udemy", "khan academy", "documentation", "blog",
]

# Apps that fall back to productive when nothing else matched
DEFAULT_SYSTEM_KEYWORDS = ["system", "settings"]


@dataclass
class EngineConfig:
    """All host-supplied tunables of the engine."""
    merge_gap_ms: int = MERGE_GAP_MS
    retention_days: int = RETENTION_DAYS

    learned_confidence_threshold: float = LEARNED_CONFIDENCE_THRESHOLD
    auto_promote_enabled: bool = True
    auto_promote_confidence: float = AUTO_PROMOTE_CONFIDENCE

    # Inclusive hour ranges, the second one may wrap past midnight
    work_hours: Tuple[int, int] = (9, 17)
    off_hours: Tuple[int, int] = (18, 8)
    work_hours_multiplier: float = 1.2
    off_hours_multiplier: float = 0.8

    productive_site_bonus: float = 5.0
    distracted_site_bonus: float = 8.0
    break_site_bonus: float = 3.0

    long_session_threshold_ms: int = 30 * 60 * 1000
    long_session_bonus: float = 2.0

    history_limit: int = 1000
    history_export_limit: int = 100
    suggestion_limit: int = 3
    suggestion_threshold: float = 0.6

    patterns: Dict[str, List[dict]] = field(default_factory=lambda: {k: [dict(e) for e in v] for k, v in DEFAULT_PATTERNS.items()})
    browsers: List[str] = field(default_factory=lambda: list(DEFAULT_BROWSERS))
    productive_sites: List[str] = field(default_factory=lambda: list(DEFAULT_PRODUCTIVE_SITES))
    social_sites: List[str] = field(default_factory=lambda: list(DEFAULT_SOCIAL_SITES))
    learning_sites: List[str] = field(default_factory=lambda: list(DEFAULT_LEARNING_SITES))
    system_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_SYSTEM_KEYWORDS))
    manual_categories: Dict[str, str] = field(default_factory=dict)
