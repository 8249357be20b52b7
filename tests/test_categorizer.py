"""Tests for the categorization resolution order."""
from __future__ import annotations

from datetime import datetime

import pytest

from categorizer import Categorizer, build_context
from config import EngineConfig
from models import Category

NOON = datetime(2024, 1, 10, 12, 0)


@pytest.fixture
def categorizer(clock) -> Categorizer:
    return Categorizer(EngineConfig(), clock=clock)


def test_build_context():
    assert build_context("Chrome", "Inbox", "mail.google.com") == "chrome inbox mail.google.com"
    assert build_context("Chrome", None, None) == "chrome  "


def test_pattern_scoring_example(categorizer):
    assert categorizer.categorize("Visual Studio Code", "", "") == Category.PRODUCTIVE


def test_distraction_example(categorizer):
    assert categorizer.categorize("YouTube", "Funny cat compilation", "youtube.com") == Category.DISTRACTED


def test_default_fallback(categorizer):
    assert categorizer.categorize("UnknownXyz123", "", "") == Category.BREAK
    assert categorizer.categorize("System Preferences", "", "") == Category.PRODUCTIVE
    assert categorizer.resolve("Printer Settings Helper", "", "").category == Category.PRODUCTIVE


@pytest.mark.parametrize("app,title,url", [
    ("", "", ""),
    (None, None, None),
    ("Chrome", "", None),
    ("???", "!!!", "about:blank"),
])
def test_classification_is_total(categorizer, app, title, url):
    assert categorizer.categorize(app, title, url) in set(Category)


def test_learning_convergence(categorizer):
    assert categorizer.categorize("Discord", "", "") != Category.PRODUCTIVE
    for _ in range(3):
        categorizer.learn_from_user("Discord", "productive", "distracted")
    assert categorizer.categorize("Discord", "", "") == Category.PRODUCTIVE
    assert categorizer.resolve("Discord", "", "").source == "learned"


def test_manual_exact_and_substring_match(clock):
    config = EngineConfig(manual_categories={"Slack": "distracted"})
    categorizer = Categorizer(config, clock=clock)
    assert categorizer.resolve("Slack", "", "").source == "manual"
    assert categorizer.categorize("slack helper", "", "") == Category.DISTRACTED
    # the app name inside a manual key also matches
    assert categorizer.categorize("SLA", "", "") == Category.DISTRACTED


def test_manual_beats_learned(categorizer):
    for _ in range(3):
        categorizer.learn_from_user("Discord", Category.PRODUCTIVE, Category.BREAK)
    categorizer.set_manual_category("Discord", Category.DISTRACTED)
    assert categorizer.categorize("Discord", "", "") == Category.DISTRACTED
    assert categorizer.remove_manual_category("Discord")
    assert categorizer.categorize("Discord", "", "") == Category.PRODUCTIVE
    assert not categorizer.remove_manual_category("Discord")


def test_empty_app_skips_substring_match(clock):
    categorizer = Categorizer(EngineConfig(manual_categories={"Slack": "distracted"}), clock=clock)
    assert categorizer.categorize("", "", "") == Category.BREAK


def test_categorize_is_pure(categorizer):
    categorizer.categorize("Visual Studio Code", "main.py", "")
    assert categorizer.manual_categories == {}
    assert categorizer.learning_store.history_entries() == []


def test_confident_result_is_promoted(categorizer):
    category = categorizer.categorize_and_maybe_learn("Visual Studio Code", "main.py", "", at=NOON)
    assert category == Category.PRODUCTIVE
    assert categorizer.manual_categories == {"Visual Studio Code": Category.PRODUCTIVE}
    assert categorizer.auto_promoted == {"Visual Studio Code"}
    assert len(categorizer.learning_store.history_entries()) == 1


def test_unconfident_result_is_recorded_not_promoted(categorizer):
    # "notes" is productive and "chrome" is break, so the raw scores tie
    categorizer.categorize_and_maybe_learn("Notes", "chrome", "", at=NOON)
    assert categorizer.manual_categories == {}
    assert len(categorizer.learning_store.history_entries()) == 1


def test_promotion_can_be_disabled(clock):
    categorizer = Categorizer(EngineConfig(auto_promote_enabled=False), clock=clock)
    categorizer.categorize_and_maybe_learn("Visual Studio Code", "", "", at=NOON)
    assert categorizer.manual_categories == {}


def test_default_results_are_not_recorded(categorizer):
    categorizer.categorize_and_maybe_learn("UnknownXyz123", "", "", at=NOON)
    assert categorizer.learning_store.history_entries() == []
    assert categorizer.manual_categories == {}


def test_user_correction_drops_auto_promotion(categorizer):
    categorizer.categorize_and_maybe_learn("Discord", "", "", at=NOON)
    assert categorizer.manual_categories == {"Discord": Category.BREAK}

    for _ in range(3):
        categorizer.learn_from_user("Discord", Category.PRODUCTIVE, Category.BREAK)
    assert "Discord" not in categorizer.manual_categories
    assert categorizer.categorize("Discord", "", "") == Category.PRODUCTIVE


def test_user_set_manual_category_survives_correction(categorizer):
    categorizer.set_manual_category("Discord", Category.BREAK)
    categorizer.learn_from_user("Discord", Category.PRODUCTIVE, Category.BREAK)
    assert categorizer.manual_categories == {"Discord": Category.BREAK}


def test_confidence():
    assert Categorizer.confidence({Category.PRODUCTIVE: 3.0, Category.BREAK: 1.0}) == 0.75
    assert Categorizer.confidence({Category.PRODUCTIVE: 0.0, Category.BREAK: 0.0}) == 0.0


def test_site_bonus_alone_does_not_promote_browser(categorizer):
    # only "chrome" scores before adjustment; the docs bonus makes productive win
    result = categorizer.resolve("Google Chrome", "Python docs", "", at=NOON)
    assert result.category == Category.PRODUCTIVE
    assert result.confidence == 0.0

    assert categorizer.categorize_and_maybe_learn("Google Chrome", "Python docs", "", at=NOON) == Category.PRODUCTIVE
    assert categorizer.manual_categories == {}
    assert categorizer.auto_promoted == set()
    assert categorizer.categorize("Google Chrome", "YouTube funny cats", "youtube.com") == Category.DISTRACTED


def test_confidence_of_chosen_category():
    scores = {Category.PRODUCTIVE: 0.0, Category.BREAK: 1.0, Category.DISTRACTED: 0.0}
    assert Categorizer.confidence(scores, Category.PRODUCTIVE) == 0.0
    assert Categorizer.confidence(scores, Category.BREAK) == 1.0


def test_learning_convergence_with_punctuated_app_name(categorizer):
    for _ in range(3):
        categorizer.learn_from_user("Discord.exe", "productive", "break")
    assert categorizer.learning_store.user_patterns == {"discordexe": {Category.PRODUCTIVE: 3.0}}
    result = categorizer.resolve("Discord.exe", "", "")
    assert result.category == Category.PRODUCTIVE
    assert result.source == "learned"


def test_unknown_category_correction_is_ignored(categorizer):
    assert not categorizer.learn_from_user("Discord", "napping", "break")
    assert not categorizer.learn_from_user("Discord", "productive", None)
    assert categorizer.learning_store.user_patterns == {}
