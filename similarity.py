# similarity.py
import re
from typing import Dict, Iterable, List

from models import CategoryHistoryEntry

_NON_ALNUM = re.compile(r'[^a-z0-9\s]')


def normalize_app_name(app_name: str) -> str:
    """Lower-case, drop punctuation, trim. Used for learned keys and suggestions."""
    return _NON_ALNUM.sub('', (app_name or '').lower()).strip()


def levenshtein_distance(a: str, b: str) -> int:
    """Standard edit distance, unit cost for insert/delete/substitute."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], current[j - 1], previous[j]) + 1)
        previous = current
    return previous[-1]


def calculate_similarity(a: str, b: str) -> float:
    """(maxLen - distance) / maxLen; two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest


class SimilarityMatcher:
    """Ranks previously categorized apps by name similarity."""

    def __init__(self, threshold: float = 0.6, limit: int = 3):
        self.threshold = threshold
        self.limit = limit

    def suggest(self, app_name: str, history: Iterable[CategoryHistoryEntry]) -> List[Dict]:
        """
        Returns up to `limit` suggestions as dicts with app, category and similarity,
        most similar first. Entries at or below the threshold are skipped.
        """
        target = normalize_app_name(app_name)
        suggestions = []
        for entry in history:
            similarity = calculate_similarity(target, normalize_app_name(entry.app))
            if similarity > self.threshold:
                suggestions.append({
                    "app": entry.app,
                    "category": entry.category,
                    "similarity": similarity,
                })

        # stable sort keeps history order among equal similarities
        suggestions.sort(key=lambda s: s["similarity"], reverse=True)
        return suggestions[:self.limit]
