from collections import defaultdict
from typing import Dict, Iterable, List, Optional
from datetime import date, datetime, timedelta
from models import ActivityRecord, Category, CATEGORY_ORDER


class SessionAnalytics:
    """Summaries over finalized activity records (durations in seconds)."""

    def __init__(self, records: Iterable[ActivityRecord]):
        self.records: List[ActivityRecord] = list(records)

    def _filter(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> List[ActivityRecord]:
        return [r for r in self.records
                if (since is None or r.start >= since) and (until is None or r.start < until)]

    def get_time_by_app(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> Dict[str, float]:
        """Total time per app, largest first."""
        stats = defaultdict(float)
        for record in self._filter(since, until):
            stats[record.app] += record.duration_ms / 1000.0
        return dict(sorted(stats.items(), key=lambda item: item[1], reverse=True))

    def get_time_by_category(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> Dict[Category, float]:
        stats = {category: 0.0 for category in CATEGORY_ORDER}
        for record in self._filter(since, until):
            stats[record.category] += record.duration_ms / 1000.0
        return stats

    def get_productivity_summary(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> Dict:
        """
        Get comprehensive productivity summary.
        Returns times and percentages per category, per-app details and the total.
        """
        records = self._filter(since, until)
        category_times = {category: 0.0 for category in CATEGORY_ORDER}
        category_details = {category: defaultdict(float) for category in CATEGORY_ORDER}

        for record in records:
            seconds = record.duration_ms / 1000.0
            category_times[record.category] += seconds
            category_details[record.category][record.app] += seconds

        total_time = sum(category_times.values())

        percentages = {}
        for category in CATEGORY_ORDER:
            if total_time > 0:
                percentages[category] = (category_times[category] / total_time) * 100
            else:
                percentages[category] = 0.0

        return {
            'times': category_times,
            'percentages': percentages,
            'details': {k: dict(v) for k, v in category_details.items()},
            'total_time': total_time
        }

    def get_most_used_app(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> Optional[str]:
        usage = self.get_time_by_app(since, until)
        for app, seconds in usage.items():
            if seconds > 0:
                return app
        return None

    def get_daily_summary(self, days: int = 7, today: Optional[date] = None) -> List[Dict]:
        """Per-day totals for the last N days, most recent first."""
        today = today or datetime.now().date()
        summaries = []
        for i in range(days):
            start_of_day = datetime.combine(today - timedelta(days=i), datetime.min.time())
            end_of_day = start_of_day + timedelta(days=1)
            by_category = self.get_time_by_category(start_of_day, end_of_day)
            summaries.append({
                'date': start_of_day.date(),
                'total_time': sum(by_category.values()),
                'productive_time': by_category[Category.PRODUCTIVE],
                'break_time': by_category[Category.BREAK],
                'distracted_time': by_category[Category.DISTRACTED],
            })
        return summaries
