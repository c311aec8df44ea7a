# apps/goals/domain/services/insights.py
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional
import pytz
from dateutil.relativedelta import relativedelta
from apps.goals.domain.entities import (
    CATEGORY_META, CategoryGoalStats, GoalCategory, GoalEntity, GoalInsights,
    GoalStatistics, GoalStatus, MonthlyGoalStats,
)
from apps.goals.domain.services.progress import ProgressCalculator
from apps.goals.domain.services.streak import StreakCalculator


class InsightsAggregator:
    """
    Analityka celów liczona od zera na pełnym snapshocie (bez indeksów przyrostowych).
    Każdy krok jest niezależny - współdzielą tylko dane wejściowe.
    """

    def __init__(self, upcoming_days: int = 7, months: int = 6, tz=None,
                 calculator: ProgressCalculator = None, streaks: StreakCalculator = None):
        self.upcoming_days = upcoming_days
        self.months = months
        self.tz = tz or pytz.UTC
        self.calculator = calculator or ProgressCalculator()
        self.streaks = streaks or StreakCalculator()

    def _local_date(self, moment: Optional[datetime]) -> Optional[date]:
        """Znacznik czasu -> dzień w strefie użytkownika."""
        if moment is None:
            return None
        if moment.tzinfo is None:
            moment = pytz.UTC.localize(moment)
        return moment.astimezone(self.tz).date()

    def insights(self, goals: List[GoalEntity], today: date) -> GoalInsights:
        total = len(goals)
        active = [g for g in goals if g.status == GoalStatus.ACTIVE]
        completed = [g for g in goals if g.status == GoalStatus.COMPLETED]
        abandoned = [g for g in goals if g.status == GoalStatus.ABANDONED]

        category_stats = self.category_stats(goals)

        return GoalInsights(
            total_goals=total,
            active_goals=len(active),
            completed_goals=len(completed),
            abandoned_goals=len(abandoned),
            completion_rate=len(completed) / total if total else 0.0,
            average_completion_days=self.average_completion_days(completed),
            most_active_category=self.most_active_category(category_stats),
            category_stats=category_stats,
            monthly_stats=self.monthly_stats(goals, today),
            upcoming_deadlines=self.upcoming_deadlines(goals, today),
            overdue_goals=self.overdue_goals(goals, today),
            streak_data=self.streaks.streak(self.completion_dates(completed), today),
        )

    def average_completion_days(self, completed: List[GoalEntity]) -> int:
        # Cele bez completed_at pomijamy (nie liczymy ich jako 0)
        durations = []
        for g in completed:
            completed_on = self._local_date(g.completed_at)
            if completed_on is not None:
                durations.append((completed_on - g.start_date).days)
        if not durations:
            return 0
        return int(round(sum(durations) / len(durations)))

    def category_stats(self, goals: List[GoalEntity]) -> List[CategoryGoalStats]:
        by_category: Dict[GoalCategory, List[GoalEntity]] = defaultdict(list)
        for g in goals:
            by_category[g.category].append(g)

        stats = []
        for category in GoalCategory:
            items = by_category.get(category)
            if not items:
                continue  # pomijamy puste kategorie

            completed_count = sum(1 for g in items if g.status == GoalStatus.COMPLETED)
            meta = CATEGORY_META[category]
            stats.append(CategoryGoalStats(
                category=category,
                category_name=meta['name'],
                total_count=len(items),
                completed_count=completed_count,
                active_count=sum(1 for g in items if g.status == GoalStatus.ACTIVE),
                completion_rate=completed_count / len(items),
                color=meta['color'],
            ))
        return stats

    def most_active_category(self, category_stats: List[CategoryGoalStats]) -> Optional[GoalCategory]:
        # Statystyki są w kolejności enuma, więc max() bierze pierwszą przy remisie
        best = max(category_stats, key=lambda s: s.active_count, default=None)
        if best is None or best.active_count == 0:
            return None
        return best.category

    def monthly_stats(self, goals: List[GoalEntity], today: date) -> List[MonthlyGoalStats]:
        """Kohorty miesięczne za ostatnie N miesięcy (bieżący włącznie), od najstarszego."""
        created = [self._local_date(g.created_at) for g in goals]
        # Liczy się bieżący status: cel ukończony, a potem zarchiwizowany,
        # znika z kohorty ukończeń (reaktywacja zostawia stare abandoned_at)
        completed = [self._local_date(g.completed_at) for g in goals if g.status == GoalStatus.COMPLETED]
        abandoned = [self._local_date(g.abandoned_at) for g in goals if g.status == GoalStatus.ABANDONED]

        def count_between(days, start, end):
            return sum(1 for d in days if d is not None and start <= d < end)

        current_month = today.replace(day=1)
        stats = []
        for offset in range(self.months - 1, -1, -1):
            month_start = current_month - relativedelta(months=offset)
            month_end = month_start + relativedelta(months=1)
            stats.append(MonthlyGoalStats(
                year_month=month_start.year * 100 + month_start.month,
                month_label=month_start.strftime("%Y-%m"),
                created_count=count_between(created, month_start, month_end),
                completed_count=count_between(completed, month_start, month_end),
                abandoned_count=count_between(abandoned, month_start, month_end),
            ))
        return stats

    def upcoming_deadlines(self, goals: List[GoalEntity], today: date) -> List[GoalEntity]:
        upcoming = [
            g for g in goals
            if g.status == GoalStatus.ACTIVE and g.end_date is not None
            and 0 <= (g.end_date - today).days <= self.upcoming_days
        ]
        return sorted(upcoming, key=lambda g: g.end_date)

    def overdue_goals(self, goals: List[GoalEntity], today: date) -> List[GoalEntity]:
        overdue = [
            g for g in goals
            if g.status == GoalStatus.ACTIVE and g.end_date is not None and g.end_date < today
        ]
        return sorted(overdue, key=lambda g: g.end_date)

    def completion_dates(self, completed: List[GoalEntity]) -> List[date]:
        return [d for d in (self._local_date(g.completed_at) for g in completed) if d is not None]

    def statistics(self, goals: List[GoalEntity]) -> GoalStatistics:
        """Szybkie podsumowanie: liczniki + średni postęp aktywnych celów."""
        children = defaultdict(list)
        for g in goals:
            if g.parent_id is not None:
                children[g.parent_id].append(g)

        active = [g for g in goals if g.status == GoalStatus.ACTIVE]
        progresses = []
        for g in active:
            kids = children.get(g.id, [])
            done = sum(1 for k in kids if k.status == GoalStatus.COMPLETED)
            progresses.append(self.calculator.progress_with_children(g, len(kids), done))

        return GoalStatistics(
            active_count=len(active),
            completed_count=sum(1 for g in goals if g.status == GoalStatus.COMPLETED),
            abandoned_count=sum(1 for g in goals if g.status == GoalStatus.ABANDONED),
            total_progress=sum(progresses) / len(progresses) if progresses else 0.0,
        )
