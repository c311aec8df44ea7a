# apps/goals/domain/services/streak.py
from datetime import date
from typing import Iterable
from apps.goals.domain.entities import GoalStreakData


class StreakCalculator:
    def __init__(self, grace_days: int = 1):
        # Ile dni "luzu": seria z wczoraj wciąż trwa, dopóki user nie zajrzy dziś
        self.grace_days = grace_days

    def streak(self, completion_dates: Iterable[date], today: date) -> GoalStreakData:
        dates = sorted(set(completion_dates))
        if not dates:
            return GoalStreakData()

        # 1. Najdłuższa seria w całym szeregu
        longest = 1
        run = 1
        for prev, curr in zip(dates, dates[1:]):
            if (curr - prev).days == 1:
                run += 1
                longest = max(longest, run)
            else:
                run = 1

        # 2. Bieżąca seria - tylko jeśli ostatnie ukończenie było dziś (lub w okresie łaski)
        last = dates[-1]
        current = 0
        if 0 <= (today - last).days <= self.grace_days:
            current = 1
            for i in range(len(dates) - 1, 0, -1):
                if (dates[i] - dates[i - 1]).days == 1:
                    current += 1
                else:
                    break

        return GoalStreakData(
            current_streak=current,
            longest_streak=longest,
            total_completion_days=len(dates),
            last_completion_date=last,
        )
