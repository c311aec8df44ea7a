# apps/goals/domain/services/health.py
from datetime import date
from typing import Optional
from apps.goals.domain.entities import GoalEntity, GoalStatus, GoalTimeline
from apps.goals.domain.services.progress import ProgressCalculator, _clamp


def remaining_days(end_date: Optional[date], today: date) -> Optional[int]:
    if end_date is None:
        return None
    return (end_date - today).days


def expected_progress(goal: GoalEntity, today: date) -> float:
    """Liniowe oczekiwanie postępu wg upływu czasu (0.0 - 1.0)."""
    if goal.end_date is None:
        return 0.0
    span = (goal.end_date - goal.start_date).days
    if span <= 0:
        return 1.0
    elapsed = (today - goal.start_date).days
    return _clamp(elapsed / span, 0.0, 1.0)


class HealthScorer:
    def __init__(self, weights: dict = None, calculator: ProgressCalculator = None):
        # Domyślne parametry, jeśli nie podano
        self.weights = weights or {
            'overdue_decay_per_day': 0.02,
            'overdue_floor': 0.5,
            'max_ratio': 1.5,
        }
        self.calculator = calculator or ProgressCalculator()

    def health(self, goal: GoalEntity, today: date, progress: Optional[float] = None) -> int:
        """
        Zdrowie celu 0-100: faktyczny postęp vs oczekiwany wg czasu.
        `progress` pozwala podać postęp wyliczony z podcelów.
        """
        if goal.status == GoalStatus.COMPLETED:
            return 100
        if goal.status == GoalStatus.ABANDONED:
            return 0

        if progress is None:
            progress = self.calculator.progress(goal)

        # Brak terminu -> czysto wartościowo, bez presji czasu
        if goal.end_date is None:
            return int(_clamp(round(progress * 100), 0, 100))

        expected = expected_progress(goal, today)
        if expected > 0:
            health_ratio = _clamp(progress / expected, 0.0, self.weights['max_ratio'])
        else:
            health_ratio = 1.0

        # Kara za przeterminowanie (z dolnym progiem)
        overdue_ratio = 1.0
        overdue_days = (today - goal.end_date).days
        if overdue_days > 0:
            overdue_ratio = max(
                self.weights['overdue_floor'],
                1.0 - overdue_days * self.weights['overdue_decay_per_day']
            )

        score = round(health_ratio * overdue_ratio * 100)
        return int(_clamp(score, 0, 100))

    def timeline(self, goal: GoalEntity, today: date, progress: Optional[float] = None) -> GoalTimeline:
        if progress is None:
            progress = self.calculator.progress(goal)

        expected = expected_progress(goal, today)
        return GoalTimeline(
            goal_id=goal.id,
            start_date=goal.start_date,
            end_date=goal.end_date,
            current_progress=progress,
            days_elapsed=max(0, (today - goal.start_date).days),
            days_remaining=remaining_days(goal.end_date, today),
            expected_progress=expected,
            is_on_track=progress >= expected,
        )
