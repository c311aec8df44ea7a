# apps/goals/domain/services/progress.py
from apps.goals.domain.entities import GoalEntity, GoalStatus, ProgressType


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ProgressCalculator:
    def progress(self, goal: GoalEntity) -> float:
        """Znormalizowany postęp pojedynczego celu (0.0 - 1.0)."""
        # Status ma pierwszeństwo przed surowymi wartościami
        if goal.status == GoalStatus.COMPLETED:
            return 1.0

        if goal.progress_type == ProgressType.NUMERIC:
            if goal.target_value and goal.target_value > 0:
                return _clamp(goal.current_value / goal.target_value, 0.0, 1.0)
            return 0.0

        if goal.progress_type == ProgressType.PERCENTAGE:
            return _clamp(goal.current_value / 100.0, 0.0, 1.0)

        return 0.0

    def progress_with_children(self, goal: GoalEntity, total_children: int, completed_children: int) -> float:
        """
        Cel z podcelami to wyłącznie suma ukończonych dzieci.
        Własna wartość celu jest wtedy ignorowana.
        """
        if total_children <= 0:
            return self.progress(goal)
        return _clamp(completed_children / total_children, 0.0, 1.0)
