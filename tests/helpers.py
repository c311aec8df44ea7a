from datetime import date, datetime, timedelta, timezone
from apps.goals.domain.entities import GoalCategory, GoalEntity, GoalStatus, ProgressType

TODAY = date(2024, 3, 15)
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Zegar sterowany z testu."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def today(self):
        return self.now.date()

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def make_goal(goal_id=None, title="Goal", **kwargs):
    kwargs.setdefault('start_date', date(2024, 1, 1))
    return GoalEntity(id=goal_id, title=title, **kwargs)


def percentage_goal(value, **kwargs):
    return make_goal(progress_type=ProgressType.PERCENTAGE, current_value=value, **kwargs)


def numeric_goal(value, target, **kwargs):
    return make_goal(progress_type=ProgressType.NUMERIC, current_value=value, target_value=target, **kwargs)


__all__ = [
    'TODAY', 'NOW', 'FakeClock', 'make_goal', 'percentage_goal', 'numeric_goal',
    'GoalCategory', 'GoalStatus', 'ProgressType',
]
