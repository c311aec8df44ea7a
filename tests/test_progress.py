import pytest
from apps.goals.domain.services import ProgressCalculator
from tests.helpers import GoalStatus, make_goal, numeric_goal, percentage_goal

calc = ProgressCalculator()


def test_completed_goal_is_full_regardless_of_value():
    assert calc.progress(percentage_goal(10, status=GoalStatus.COMPLETED)) == 1.0
    assert calc.progress(numeric_goal(0, 50, status=GoalStatus.COMPLETED)) == 1.0


@pytest.mark.parametrize("value,target,expected", [
    (25, 100, 0.25),
    (150, 100, 1.0),
    (-5, 100, 0.0),
    (10, None, 0.0),
    (10, 0, 0.0),
])
def test_numeric_progress(value, target, expected):
    assert calc.progress(numeric_goal(value, target)) == pytest.approx(expected)


def test_percentage_progress_is_clamped_and_monotonic():
    values = [-10, 0, 15, 40, 99, 100, 130]
    results = [calc.progress(percentage_goal(v)) for v in values]

    assert all(0.0 <= r <= 1.0 for r in results)
    assert results == sorted(results)
    assert calc.progress(percentage_goal(40)) == pytest.approx(0.4)


def test_children_replace_own_value():
    goal = percentage_goal(90)
    assert calc.progress_with_children(goal, 4, 1) == pytest.approx(0.25)
    assert calc.progress_with_children(goal, 2, 0) == 0.0
    # Bez dzieci wracamy do własnej wartości
    assert calc.progress_with_children(goal, 0, 0) == pytest.approx(0.9)


def test_children_ignore_own_completed_status():
    goal = make_goal(status=GoalStatus.COMPLETED)
    assert calc.progress_with_children(goal, 2, 1) == pytest.approx(0.5)


def test_service_uses_children_from_repository(service):
    parent = service.create_goal(percentage_goal(80, title="Parent"))
    first = service.create_sub_goal(parent, make_goal(title="A"))
    service.create_sub_goal(parent, make_goal(title="B"))

    service.complete_goal(first)

    goal = service.repository.get_by_id(parent)
    assert service.calculate_progress(goal) == pytest.approx(0.5)
