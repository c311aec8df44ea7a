import pytest
from apps.goals.domain.exceptions import GoalHierarchyError
from apps.goals.domain.services import build_goal_tree, flatten_tree
from tests.helpers import GoalStatus, make_goal


@pytest.fixture
def nodes(service):
    fitness = service.create_goal(make_goal(title="Fitness"))
    run = service.create_sub_goal(fitness, make_goal(title="Run"))
    lift = service.create_sub_goal(fitness, make_goal(title="Lift"))
    service.create_sub_goal(run, make_goal(title="5k"))
    service.create_goal(make_goal(title="Reading"))
    service.complete_goal(lift)
    return build_goal_tree(service.repository.get_all())


def test_roots_and_children(nodes):
    assert [n.goal.title for n in nodes] == ["Fitness", "Reading"]

    fitness = nodes[0]
    assert fitness.child_count == 2
    assert fitness.progress == pytest.approx(0.5)
    assert [c.goal.title for c in fitness.children] == ["Run", "Lift"]
    assert fitness.children[0].level == 1
    assert fitness.children[0].children[0].level == 2


def test_flatten_collapsed(nodes):
    rows = flatten_tree(nodes)
    assert [r.goal.title for r in rows] == ["Fitness", "Reading"]
    assert not any(r.is_expanded for r in rows)


def test_flatten_expanded_branch(nodes):
    fitness, run = nodes[0].goal.id, nodes[0].children[0].goal.id

    rows = flatten_tree(nodes, {fitness})
    assert [r.goal.title for r in rows] == ["Fitness", "Run", "Lift", "Reading"]
    assert rows[0].is_expanded

    rows = flatten_tree(nodes, {fitness, run})
    assert [r.goal.title for r in rows] == ["Fitness", "Run", "5k", "Lift", "Reading"]


def test_missing_parent_raises():
    goals = [make_goal(1, "Root"), make_goal(2, "Orphan", parent_id=42, level=1)]
    with pytest.raises(GoalHierarchyError):
        build_goal_tree(goals)


def test_cycle_raises():
    goals = [
        make_goal(1, "Root"),
        make_goal(2, "A", parent_id=3, level=1),
        make_goal(3, "B", parent_id=2, level=1, status=GoalStatus.COMPLETED),
    ]
    with pytest.raises(GoalHierarchyError):
        build_goal_tree(goals)
