import threading
from dataclasses import replace
from datetime import date, timedelta
import pytest
from apps.goals.adapters.memory_repositories import InMemoryGoalRepository
from apps.goals.domain.entities import GoalRecordType
from apps.goals.domain.exceptions import GoalNotFound, GoalValidationError, InvalidStatusTransition
from apps.goals.domain.services import GoalService
from tests.helpers import GoalCategory, GoalStatus, ProgressType, make_goal, numeric_goal


def test_create_root_goal(service, repo):
    goal_id = service.create_goal(make_goal(title="Learn Polish", category=GoalCategory.LEARNING))

    goal = repo.get_by_id(goal_id)
    assert goal.level == 0
    assert goal.parent_id is None
    assert goal.status == GoalStatus.ACTIVE
    assert goal.created_at is not None
    assert [r.record_type for r in repo.get_records(goal_id)] == [GoalRecordType.START]


@pytest.mark.parametrize("title", ["", "   "])
def test_create_requires_title(service, title):
    with pytest.raises(GoalValidationError):
        service.create_goal(make_goal(title=title))


def test_create_rejects_inverted_window(service):
    with pytest.raises(GoalValidationError):
        service.create_goal(make_goal(start_date=date(2024, 5, 1), end_date=date(2024, 4, 1)))


def test_sub_goal_under_missing_parent_fails(service, repo):
    with pytest.raises(GoalValidationError):
        service.create_sub_goal(404, make_goal(title="Orphan"))
    with pytest.raises(GoalValidationError):
        service.create_goal(make_goal(title="Orphan", parent_id=404))
    assert repo.get_all() == []


def test_sub_goal_inherits_from_parent(service, repo):
    parent_id = service.create_goal(make_goal(
        title="Run a marathon",
        category=GoalCategory.HEALTH,
        goal_type="sport",
        start_date=date(2024, 2, 1),
        end_date=date(2024, 10, 1),
    ))
    child_id = service.create_sub_goal(parent_id, make_goal(title="Run 10k", category=GoalCategory.OTHER))

    child = repo.get_by_id(child_id)
    assert child.level == 1
    assert child.parent_id == parent_id
    assert child.category == GoalCategory.HEALTH
    assert child.goal_type == "sport"
    assert (child.start_date, child.end_date) == (date(2024, 2, 1), date(2024, 10, 1))
    assert repo.get_by_id(parent_id).is_multi_level


def test_create_goal_with_parent_inherits_too(service, repo):
    parent_id = service.create_goal(make_goal(
        title="Learn Spanish",
        category=GoalCategory.LEARNING,
        goal_type="language",
        start_date=date(2024, 3, 1),
        end_date=date(2024, 9, 1),
    ))
    child_id = service.create_goal(make_goal(
        title="A2 exam",
        parent_id=parent_id,
        category=GoalCategory.HOBBY,
        start_date=date(2023, 1, 1),
        end_date=date(2023, 2, 1),
    ))

    child = repo.get_by_id(child_id)
    assert child.category == GoalCategory.LEARNING
    assert child.goal_type == "language"
    assert (child.start_date, child.end_date) == (date(2024, 3, 1), date(2024, 9, 1))


def test_new_sub_goal_recomputes_completed_parent(service, repo):
    parent = service.create_goal(make_goal(title="Parent"))
    first = service.create_sub_goal(parent, make_goal(title="First"))
    service.complete_goal(first)
    assert repo.get_by_id(parent).current_value == 100

    service.create_sub_goal(parent, make_goal(title="Second"))

    goal = repo.get_by_id(parent)
    assert goal.current_value == pytest.approx(50)
    # Ukończony rodzic nie wraca do ACTIVE
    assert goal.status == GoalStatus.COMPLETED


def test_numeric_goal_completes_at_target(service, repo):
    goal_id = service.create_goal(numeric_goal(0, 10, title="Read 10 books", unit=" books"))

    service.update_progress(goal_id, 9)
    assert repo.get_by_id(goal_id).status == GoalStatus.ACTIVE

    goal = service.update_progress(goal_id, 10)
    assert goal.status == GoalStatus.COMPLETED
    assert goal.completed_at is not None


def test_percentage_goal_never_auto_completes(service):
    goal_id = service.create_goal(make_goal(title="Write thesis", progress_type=ProgressType.PERCENTAGE))
    goal = service.update_progress(goal_id, 100)
    assert goal.status == GoalStatus.ACTIVE


def test_numeric_completion_cascades_to_parent(service, repo):
    parent = service.create_goal(make_goal(title="Parent"))
    child = service.create_sub_goal(parent, numeric_goal(0, 5, title="Child"))

    service.add_progress(child, 5)

    assert repo.get_by_id(child).status == GoalStatus.COMPLETED
    assert repo.get_by_id(parent).status == GoalStatus.COMPLETED


def test_add_progress_and_history(service, clock):
    goal_id = service.create_goal(numeric_goal(0, 100, title="Save money", unit="$"))

    service.add_progress(goal_id, 30)
    clock.advance(days=1)
    service.add_progress(goal_id, 20)
    clock.advance(days=1)
    goal = service.add_progress(goal_id, -5)

    assert goal.current_value == 45
    records = service.get_progress_records(goal_id)
    assert [r.change_value for r in records] == [-5, 20, 30]
    assert [r.total_value for r in records] == [45, 50, 30]
    assert records[0].record_date == clock.today()
    assert records[-1].content == "0$ -> 30$ (+30$)"


def test_progress_on_missing_goal(service):
    with pytest.raises(GoalNotFound):
        service.update_progress(999, 10)


def test_abandon_and_reactivate(service, repo):
    goal_id = service.create_goal(make_goal(title="Learn guitar"))

    goal = service.abandon_goal(goal_id, reason="No time")
    assert goal.status == GoalStatus.ABANDONED
    assert goal.abandon_reason == "No time"
    assert goal.abandoned_at is not None

    goal = service.reactivate_goal(goal_id)
    assert goal.status == GoalStatus.ACTIVE
    assert goal.abandon_reason == ""

    types = [r.record_type for r in repo.get_records(goal_id)]
    assert types == [GoalRecordType.REACTIVATE, GoalRecordType.ABANDON, GoalRecordType.START]


def test_archive_and_reactivate(service):
    goal_id = service.create_goal(make_goal(title="Old plan"))
    service.complete_goal(goal_id)

    assert service.archive_goal(goal_id).status == GoalStatus.ARCHIVED
    assert service.reactivate_goal(goal_id).status == GoalStatus.ACTIVE


@pytest.mark.parametrize("setup,action", [
    ('complete', 'reactivate_goal'),
    ('complete', 'abandon_goal'),
    ('complete', 'complete_goal'),
    ('abandon', 'complete_goal'),
    (None, 'reactivate_goal'),
])
def test_forbidden_transitions(service, setup, action):
    goal_id = service.create_goal(make_goal())
    if setup == 'complete':
        service.complete_goal(goal_id)
    elif setup == 'abandon':
        service.abandon_goal(goal_id)

    with pytest.raises(InvalidStatusTransition):
        getattr(service, action)(goal_id)


def test_transition_on_missing_goal(service):
    with pytest.raises(GoalNotFound):
        service.complete_goal(12345)


def test_archive_does_not_propagate(service, repo):
    parent = service.create_goal(make_goal(title="Parent"))
    done = service.create_sub_goal(parent, make_goal(title="Done"))
    service.create_sub_goal(parent, make_goal(title="Open"))
    service.complete_goal(done)
    assert repo.get_by_id(parent).current_value == pytest.approx(50)

    service.archive_goal(done)

    assert repo.get_by_id(parent).current_value == pytest.approx(50)


def test_delete_removes_subtree(service, repo, tree):
    root, mid, leaf = tree

    deleted = service.delete_goal(mid)

    assert sorted(deleted) == sorted([mid, leaf])
    assert repo.get_by_id(mid) is None
    assert repo.get_by_id(leaf) is None
    assert repo.get_records(leaf) == []
    assert not repo.get_by_id(root).is_multi_level


def test_delete_recomputes_former_parent(service, repo):
    parent = service.create_goal(make_goal(title="Parent"))
    done = service.create_sub_goal(parent, make_goal(title="Done"))
    open_id = service.create_sub_goal(parent, make_goal(title="Open"))
    service.complete_goal(done)

    assert service.delete_goal(open_id) == [open_id]

    goal = repo.get_by_id(parent)
    assert goal.current_value == 100
    assert goal.status == GoalStatus.COMPLETED


def test_delete_missing_goal(service):
    with pytest.raises(GoalNotFound):
        service.delete_goal(77)


def test_update_goal_keeps_hierarchy_and_status(service, repo):
    parent = service.create_goal(make_goal(title="Parent"))
    child = service.create_sub_goal(parent, make_goal(title="Child"))
    service.update_progress(child, 40)

    edited = make_goal(child, title="Renamed", description="Now with notes", end_date=date(2024, 12, 31))
    goal = service.update_goal(edited)

    assert goal.title == "Renamed"
    assert goal.description == "Now with notes"
    assert goal.parent_id == parent
    assert goal.level == 1
    assert goal.current_value == 40
    assert goal.status == GoalStatus.ACTIVE


def test_timeline_for_goal(service, clock):
    goal_id = service.create_goal(make_goal(
        title="Ship it", start_date=clock.today() - timedelta(days=5), end_date=clock.today() + timedelta(days=5),
    ))
    service.update_progress(goal_id, 60)

    timeline = service.get_timeline(service.repository.get_by_id(goal_id))
    assert timeline.days_elapsed == 5
    assert timeline.days_remaining == 5
    assert timeline.is_on_track


def test_same_tree_shares_a_lock(service, tree):
    root, mid, leaf = tree
    other = service.create_goal(make_goal(title="Other"))

    assert service._tree_lock(leaf) is service._tree_lock(root)
    assert service._tree_lock(other) is not service._tree_lock(root)


def test_concurrent_sibling_completions(service, repo):
    parent = service.create_goal(make_goal(title="Parent"))
    children = [service.create_sub_goal(parent, make_goal(title=f"Step {i}")) for i in range(8)]

    threads = [threading.Thread(target=service.complete_goal, args=(c,)) for c in children]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    goal = repo.get_by_id(parent)
    assert goal.current_value == 100
    assert goal.status == GoalStatus.COMPLETED


class EditRacingRepository(InMemoryGoalRepository):
    """Przed zapisem edycji odpala podpięty callback (np. drugi wątek)."""

    def __init__(self, clock):
        super().__init__(clock=clock)
        self.before_update = None

    def update(self, goal):
        if self.before_update:
            callback, self.before_update = self.before_update, None
            callback()
        super().update(goal)


def test_edit_does_not_undo_concurrent_propagation(clock):
    repo = EditRacingRepository(clock)
    service = GoalService(repo, clock=clock, today=clock.today)
    parent = service.create_goal(make_goal(title="Parent"))
    child = service.create_sub_goal(parent, make_goal(title="Child"))
    worker = threading.Thread(target=service.complete_goal, args=(child,))

    def complete_child_meanwhile():
        worker.start()
        # Wątek czeka na zamek drzewa, więc join kończy się timeoutem
        worker.join(timeout=0.2)

    repo.before_update = complete_child_meanwhile
    service.update_goal(replace(repo.get_by_id(parent), title="Renamed"))
    worker.join()

    goal = repo.get_by_id(parent)
    assert repo.get_by_id(child).status == GoalStatus.COMPLETED
    assert goal.title == "Renamed"
    assert goal.status == GoalStatus.COMPLETED
    assert goal.current_value == 100


def test_update_missing_goal(service):
    with pytest.raises(GoalNotFound):
        service.update_goal(make_goal(404, title="Ghost"))


def test_parallel_work_on_unrelated_roots(service, repo):
    busy = service.create_goal(make_goal(title="Busy"))
    for i in range(300):
        repo.insert(make_goal(title=f"Step {i}", parent_id=busy, level=1))
    errors = []

    def create_roots():
        try:
            for i in range(300):
                service.create_goal(make_goal(title=f"Root {i}"))
        except Exception as e:
            errors.append(e)

    def read_progress():
        try:
            goal = repo.get_by_id(busy)
            for _ in range(300):
                service.calculate_progress(goal)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=create_roots), threading.Thread(target=read_progress)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(repo.get_all()) == 601
