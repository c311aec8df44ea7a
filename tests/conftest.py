import pytest
from apps.goals.adapters.memory_repositories import InMemoryGoalRepository
from apps.goals.domain.services import GoalService
from tests.helpers import FakeClock, make_goal


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo(clock):
    return InMemoryGoalRepository(clock=clock)


@pytest.fixture
def service(repo, clock):
    return GoalService(repo, clock=clock, today=clock.today)


@pytest.fixture
def tree(service):
    """root -> mid -> leaf (każdy poziom ma jedno dziecko)."""
    root = service.create_goal(make_goal(title="Root"))
    mid = service.create_sub_goal(root, make_goal(title="Mid"))
    leaf = service.create_sub_goal(mid, make_goal(title="Leaf"))
    return root, mid, leaf
