from apps.goals.domain.services.progress import ProgressCalculator
from apps.goals.domain.services.propagation import ProgressPropagator
from apps.goals.domain.services.health import HealthScorer, expected_progress, remaining_days
from apps.goals.domain.services.streak import StreakCalculator
from apps.goals.domain.services.insights import InsightsAggregator
from apps.goals.domain.services.tree import build_goal_tree, flatten_tree
from apps.goals.domain.services.goal_service import GoalService

__all__ = [
    'ProgressCalculator',
    'ProgressPropagator',
    'HealthScorer',
    'expected_progress',
    'remaining_days',
    'StreakCalculator',
    'InsightsAggregator',
    'build_goal_tree',
    'flatten_tree',
    'GoalService',
]
