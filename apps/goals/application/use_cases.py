# apps/goals/application/use_cases.py
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from django.utils import timezone
from apps.goals.conf import goal_setting, health_weights, user_timezone
from apps.goals.domain.entities import (
    GoalCategory, GoalEntity, GoalInsights, GoalStatistics, GoalTreeNode, ProgressType,
)
from apps.goals.domain.exceptions import GoalValidationError
from apps.goals.domain.services import (
    GoalService, HealthScorer, InsightsAggregator, ProgressCalculator, StreakCalculator,
    build_goal_tree, flatten_tree,
)
from apps.goals.ports.repositories import IGoalRepository


def build_goal_service(repository: IGoalRepository) -> GoalService:
    """Złożenie serwisu z ustawieniami Django (Manual Dependency Injection)."""
    calculator = ProgressCalculator()
    return GoalService(
        repository,
        scorer=HealthScorer(weights=health_weights(), calculator=calculator),
        calculator=calculator,
        clock=timezone.now,
        today=timezone.localdate,
    )


@dataclass
class CreateGoalInput:
    title: str
    description: str = ""
    goal_type: str = ""
    category: GoalCategory = GoalCategory.OTHER
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    progress_type: ProgressType = ProgressType.PERCENTAGE
    target_value: Optional[float] = None
    unit: str = ""


@dataclass
class CreateSubGoalInput:
    title: str
    description: str = ""
    progress_type: ProgressType = ProgressType.PERCENTAGE
    target_value: Optional[float] = None
    unit: str = ""


def _validate_target(progress_type: ProgressType, target_value: Optional[float]):
    if progress_type == ProgressType.NUMERIC and (target_value is None or target_value <= 0):
        raise GoalValidationError("Numeric goals need a positive target value")


class CreateGoalUseCase:
    def __init__(self, service: GoalService):
        self.service = service

    def execute(self, input_dto: CreateGoalInput) -> int:
        _validate_target(input_dto.progress_type, input_dto.target_value)

        goal = GoalEntity(
            id=None,
            title=input_dto.title,
            description=input_dto.description,
            goal_type=input_dto.goal_type,
            category=input_dto.category,
            start_date=input_dto.start_date or self.service.today(),
            end_date=input_dto.end_date,
            progress_type=input_dto.progress_type,
            target_value=input_dto.target_value,
            unit=input_dto.unit,
        )
        return self.service.create_goal(goal)


class CreateSubGoalUseCase:
    def __init__(self, service: GoalService):
        self.service = service

    def execute(self, parent_id: int, input_dto: CreateSubGoalInput) -> int:
        _validate_target(input_dto.progress_type, input_dto.target_value)

        goal = GoalEntity(
            id=None,
            title=input_dto.title,
            description=input_dto.description,
            progress_type=input_dto.progress_type,
            target_value=input_dto.target_value,
            unit=input_dto.unit,
        )
        return self.service.create_sub_goal(parent_id, goal)


class CreateGoalWithSubGoalsUseCase:
    """Cel wielopoziomowy: najpierw rodzic, potem podcele (poziom 1)."""

    def __init__(self, service: GoalService):
        self.service = service

    def execute(self, input_dto: CreateGoalInput, sub_goals: List[CreateSubGoalInput]) -> int:
        # Walidujemy wszystko przed pierwszym zapisem
        _validate_target(input_dto.progress_type, input_dto.target_value)
        for sub in sub_goals:
            _validate_target(sub.progress_type, sub.target_value)
            if not sub.title or not sub.title.strip():
                raise GoalValidationError("Sub-goal title cannot be empty")

        parent_id = CreateGoalUseCase(self.service).execute(input_dto)
        sub_case = CreateSubGoalUseCase(self.service)
        for sub in sub_goals:
            sub_case.execute(parent_id, sub)
        return parent_id


@dataclass
class GoalReport:
    insights: GoalInsights
    statistics: GoalStatistics
    today: date


class GoalReportService:
    """Zapytania analityczne - tylko odczyt, bez zamków (snapshot może być lekko nieaktualny)."""

    def __init__(self, repository: IGoalRepository):
        self.repository = repository
        self.calculator = ProgressCalculator()
        self.aggregator = InsightsAggregator(
            upcoming_days=goal_setting('UPCOMING_DEADLINE_DAYS'),
            months=goal_setting('MONTHLY_STATS_MONTHS'),
            tz=user_timezone(),
            calculator=self.calculator,
            streaks=StreakCalculator(grace_days=goal_setting('STREAK_GRACE_DAYS')),
        )

    def get_insights(self, today: Optional[date] = None) -> GoalInsights:
        return self.aggregator.insights(self.repository.get_all(), today or timezone.localdate())

    def get_statistics(self) -> GoalStatistics:
        return self.aggregator.statistics(self.repository.get_all())

    def get_tree(self, expanded_ids: Optional[set] = None, flat: bool = False) -> List[GoalTreeNode]:
        tree = build_goal_tree(self.repository.get_all(), self.calculator)
        if flat:
            return flatten_tree(tree, expanded_ids)
        return tree

    def get_report(self, today: Optional[date] = None) -> GoalReport:
        today = today or timezone.localdate()
        goals = self.repository.get_all()
        return GoalReport(
            insights=self.aggregator.insights(goals, today),
            statistics=self.aggregator.statistics(goals),
            today=today,
        )
