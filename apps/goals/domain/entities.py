# apps/goals/domain/entities.py
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Set
from enum import Enum


class GoalStatus(str, Enum):
    ACTIVE = 'active'
    COMPLETED = 'completed'
    ABANDONED = 'abandoned'
    ARCHIVED = 'archived'


class ProgressType(str, Enum):
    NUMERIC = 'numeric'
    PERCENTAGE = 'percentage'


class GoalCategory(str, Enum):
    # Kolejność ma znaczenie: rozstrzyga remisy przy "najaktywniejszej kategorii"
    CAREER = 'career'
    FINANCE = 'finance'
    HEALTH = 'health'
    LEARNING = 'learning'
    RELATIONSHIP = 'relationship'
    LIFESTYLE = 'lifestyle'
    HOBBY = 'hobby'
    OTHER = 'other'


# Nazwa wyświetlana i kolor wykresu dla każdej kategorii
CATEGORY_META: Dict[GoalCategory, Dict[str, str]] = {
    GoalCategory.CAREER: {'name': 'Career', 'color': '#3b82f6'},
    GoalCategory.FINANCE: {'name': 'Finance', 'color': '#10b981'},
    GoalCategory.HEALTH: {'name': 'Health', 'color': '#ef4444'},
    GoalCategory.LEARNING: {'name': 'Learning', 'color': '#8b5cf6'},
    GoalCategory.RELATIONSHIP: {'name': 'Relationship', 'color': '#ec4899'},
    GoalCategory.LIFESTYLE: {'name': 'Lifestyle', 'color': '#f59e0b'},
    GoalCategory.HOBBY: {'name': 'Hobby', 'color': '#06b6d4'},
    GoalCategory.OTHER: {'name': 'Other', 'color': '#cccccc'},
}


class GoalRecordType(str, Enum):
    START = 'start'
    PROGRESS = 'progress'
    COMPLETE = 'complete'
    ABANDON = 'abandon'
    REACTIVATE = 'reactivate'
    ARCHIVE = 'archive'


# Dozwolone przejścia maszyny stanów celu
ALLOWED_TRANSITIONS: Dict[GoalStatus, Set[GoalStatus]] = {
    GoalStatus.ACTIVE: {GoalStatus.COMPLETED, GoalStatus.ABANDONED, GoalStatus.ARCHIVED},
    GoalStatus.COMPLETED: {GoalStatus.ARCHIVED},
    GoalStatus.ABANDONED: {GoalStatus.ACTIVE, GoalStatus.ARCHIVED},
    GoalStatus.ARCHIVED: {GoalStatus.ACTIVE},
}


def can_transition(current: GoalStatus, target: GoalStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


@dataclass
class GoalEntity:
    id: Optional[int]  # None przed zapisem
    title: str
    description: str = ""

    # Hierarchia (tylko ID rodzica, bez obiektów ORM)
    parent_id: Optional[int] = None
    level: int = 0  # 0 = cel główny
    is_multi_level: bool = False

    # Klasyfikacja
    category: GoalCategory = GoalCategory.OTHER
    goal_type: str = ""

    # Okno czasowe (dokładność do dnia)
    start_date: date = field(default_factory=date.today)
    end_date: Optional[date] = None

    # Postęp
    progress_type: ProgressType = ProgressType.PERCENTAGE
    target_value: Optional[float] = None
    current_value: float = 0.0
    unit: str = ""

    status: GoalStatus = GoalStatus.ACTIVE
    abandon_reason: str = ""

    # Znaczniki czasu (aware datetime)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    abandoned_at: Optional[datetime] = None

    def is_root(self) -> bool:
        return self.parent_id is None

    def is_active(self) -> bool:
        return self.status == GoalStatus.ACTIVE

    def reaches_target(self, value: float) -> bool:
        """Czy wartość spełnia cel liczbowy (tylko NUMERIC z dodatnim celem)."""
        if self.progress_type != ProgressType.NUMERIC:
            return False
        return bool(self.target_value) and self.target_value > 0 and value >= self.target_value


@dataclass
class GoalRecordEntity:
    id: Optional[int]
    goal_id: int
    record_type: GoalRecordType
    title: str = ""
    content: str = ""
    progress_value: Optional[float] = None  # zmiana
    previous_value: Optional[float] = None
    record_date: Optional[date] = None
    created_at: Optional[datetime] = None


# ----------------------------------------------------
# Encje wyliczane (nie są zapisywane)
# ----------------------------------------------------

@dataclass
class GoalStatistics:
    active_count: int = 0
    completed_count: int = 0
    abandoned_count: int = 0
    total_progress: float = 0.0  # średni postęp aktywnych celów (0-1)


@dataclass
class CategoryGoalStats:
    category: GoalCategory
    category_name: str
    total_count: int
    completed_count: int
    active_count: int
    completion_rate: float
    color: str


@dataclass
class MonthlyGoalStats:
    year_month: int  # np. 202401
    month_label: str
    created_count: int
    completed_count: int
    abandoned_count: int


@dataclass
class GoalStreakData:
    current_streak: int = 0
    longest_streak: int = 0
    total_completion_days: int = 0
    last_completion_date: Optional[date] = None


@dataclass
class GoalInsights:
    total_goals: int = 0
    active_goals: int = 0
    completed_goals: int = 0
    abandoned_goals: int = 0
    completion_rate: float = 0.0
    average_completion_days: int = 0
    most_active_category: Optional[GoalCategory] = None
    category_stats: List[CategoryGoalStats] = field(default_factory=list)
    monthly_stats: List[MonthlyGoalStats] = field(default_factory=list)
    upcoming_deadlines: List[GoalEntity] = field(default_factory=list)
    overdue_goals: List[GoalEntity] = field(default_factory=list)
    streak_data: GoalStreakData = field(default_factory=GoalStreakData)


@dataclass
class GoalTimeline:
    goal_id: Optional[int]
    start_date: date
    end_date: Optional[date]
    current_progress: float
    days_elapsed: int
    days_remaining: Optional[int]
    expected_progress: float  # oczekiwany postęp wg upływu czasu
    is_on_track: bool


@dataclass
class GoalTreeNode:
    goal: GoalEntity
    level: int
    children: List['GoalTreeNode'] = field(default_factory=list)
    child_count: int = 0
    progress: float = 0.0
    is_expanded: bool = False


@dataclass
class ProgressRecordView:
    """Wpis historii postępu z sumą bieżącą (dla widoku szczegółów)."""
    id: Optional[int]
    change_value: float
    previous_value: float
    total_value: float
    title: str
    content: str
    record_date: Optional[date]
    created_at: Optional[datetime]
