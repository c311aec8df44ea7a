# apps/goals/ports/repositories.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import ContextManager, List, Optional
from apps.goals.domain.entities import GoalEntity, GoalRecordEntity, GoalStatus


class IGoalRepository(ABC):
    @abstractmethod
    def get_by_id(self, goal_id: int) -> Optional[GoalEntity]:
        pass

    @abstractmethod
    def get_children(self, parent_id: int) -> List[GoalEntity]:
        pass

    @abstractmethod
    def count_children(self, parent_id: int) -> int:
        pass

    @abstractmethod
    def count_completed_children(self, parent_id: int) -> int:
        pass

    @abstractmethod
    def get_all(self) -> List[GoalEntity]:
        """Pełny snapshot wszystkich celów (dla analityki)."""
        pass

    @abstractmethod
    def insert(self, goal: GoalEntity) -> int:
        """Zapisuje nowy cel i zwraca jego ID."""
        pass

    @abstractmethod
    def update(self, goal: GoalEntity) -> None:
        pass

    @abstractmethod
    def update_progress(self, goal_id: int, value: float) -> None:
        pass

    @abstractmethod
    def update_status(self, goal_id: int, status: GoalStatus, changed_at: Optional[datetime] = None) -> None:
        """Zmienia status; COMPLETED ustawia completed_at, ABANDONED ustawia abandoned_at."""
        pass

    @abstractmethod
    def set_multi_level(self, goal_id: int, is_multi_level: bool) -> None:
        pass

    @abstractmethod
    def delete(self, goal_id: int) -> None:
        pass

    @abstractmethod
    def delete_with_children(self, goal_id: int) -> List[int]:
        """Usuwa całe poddrzewo i zwraca ID usuniętych celów."""
        pass

    @abstractmethod
    def add_record(self, record: GoalRecordEntity) -> int:
        pass

    @abstractmethod
    def get_records(self, goal_id: int) -> List[GoalRecordEntity]:
        """Historia celu, od najnowszych."""
        pass

    @abstractmethod
    def atomic(self) -> ContextManager:
        """Jednostka pracy: łańcuch propagacji zapisuje się w całości albo wcale."""
        pass
