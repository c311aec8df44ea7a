# apps/goals/domain/services/goal_service.py
import logging
import threading
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional
from apps.goals.domain.entities import (
    GoalEntity, GoalRecordEntity, GoalRecordType, GoalStatus, GoalTimeline,
    ProgressRecordView, ProgressType, can_transition,
)
from apps.goals.domain.exceptions import (
    GoalHierarchyError, GoalNotFound, GoalValidationError, InvalidStatusTransition,
)
from apps.goals.domain.services.health import HealthScorer
from apps.goals.domain.services.progress import ProgressCalculator
from apps.goals.domain.services.propagation import ProgressPropagator
from apps.goals.ports.repositories import IGoalRepository

logger = logging.getLogger(__name__)

# Jeden zamek na drzewo celów (klucz = ID korzenia).
# Dwie zmiany w tym samym łańcuchu przodków muszą iść po kolei,
# inaczej jedna propagacja nadpisze current_value wyliczone przez drugą.
_tree_locks: Dict[int, threading.RLock] = {}
_registry_lock = threading.Lock()


def _lock_for_root(root_id: int) -> threading.RLock:
    with _registry_lock:
        lock = _tree_locks.get(root_id)
        if lock is None:
            lock = threading.RLock()
            _tree_locks[root_id] = lock
        return lock


def _forget_root(root_id: int):
    with _registry_lock:
        _tree_locks.pop(root_id, None)


class GoalService:
    def __init__(
            self,
            repository: IGoalRepository,
            scorer: HealthScorer = None,
            calculator: ProgressCalculator = None,
            clock: Optional[Callable[[], datetime]] = None,
            today: Optional[Callable[[], date]] = None,
    ):
        self.repository = repository
        self.calculator = calculator or ProgressCalculator()
        self.scorer = scorer or HealthScorer(calculator=self.calculator)
        self.propagator = ProgressPropagator(repository)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.today = today or date.today

    # ----------------------------------------------------
    # Tworzenie / edycja
    # ----------------------------------------------------

    def create_goal(self, goal: GoalEntity) -> int:
        """
        Zapisuje nowy cel (główny lub podcel) i zwraca jego ID.
        Podcel dziedziczy po rodzicu kategorię, typ i okno czasowe.
        """
        if not goal.title or not goal.title.strip():
            raise GoalValidationError("Goal title cannot be empty")

        if goal.parent_id is None:
            self._validate_window(goal)
            goal = replace(goal, id=None, level=0, status=GoalStatus.ACTIVE)
            return self._insert(goal)

        # Podcel bez istniejącego rodzica łamie hierarchię -> twardy błąd
        parent = self.repository.get_by_id(goal.parent_id)
        if parent is None:
            raise GoalValidationError(f"Parent goal {goal.parent_id} does not exist")

        goal = replace(
            goal,
            id=None,
            level=parent.level + 1,
            status=GoalStatus.ACTIVE,
            category=parent.category,
            goal_type=parent.goal_type,
            start_date=parent.start_date,
            end_date=parent.end_date,
        )
        with self._tree_lock(parent.id):
            with self.repository.atomic():
                goal_id = self._insert(goal)
                if not parent.is_multi_level:
                    self.repository.set_multi_level(parent.id, True)
            self._propagate(parent.id)
        return goal_id

    def create_sub_goal(self, parent_id: int, goal: GoalEntity) -> int:
        return self.create_goal(replace(goal, parent_id=parent_id))

    def update_goal(self, goal: GoalEntity) -> GoalEntity:
        """Edycja pól opisowych. Hierarchia, postęp i status zostają bez zmian."""
        if not goal.title or not goal.title.strip():
            raise GoalValidationError("Goal title cannot be empty")
        self._validate_window(goal)

        with self._tree_lock(goal.id):
            # Odczyt pod zamkiem: propagacja nie może wejść między odczyt a zapis
            existing = self._get_or_raise(goal.id)
            updated = replace(
                goal,
                parent_id=existing.parent_id,
                level=existing.level,
                is_multi_level=existing.is_multi_level,
                current_value=existing.current_value,
                status=existing.status,
                abandon_reason=existing.abandon_reason,
                created_at=existing.created_at,
                completed_at=existing.completed_at,
                abandoned_at=existing.abandoned_at,
                updated_at=self.clock(),
            )
            with self.repository.atomic():
                self.repository.update(updated)
            return self.repository.get_by_id(goal.id)

    # ----------------------------------------------------
    # Postęp
    # ----------------------------------------------------

    def update_progress(self, goal_id: int, value: float) -> GoalEntity:
        """Ustawia bezwzględną wartość postępu."""
        return self._apply_progress(goal_id, lambda goal: value)

    def add_progress(self, goal_id: int, change: float) -> GoalEntity:
        """Dodaje zmianę (dodatnią lub ujemną) do bieżącej wartości."""
        return self._apply_progress(goal_id, lambda goal: goal.current_value + change)

    def _apply_progress(self, goal_id: int, new_value: Callable[[GoalEntity], float]) -> GoalEntity:
        with self._tree_lock(goal_id):
            # Odczyt pod zamkiem, żeby add_progress nie zgubił równoległej zmiany
            goal = self._get_or_raise(goal_id)
            previous = goal.current_value
            value = new_value(goal)
            with self.repository.atomic():
                self.repository.update_progress(goal.id, value)
                self._record(goal.id, GoalRecordType.PROGRESS, "Progress update",
                             self._progress_text(goal, previous, value),
                             progress_value=value - previous, previous_value=previous)

                # Auto-ukończenie tylko dla NUMERIC bez podcelów
                if (goal.is_active() and goal.reaches_target(value)
                        and self.repository.count_children(goal.id) == 0):
                    self.repository.update_status(goal.id, GoalStatus.COMPLETED, self.clock())
                    self._record(goal.id, GoalRecordType.COMPLETE, "Goal completed", "Target reached")
                    logger.info("Goal %s reached its target (%s/%s)", goal.id, value, goal.target_value)

            if goal.parent_id is not None:
                self._propagate(goal.parent_id)

        return self.repository.get_by_id(goal.id)

    @staticmethod
    def _progress_text(goal: GoalEntity, previous: float, value: float) -> str:
        if goal.progress_type == ProgressType.NUMERIC:
            return f"{previous:g}{goal.unit} -> {value:g}{goal.unit} ({value - previous:+g}{goal.unit})"
        return f"{previous:g}% -> {value:g}%"

    # ----------------------------------------------------
    # Maszyna stanów
    # ----------------------------------------------------

    def complete_goal(self, goal_id: int) -> GoalEntity:
        return self._transition(goal_id, GoalStatus.COMPLETED, GoalRecordType.COMPLETE, "Goal completed")

    def abandon_goal(self, goal_id: int, reason: str = "") -> GoalEntity:
        return self._transition(goal_id, GoalStatus.ABANDONED, GoalRecordType.ABANDON, "Goal abandoned",
                                reason=reason)

    def reactivate_goal(self, goal_id: int) -> GoalEntity:
        return self._transition(goal_id, GoalStatus.ACTIVE, GoalRecordType.REACTIVATE, "Goal reactivated")

    def archive_goal(self, goal_id: int) -> GoalEntity:
        return self._transition(goal_id, GoalStatus.ARCHIVED, GoalRecordType.ARCHIVE, "Goal archived")

    def _transition(self, goal_id: int, target: GoalStatus, record_type: GoalRecordType, title: str,
                    reason: Optional[str] = None) -> GoalEntity:
        with self._tree_lock(goal_id):
            goal = self._get_or_raise(goal_id)
            if not can_transition(goal.status, target):
                raise InvalidStatusTransition(goal_id, goal.status, target)

            with self.repository.atomic():
                if target == GoalStatus.ABANDONED:
                    self.repository.update(replace(goal, abandon_reason=reason or ""))
                elif target == GoalStatus.ACTIVE and goal.abandon_reason:
                    self.repository.update(replace(goal, abandon_reason=""))
                self.repository.update_status(goal_id, target, self.clock())
                self._record(goal_id, record_type, title, reason or "")

            logger.info("Goal %s: %s -> %s", goal_id, goal.status.value, target.value)

            # Archiwizacja nie propaguje do rodziców
            if goal.parent_id is not None and target != GoalStatus.ARCHIVED:
                self._propagate(goal.parent_id)

        return self.repository.get_by_id(goal_id)

    # ----------------------------------------------------
    # Usuwanie
    # ----------------------------------------------------

    def delete_goal(self, goal_id: int) -> List[int]:
        """Usuwa cel razem z całym poddrzewem; potem przelicza byłego rodzica."""
        with self._tree_lock(goal_id):
            goal = self._get_or_raise(goal_id)
            with self.repository.atomic():
                if self.repository.count_children(goal_id) > 0:
                    deleted = self.repository.delete_with_children(goal_id)
                else:
                    self.repository.delete(goal_id)
                    deleted = [goal_id]
            logger.info("Deleted goal %s (%s goals in subtree)", goal_id, len(deleted))

            if goal.parent_id is not None:
                if self.repository.count_children(goal.parent_id) == 0:
                    self.repository.set_multi_level(goal.parent_id, False)
                self._propagate(goal.parent_id)

        if goal.parent_id is None:
            _forget_root(goal_id)
        return deleted

    # ----------------------------------------------------
    # Obliczenia (bez zapisu)
    # ----------------------------------------------------

    def calculate_progress(self, goal: GoalEntity) -> float:
        if goal.id is None:
            return self.calculator.progress(goal)
        total = self.repository.count_children(goal.id)
        if total == 0:
            return self.calculator.progress(goal)
        completed = self.repository.count_completed_children(goal.id)
        return self.calculator.progress_with_children(goal, total, completed)

    def calculate_health(self, goal: GoalEntity, today: Optional[date] = None) -> int:
        return self.scorer.health(goal, today or self.today(), progress=self.calculate_progress(goal))

    def get_timeline(self, goal: GoalEntity, today: Optional[date] = None) -> GoalTimeline:
        return self.scorer.timeline(goal, today or self.today(), progress=self.calculate_progress(goal))

    def get_progress_records(self, goal_id: int) -> List[ProgressRecordView]:
        records = self.repository.get_records(goal_id)
        result = []
        for r in records:
            if r.record_type != GoalRecordType.PROGRESS:
                continue
            change = r.progress_value or 0.0
            previous = r.previous_value or 0.0
            result.append(ProgressRecordView(
                id=r.id,
                change_value=change,
                previous_value=previous,
                total_value=previous + change,
                title=r.title,
                content=r.content,
                record_date=r.record_date,
                created_at=r.created_at,
            ))
        return result

    # ----------------------------------------------------
    # Pomocnicze
    # ----------------------------------------------------

    @staticmethod
    def _validate_window(goal: GoalEntity):
        if goal.end_date is not None and goal.end_date < goal.start_date:
            raise GoalValidationError("Goal end date cannot be before its start date")

    def _get_or_raise(self, goal_id: Optional[int]) -> GoalEntity:
        goal = self.repository.get_by_id(goal_id) if goal_id is not None else None
        if goal is None:
            raise GoalNotFound(goal_id)
        return goal

    def _insert(self, goal: GoalEntity) -> int:
        now = self.clock()
        goal = replace(goal, created_at=goal.created_at or now, updated_at=now)
        goal_id = self.repository.insert(goal)
        content = f"Sub-goal of goal {goal.parent_id}" if goal.parent_id else ""
        self._record(goal_id, GoalRecordType.START, "Goal created", content)
        logger.info("Created goal %s (level %s)", goal_id, goal.level)
        return goal_id

    def _record(self, goal_id: int, record_type: GoalRecordType, title: str, content: str = "",
                progress_value: Optional[float] = None, previous_value: Optional[float] = None):
        self.repository.add_record(GoalRecordEntity(
            id=None,
            goal_id=goal_id,
            record_type=record_type,
            title=title,
            content=content,
            progress_value=progress_value,
            previous_value=previous_value,
            record_date=self.today(),
            created_at=self.clock(),
        ))

    def _propagate(self, parent_id: int) -> List[int]:
        # Osobna transakcja: błąd propagacji nie cofa zmiany dziecka
        with self.repository.atomic():
            return self.propagator.propagate(parent_id, now=self.clock(), today=self.today())

    def _root_id(self, goal_id: int) -> int:
        visited = set()
        current = self.repository.get_by_id(goal_id)
        if current is None:
            raise GoalNotFound(goal_id)
        while current.parent_id is not None:
            if current.id in visited:
                raise GoalHierarchyError(f"Cycle detected in goal hierarchy at goal {current.id}")
            visited.add(current.id)
            parent = self.repository.get_by_id(current.parent_id)
            if parent is None:
                raise GoalHierarchyError(f"Goal {current.id} references missing parent {current.parent_id}")
            current = parent
        return current.id

    def _tree_lock(self, goal_id: int) -> threading.RLock:
        return _lock_for_root(self._root_id(goal_id))
