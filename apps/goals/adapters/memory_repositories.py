# apps/goals/adapters/memory_repositories.py
import itertools
import threading
from contextlib import nullcontext
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional
from apps.goals.domain.entities import GoalEntity, GoalRecordEntity, GoalStatus
from apps.goals.ports.repositories import IGoalRepository


class InMemoryGoalRepository(IGoalRepository):
    """
    Repozytorium w pamięci (testy, symulacje).
    Zwraca kopie encji, żeby wywołujący nie zmieniał stanu "bazy" bez zapisu.
    Wszystkie operacje pod jednym zamkiem: zamki serwisu obejmują tylko jedno drzewo.
    """

    def __init__(self, clock=None):
        self._goals: Dict[int, GoalEntity] = {}
        self._records: Dict[int, GoalRecordEntity] = {}
        self._goal_ids = itertools.count(1)
        self._record_ids = itertools.count(1)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.RLock()

    def get_by_id(self, goal_id: int) -> Optional[GoalEntity]:
        with self._lock:
            goal = self._goals.get(goal_id)
            return replace(goal) if goal else None

    def get_children(self, parent_id: int) -> List[GoalEntity]:
        with self._lock:
            return [replace(g) for g in self._goals.values() if g.parent_id == parent_id]

    def count_children(self, parent_id: int) -> int:
        with self._lock:
            return sum(1 for g in self._goals.values() if g.parent_id == parent_id)

    def count_completed_children(self, parent_id: int) -> int:
        with self._lock:
            return sum(
                1 for g in self._goals.values()
                if g.parent_id == parent_id and g.status == GoalStatus.COMPLETED
            )

    def get_all(self) -> List[GoalEntity]:
        with self._lock:
            return [replace(g) for g in self._goals.values()]

    def insert(self, goal: GoalEntity) -> int:
        with self._lock:
            now = self._clock()
            goal_id = next(self._goal_ids)
            self._goals[goal_id] = replace(
                goal,
                id=goal_id,
                created_at=goal.created_at or now,
                updated_at=goal.updated_at or now,
            )
            return goal_id

    def update(self, goal: GoalEntity) -> None:
        with self._lock:
            if goal.id not in self._goals:
                return
            self._goals[goal.id] = replace(goal, updated_at=self._clock())

    def update_progress(self, goal_id: int, value: float) -> None:
        with self._lock:
            goal = self._goals.get(goal_id)
            if goal:
                goal.current_value = value
                goal.updated_at = self._clock()

    def update_status(self, goal_id: int, status: GoalStatus, changed_at: Optional[datetime] = None) -> None:
        with self._lock:
            goal = self._goals.get(goal_id)
            if not goal:
                return
            changed_at = changed_at or self._clock()
            goal.status = status
            goal.updated_at = changed_at
            if status == GoalStatus.COMPLETED:
                goal.completed_at = changed_at
            elif status == GoalStatus.ABANDONED:
                goal.abandoned_at = changed_at

    def set_multi_level(self, goal_id: int, is_multi_level: bool) -> None:
        with self._lock:
            goal = self._goals.get(goal_id)
            if goal:
                goal.is_multi_level = is_multi_level

    def delete(self, goal_id: int) -> None:
        with self._lock:
            if self._goals.pop(goal_id, None) is not None:
                self._drop_records([goal_id])

    def delete_with_children(self, goal_id: int) -> List[int]:
        with self._lock:
            if goal_id not in self._goals:
                return []

            # Zbieramy poddrzewo iteracyjnie (BFS), z ochroną przed cyklem
            to_delete = [goal_id]
            seen = {goal_id}
            i = 0
            while i < len(to_delete):
                current = to_delete[i]
                for g in self._goals.values():
                    if g.parent_id == current and g.id not in seen:
                        seen.add(g.id)
                        to_delete.append(g.id)
                i += 1

            for gid in to_delete:
                self._goals.pop(gid, None)
            self._drop_records(to_delete)
            return to_delete

    def add_record(self, record: GoalRecordEntity) -> int:
        with self._lock:
            record_id = next(self._record_ids)
            self._records[record_id] = replace(record, id=record_id, created_at=record.created_at or self._clock())
            return record_id

    def get_records(self, goal_id: int) -> List[GoalRecordEntity]:
        with self._lock:
            records = [replace(r) for r in self._records.values() if r.goal_id == goal_id]
        # Od najnowszych; ID rozstrzyga remis przy tym samym znaczniku czasu
        records.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return records

    def atomic(self):
        return nullcontext()

    def _drop_records(self, goal_ids):
        ids = set(goal_ids)
        self._records = {rid: r for rid, r in self._records.items() if r.goal_id not in ids}
