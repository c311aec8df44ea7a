# apps/goals/domain/services/propagation.py
import logging
from datetime import date, datetime
from typing import List, Optional
from apps.goals.domain.entities import GoalEntity, GoalRecordEntity, GoalRecordType, GoalStatus
from apps.goals.domain.exceptions import GoalHierarchyError
from apps.goals.ports.repositories import IGoalRepository

logger = logging.getLogger(__name__)


class ProgressPropagator:
    def __init__(self, repository: IGoalRepository):
        self.repository = repository

    def propagate(self, parent_id: Optional[int], now: Optional[datetime] = None,
                  today: Optional[date] = None) -> List[int]:
        """
        Przelicza postęp rodzica na podstawie ukończonych dzieci i idzie w górę drzewa.
        Zwraca ID przeliczonych przodków (od najniższego).

        Pętla zamiast rekurencji + zbiór odwiedzonych ID:
        cykl w parent_id to błąd integralności, a nie nieskończona pętla.
        """
        updated = []
        visited = set()
        current_id = parent_id

        while current_id is not None:
            if current_id in visited:
                logger.error("Cycle detected in goal hierarchy at goal %s (chain: %s)", current_id, updated)
                raise GoalHierarchyError(f"Cycle detected in goal hierarchy at goal {current_id}")
            visited.add(current_id)

            # 1. Brak dzieci -> nie ma czego propagować
            total = self.repository.count_children(current_id)
            if total == 0:
                break

            # Rodzic usunięty w międzyczasie (np. kaskadowe usuwanie) -> no-op
            parent = self.repository.get_by_id(current_id)
            if parent is None:
                logger.debug("Propagation stopped: goal %s no longer exists", current_id)
                break

            # 2-3. Procent ukończonych dzieci staje się current_value rodzica
            completed = self.repository.count_completed_children(current_id)
            percentage = (completed / total) * 100
            self.repository.update_progress(current_id, percentage)
            updated.append(current_id)
            logger.debug("Goal %s progress set to %.1f%% (%s/%s children)", current_id, percentage, completed, total)

            # 5. Nie wszystkie ukończone -> zatrzymujemy się na tym poziomie.
            # Status rodzica nie jest cofany, nawet jeśli wcześniej był COMPLETED.
            if completed < total:
                break

            # 4. Wszystkie ukończone -> rodzic przechodzi w COMPLETED i idziemy wyżej
            if not self._complete(parent, now, today):
                break
            current_id = parent.parent_id

        return updated

    def _complete(self, parent: GoalEntity, now: Optional[datetime], today: Optional[date]) -> bool:
        """Zwraca True, jeśli rodzic jest (teraz) ukończony i propagacja może iść wyżej."""
        if parent.status == GoalStatus.COMPLETED:
            return True

        if parent.status != GoalStatus.ACTIVE:
            # ABANDONED / ARCHIVED nie przechodzą automatycznie w COMPLETED
            logger.info("Goal %s has all sub-goals completed but is %s; leaving status unchanged",
                        parent.id, parent.status.value)
            return False

        self.repository.update_status(parent.id, GoalStatus.COMPLETED, now)
        self.repository.add_record(GoalRecordEntity(
            id=None,
            goal_id=parent.id,
            record_type=GoalRecordType.COMPLETE,
            title="Goal completed",
            content="All sub-goals completed",
            record_date=today or (now.date() if now else None),
        ))
        logger.info("AUTO-COMPLETE: goal %s completed by its sub-goals", parent.id)
        return True
