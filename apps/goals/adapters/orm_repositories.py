# apps/goals/adapters/orm_repositories.py
from datetime import datetime
from typing import List, Optional
from django.db import transaction
from django.utils import timezone
from apps.goals.domain.entities import (
    GoalCategory, GoalEntity, GoalRecordEntity, GoalRecordType, GoalStatus, ProgressType,
)
from apps.goals.ports.repositories import IGoalRepository
from apps.goals.models import Goal as GoalModel, GoalRecord as GoalRecordModel


class DjangoGoalRepository(IGoalRepository):
    def to_entity(self, model: GoalModel) -> GoalEntity:
        """Konwertuje Model Django -> Czystą Encję."""
        return GoalEntity(
            id=model.id,
            title=model.title,
            description=model.description,
            parent_id=model.parent_id,
            level=model.level,
            is_multi_level=model.is_multi_level,
            category=GoalCategory(model.category),
            goal_type=model.goal_type,
            start_date=model.start_date,
            end_date=model.end_date,
            progress_type=ProgressType(model.progress_type),
            target_value=model.target_value,
            current_value=model.current_value,
            unit=model.unit,
            status=GoalStatus(model.status),
            abandon_reason=model.abandon_reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
            completed_at=model.completed_at,
            abandoned_at=model.abandoned_at,
        )

    def record_to_entity(self, model: GoalRecordModel) -> GoalRecordEntity:
        return GoalRecordEntity(
            id=model.id,
            goal_id=model.goal_id,
            record_type=GoalRecordType(model.record_type),
            title=model.title,
            content=model.content,
            progress_value=model.progress_value,
            previous_value=model.previous_value,
            record_date=model.record_date,
            created_at=model.created_at,
        )

    def _data(self, goal: GoalEntity) -> dict:
        return {
            'title': goal.title,
            'description': goal.description,
            'parent_id': goal.parent_id,
            'level': goal.level,
            'is_multi_level': goal.is_multi_level,
            'category': goal.category.value,
            'goal_type': goal.goal_type,
            'start_date': goal.start_date,
            'end_date': goal.end_date,
            'progress_type': goal.progress_type.value,
            'target_value': goal.target_value,
            'current_value': goal.current_value,
            'unit': goal.unit,
            'status': goal.status.value,
            'abandon_reason': goal.abandon_reason,
            'completed_at': goal.completed_at,
            'abandoned_at': goal.abandoned_at,
        }

    def get_by_id(self, goal_id: int) -> Optional[GoalEntity]:
        try:
            return self.to_entity(GoalModel.objects.get(id=goal_id))
        except GoalModel.DoesNotExist:
            return None

    def get_children(self, parent_id: int) -> List[GoalEntity]:
        return [self.to_entity(g) for g in GoalModel.objects.filter(parent_id=parent_id)]

    def count_children(self, parent_id: int) -> int:
        return GoalModel.objects.filter(parent_id=parent_id).count()

    def count_completed_children(self, parent_id: int) -> int:
        return GoalModel.objects.filter(parent_id=parent_id, status=GoalStatus.COMPLETED.value).count()

    def get_all(self) -> List[GoalEntity]:
        return [self.to_entity(g) for g in GoalModel.objects.all()]

    def insert(self, goal: GoalEntity) -> int:
        now = timezone.now()
        obj = GoalModel.objects.create(
            created_at=goal.created_at or now,
            updated_at=goal.updated_at or now,
            **self._data(goal)
        )
        return obj.id

    def update(self, goal: GoalEntity) -> None:
        # .update() omija save(), więc updated_at ustawiamy ręcznie
        GoalModel.objects.filter(id=goal.id).update(updated_at=timezone.now(), **self._data(goal))

    def update_progress(self, goal_id: int, value: float) -> None:
        GoalModel.objects.filter(id=goal_id).update(current_value=value, updated_at=timezone.now())

    def update_status(self, goal_id: int, status: GoalStatus, changed_at: Optional[datetime] = None) -> None:
        changed_at = changed_at or timezone.now()
        data = {'status': status.value, 'updated_at': changed_at}
        if status == GoalStatus.COMPLETED:
            data['completed_at'] = changed_at
        elif status == GoalStatus.ABANDONED:
            data['abandoned_at'] = changed_at
        GoalModel.objects.filter(id=goal_id).update(**data)

    def set_multi_level(self, goal_id: int, is_multi_level: bool) -> None:
        GoalModel.objects.filter(id=goal_id).update(is_multi_level=is_multi_level)

    def delete(self, goal_id: int) -> None:
        GoalModel.objects.filter(id=goal_id).delete()

    def delete_with_children(self, goal_id: int) -> List[int]:
        if not GoalModel.objects.filter(id=goal_id).exists():
            return []

        # Zbieramy ID poddrzewa poziom po poziomie (jedno zapytanie na poziom)
        to_delete = [goal_id]
        frontier = [goal_id]
        while frontier:
            frontier = [
                gid for gid in GoalModel.objects.filter(parent_id__in=frontier).values_list('id', flat=True)
                if gid not in to_delete
            ]
            to_delete.extend(frontier)

        # Rekordy historii lecą kaskadowo (FK on_delete=CASCADE)
        GoalModel.objects.filter(id__in=to_delete).delete()
        return to_delete

    def add_record(self, record: GoalRecordEntity) -> int:
        data = {
            'goal_id': record.goal_id,
            'record_type': record.record_type.value,
            'title': record.title,
            'content': record.content,
            'progress_value': record.progress_value,
            'previous_value': record.previous_value,
        }
        if record.record_date:
            data['record_date'] = record.record_date
        if record.created_at:
            data['created_at'] = record.created_at
        return GoalRecordModel.objects.create(**data).id

    def get_records(self, goal_id: int) -> List[GoalRecordEntity]:
        qs = GoalRecordModel.objects.filter(goal_id=goal_id).order_by('-created_at', '-id')
        return [self.record_to_entity(r) for r in qs]

    def atomic(self):
        return transaction.atomic()
