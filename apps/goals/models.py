# apps/goals/models.py
from django.db import models
from django.utils import timezone


class Goal(models.Model):
    # TextChoices dla Admina/formularzy; adapter mapuje je na Enumy domenowe
    class StatusChoices(models.TextChoices):
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        ABANDONED = 'abandoned', 'Abandoned'
        ARCHIVED = 'archived', 'Archived'

    class ProgressTypeChoices(models.TextChoices):
        NUMERIC = 'numeric', 'Numeric'
        PERCENTAGE = 'percentage', 'Percentage'

    class CategoryChoices(models.TextChoices):
        CAREER = 'career', 'Career'
        FINANCE = 'finance', 'Finance'
        HEALTH = 'health', 'Health'
        LEARNING = 'learning', 'Learning'
        RELATIONSHIP = 'relationship', 'Relationship'
        LIFESTYLE = 'lifestyle', 'Lifestyle'
        HOBBY = 'hobby', 'Hobby'
        OTHER = 'other', 'Other'

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    # Hierarchia (Podcele). Usunięcie rodzica usuwa całe poddrzewo.
    parent = models.ForeignKey(
        'self',
        null=True, blank=True,
        on_delete=models.CASCADE,
        related_name='children'
    )
    level = models.PositiveIntegerField(default=0, help_text="Głębokość w drzewie (0 = cel główny)")
    is_multi_level = models.BooleanField(default=False)

    category = models.CharField(max_length=20, choices=CategoryChoices.choices, default=CategoryChoices.OTHER)
    goal_type = models.CharField(max_length=50, blank=True)

    # Okno czasowe
    start_date = models.DateField(default=timezone.localdate, blank=True)
    end_date = models.DateField(null=True, blank=True)

    # Postęp
    progress_type = models.CharField(
        max_length=20,
        choices=ProgressTypeChoices.choices,
        default=ProgressTypeChoices.PERCENTAGE
    )
    target_value = models.FloatField(null=True, blank=True)
    current_value = models.FloatField(default=0)
    unit = models.CharField(max_length=20, blank=True)

    status = models.CharField(max_length=20, choices=StatusChoices.choices, default=StatusChoices.ACTIVE)
    abandon_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    abandoned_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['level', 'end_date', 'id']
        indexes = [
            models.Index(fields=['parent', 'status'], name='goal_parent_status_idx'),
        ]

    def __str__(self):
        return self.title


class GoalRecord(models.Model):
    """Historia celu (start, postęp, ukończenie...)."""

    class RecordType(models.TextChoices):
        START = 'start', 'Start'
        PROGRESS = 'progress', 'Progress'
        COMPLETE = 'complete', 'Complete'
        ABANDON = 'abandon', 'Abandon'
        REACTIVATE = 'reactivate', 'Reactivate'
        ARCHIVE = 'archive', 'Archive'

    goal = models.ForeignKey(Goal, on_delete=models.CASCADE, related_name='records')
    record_type = models.CharField(max_length=20, choices=RecordType.choices)
    title = models.CharField(max_length=200, blank=True)
    content = models.TextField(blank=True)

    progress_value = models.FloatField(null=True, blank=True)  # zmiana
    previous_value = models.FloatField(null=True, blank=True)

    record_date = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.goal_id} - {self.record_type} - {self.record_date}"
