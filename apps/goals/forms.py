from django import forms
from .models import Goal


class GoalForm(forms.ModelForm):
    class Meta:
        model = Goal
        fields = [
            'title', 'description', 'goal_type', 'category',
            'start_date', 'end_date', 'progress_type', 'target_value', 'unit',
        ]
        widgets = {
            'title': forms.TextInput(attrs={'class': 'form-control'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
            'category': forms.Select(attrs={'class': 'form-select'}),
            'start_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'end_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'progress_type': forms.Select(attrs={'class': 'form-select'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Pola z wartością domyślną w modelu nie muszą przychodzić z klienta
        self.fields['category'].required = False
        self.fields['progress_type'].required = False

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get('start_date'), cleaned.get('end_date')
        if start and end and end < start:
            self.add_error('end_date', "End date cannot be before start date")
        if cleaned.get('progress_type') == Goal.ProgressTypeChoices.NUMERIC:
            target = cleaned.get('target_value')
            if target is None or target <= 0:
                self.add_error('target_value', "Numeric goals need a positive target value")
        return cleaned


class SubGoalForm(forms.Form):
    title = forms.CharField(max_length=200)
    description = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 2}))
    progress_type = forms.ChoiceField(
        choices=Goal.ProgressTypeChoices.choices,
        required=False,
    )
    target_value = forms.FloatField(required=False)
    unit = forms.CharField(max_length=20, required=False)


class ProgressForm(forms.Form):
    value = forms.FloatField()


class AbandonForm(forms.Form):
    reason = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 2}))
