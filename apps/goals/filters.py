import django_filters
from django import forms
from .models import Goal


class GoalFilter(django_filters.FilterSet):
    title = django_filters.CharFilter(
        lookup_expr='icontains',
        label="Title contains",
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Search...'})
    )
    status = django_filters.ChoiceFilter(
        choices=Goal.StatusChoices.choices,
        label="Status",
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    category = django_filters.ChoiceFilter(
        choices=Goal.CategoryChoices.choices,
        label="Category",
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    # ?root=true -> tylko cele główne
    root = django_filters.BooleanFilter(
        field_name='parent',
        lookup_expr='isnull',
        label="Top-level only"
    )
    ends_before = django_filters.DateFilter(
        field_name='end_date',
        lookup_expr='lte',
        label="Deadline before",
        widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'})
    )

    class Meta:
        model = Goal
        fields = ['parent', 'level']
