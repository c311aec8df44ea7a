import functools
import logging
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_http_methods
from apps.goals.domain.entities import GoalCategory, GoalEntity, ProgressType
from apps.goals.domain.exceptions import GoalHierarchyError, GoalNotFound, GoalValidationError
from .adapters.orm_repositories import DjangoGoalRepository
from .application.use_cases import (
    CreateGoalInput, CreateGoalUseCase, CreateSubGoalInput, CreateSubGoalUseCase,
    GoalReportService, build_goal_service,
)
from .filters import GoalFilter
from .forms import AbandonForm, GoalForm, ProgressForm, SubGoalForm
from .models import Goal

logger = logging.getLogger(__name__)


def goal_api(view):
    """Mapuje błędy domenowe na odpowiedzi JSON (404 / 400 / 409)."""
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except GoalNotFound as e:
            return JsonResponse({'detail': str(e)}, status=404)
        except GoalValidationError as e:
            return JsonResponse({'detail': str(e)}, status=400)
        except GoalHierarchyError as e:
            logger.error("Goal hierarchy integrity error: %s | Path: %s", e, request.path)
            return JsonResponse({'detail': str(e)}, status=409)
    return wrapper


def _service():
    # Manual Dependency Injection
    return build_goal_service(DjangoGoalRepository())


def _date(value):
    return value.isoformat() if value else None


def goal_to_dict(goal: GoalEntity, service=None) -> dict:
    data = {
        'id': goal.id,
        'title': goal.title,
        'description': goal.description,
        'parent_id': goal.parent_id,
        'level': goal.level,
        'is_multi_level': goal.is_multi_level,
        'category': goal.category.value,
        'goal_type': goal.goal_type,
        'start_date': _date(goal.start_date),
        'end_date': _date(goal.end_date),
        'progress_type': goal.progress_type.value,
        'target_value': goal.target_value,
        'current_value': goal.current_value,
        'unit': goal.unit,
        'status': goal.status.value,
        'abandon_reason': goal.abandon_reason,
        'created_at': _date(goal.created_at),
        'completed_at': _date(goal.completed_at),
        'abandoned_at': _date(goal.abandoned_at),
    }
    if service is not None:
        data['progress'] = round(service.calculate_progress(goal), 4)
        data['health'] = service.calculate_health(goal)
    return data


def _errors(form):
    return JsonResponse({'detail': "Validation Error", 'errors': form.errors.get_json_data()}, status=400)


@require_GET
@login_required
@goal_api
def goal_list_view(request):
    """Lista celów z postępem i zdrowiem (filtry jak w wyszukiwarce zadań)."""
    qs = Goal.objects.all().order_by('level', 'end_date', 'id')
    f = GoalFilter(request.GET, queryset=qs)
    if not f.is_valid():
        return JsonResponse({'detail': "Invalid filter", 'errors': f.errors.get_json_data()}, status=400)

    repo = DjangoGoalRepository()
    service = build_goal_service(repo)
    goals = [goal_to_dict(repo.to_entity(g), service) for g in f.qs]
    return JsonResponse({'goals': goals})


@require_GET
@login_required
@goal_api
def goal_detail_view(request, pk):
    service = _service()
    goal = service.repository.get_by_id(pk)
    if goal is None:
        raise GoalNotFound(pk)

    timeline = service.get_timeline(goal)
    data = goal_to_dict(goal, service)
    data['children'] = [goal_to_dict(c, service) for c in service.repository.get_children(pk)]
    data['timeline'] = {
        'days_elapsed': timeline.days_elapsed,
        'days_remaining': timeline.days_remaining,
        'expected_progress': round(timeline.expected_progress, 4),
        'is_on_track': timeline.is_on_track,
    }
    data['progress_records'] = [
        {
            'change_value': r.change_value,
            'previous_value': r.previous_value,
            'total_value': r.total_value,
            'content': r.content,
            'record_date': _date(r.record_date),
        }
        for r in service.get_progress_records(pk)
    ]
    return JsonResponse(data)


@require_GET
@login_required
@goal_api
def goal_tree_view(request):
    """Drzewo celów; ?expanded=1,2,3 zwraca spłaszczoną listę widocznych wierszy."""
    report = GoalReportService(DjangoGoalRepository())

    def node_to_dict(node):
        return {
            'id': node.goal.id,
            'title': node.goal.title,
            'status': node.goal.status.value,
            'level': node.level,
            'child_count': node.child_count,
            'progress': round(node.progress, 4),
            'children': [node_to_dict(c) for c in node.children],
        }

    expanded = request.GET.get('expanded')
    if expanded is not None:
        try:
            expanded_ids = {int(x) for x in expanded.split(',') if x.strip()}
        except ValueError:
            raise GoalValidationError("expanded must be a comma separated list of goal ids")
        rows = report.get_tree(expanded_ids, flat=True)
        return JsonResponse({'rows': [
            {
                'id': n.goal.id,
                'title': n.goal.title,
                'level': n.level,
                'child_count': n.child_count,
                'progress': round(n.progress, 4),
                'is_expanded': n.is_expanded,
            }
            for n in rows
        ]})

    return JsonResponse({'tree': [node_to_dict(n) for n in report.get_tree()]})


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_create_view(request):
    form = GoalForm(request.POST)
    if not form.is_valid():
        return _errors(form)

    data = form.cleaned_data
    input_dto = CreateGoalInput(
        title=data['title'],
        description=data.get('description') or "",
        goal_type=data.get('goal_type') or "",
        category=GoalCategory(data['category']) if data.get('category') else GoalCategory.OTHER,
        start_date=data.get('start_date'),
        end_date=data.get('end_date'),
        progress_type=ProgressType(data['progress_type']) if data.get('progress_type') else ProgressType.PERCENTAGE,
        target_value=data.get('target_value'),
        unit=data.get('unit') or "",
    )

    service = _service()
    goal_id = CreateGoalUseCase(service).execute(input_dto)
    return JsonResponse(goal_to_dict(service.repository.get_by_id(goal_id), service), status=201)


@require_http_methods(["POST"])
@login_required
@goal_api
def sub_goal_create_view(request, pk):
    form = SubGoalForm(request.POST)
    if not form.is_valid():
        return _errors(form)

    data = form.cleaned_data
    input_dto = CreateSubGoalInput(
        title=data['title'],
        description=data.get('description') or "",
        progress_type=ProgressType(data['progress_type']) if data.get('progress_type') else ProgressType.PERCENTAGE,
        target_value=data.get('target_value'),
        unit=data.get('unit') or "",
    )

    service = _service()
    goal_id = CreateSubGoalUseCase(service).execute(pk, input_dto)
    return JsonResponse(goal_to_dict(service.repository.get_by_id(goal_id), service), status=201)


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_edit_view(request, pk):
    service = _service()
    existing = service.repository.get_by_id(pk)
    if existing is None:
        raise GoalNotFound(pk)

    form = GoalForm(request.POST)
    if not form.is_valid():
        return _errors(form)

    data = form.cleaned_data
    edited = GoalEntity(
        id=pk,
        title=data['title'],
        description=data.get('description') or "",
        goal_type=data.get('goal_type') or "",
        category=GoalCategory(data['category']) if data.get('category') else existing.category,
        start_date=data.get('start_date') or existing.start_date,
        end_date=data.get('end_date'),
        progress_type=ProgressType(data['progress_type']) if data.get('progress_type') else existing.progress_type,
        target_value=data.get('target_value'),
        unit=data.get('unit') or "",
    )
    goal = service.update_goal(edited)
    return JsonResponse(goal_to_dict(goal, service))


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_progress_view(request, pk):
    """Ustawia bezwzględną wartość postępu."""
    form = ProgressForm(request.POST)
    if not form.is_valid():
        return _errors(form)

    service = _service()
    goal = service.update_progress(pk, form.cleaned_data['value'])
    return JsonResponse(goal_to_dict(goal, service))


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_add_progress_view(request, pk):
    """Dodaje zmianę do bieżącej wartości (tryb przyrostowy)."""
    form = ProgressForm(request.POST)
    if not form.is_valid():
        return _errors(form)

    service = _service()
    goal = service.add_progress(pk, form.cleaned_data['value'])
    return JsonResponse(goal_to_dict(goal, service))


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_complete_view(request, pk):
    service = _service()
    return JsonResponse(goal_to_dict(service.complete_goal(pk), service))


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_abandon_view(request, pk):
    form = AbandonForm(request.POST)
    if not form.is_valid():
        return _errors(form)

    service = _service()
    goal = service.abandon_goal(pk, reason=form.cleaned_data.get('reason') or "")
    return JsonResponse(goal_to_dict(goal, service))


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_reactivate_view(request, pk):
    service = _service()
    return JsonResponse(goal_to_dict(service.reactivate_goal(pk), service))


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_archive_view(request, pk):
    service = _service()
    return JsonResponse(goal_to_dict(service.archive_goal(pk), service))


@require_http_methods(["POST"])
@login_required
@goal_api
def goal_delete_view(request, pk):
    deleted = _service().delete_goal(pk)
    return JsonResponse({'deleted': deleted})


@require_GET
@login_required
@goal_api
def goal_insights_view(request):
    """
    API zwracające dane do wykresów (kategorie, kohorty miesięczne, terminy, serie).
    """
    insights = GoalReportService(DjangoGoalRepository()).get_insights()

    def deadline(goal):
        return {'id': goal.id, 'title': goal.title, 'end_date': _date(goal.end_date)}

    streak = insights.streak_data
    return JsonResponse({
        'total_goals': insights.total_goals,
        'active_goals': insights.active_goals,
        'completed_goals': insights.completed_goals,
        'abandoned_goals': insights.abandoned_goals,
        'completion_rate': round(insights.completion_rate, 4),
        'average_completion_days': insights.average_completion_days,
        'most_active_category': insights.most_active_category.value if insights.most_active_category else None,
        'category_stats': [
            {
                'category': s.category.value,
                'category_name': s.category_name,
                'total_count': s.total_count,
                'completed_count': s.completed_count,
                'active_count': s.active_count,
                'completion_rate': round(s.completion_rate, 4),
                'color': s.color,
            }
            for s in insights.category_stats
        ],
        'monthly_stats': [
            {
                'year_month': m.year_month,
                'month_label': m.month_label,
                'created_count': m.created_count,
                'completed_count': m.completed_count,
                'abandoned_count': m.abandoned_count,
            }
            for m in insights.monthly_stats
        ],
        'upcoming_deadlines': [deadline(g) for g in insights.upcoming_deadlines],
        'overdue_goals': [deadline(g) for g in insights.overdue_goals],
        'streak': {
            'current_streak': streak.current_streak,
            'longest_streak': streak.longest_streak,
            'total_completion_days': streak.total_completion_days,
            'last_completion_date': _date(streak.last_completion_date),
        },
    })


@require_GET
@login_required
@goal_api
def goal_statistics_view(request):
    stats = GoalReportService(DjangoGoalRepository()).get_statistics()
    return JsonResponse({
        'active_count': stats.active_count,
        'completed_count': stats.completed_count,
        'abandoned_count': stats.abandoned_count,
        'total_progress': round(stats.total_progress, 4),
    })
