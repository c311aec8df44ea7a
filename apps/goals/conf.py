# apps/goals/conf.py
import pytz
from django.conf import settings

DEFAULTS = {
    'UPCOMING_DEADLINE_DAYS': 7,
    'MONTHLY_STATS_MONTHS': 6,
    'HEALTH_OVERDUE_DECAY_PER_DAY': 0.02,
    'HEALTH_OVERDUE_FLOOR': 0.5,
    'HEALTH_MAX_RATIO': 1.5,
    'STREAK_GRACE_DAYS': 1,
}


def goal_setting(name):
    """Czyta ustawienie z settings.GOALS, z domyślną wartością."""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown goals setting: {name}")
    overrides = getattr(settings, 'GOALS', None) or {}
    return overrides.get(name, DEFAULTS[name])


def health_weights():
    return {
        'overdue_decay_per_day': goal_setting('HEALTH_OVERDUE_DECAY_PER_DAY'),
        'overdue_floor': goal_setting('HEALTH_OVERDUE_FLOOR'),
        'max_ratio': goal_setting('HEALTH_MAX_RATIO'),
    }


def user_timezone():
    return pytz.timezone(settings.TIME_ZONE)
