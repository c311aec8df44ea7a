import pytest
import pytz
from apps.goals.conf import DEFAULTS, goal_setting, health_weights, user_timezone


def test_defaults(settings):
    settings.GOALS = {}
    assert goal_setting('UPCOMING_DEADLINE_DAYS') == DEFAULTS['UPCOMING_DEADLINE_DAYS']


def test_override(settings):
    settings.GOALS = {'UPCOMING_DEADLINE_DAYS': 14, 'HEALTH_OVERDUE_FLOOR': 0.3}

    assert goal_setting('UPCOMING_DEADLINE_DAYS') == 14
    assert health_weights()['overdue_floor'] == 0.3
    assert health_weights()['max_ratio'] == DEFAULTS['HEALTH_MAX_RATIO']


def test_unknown_setting():
    with pytest.raises(KeyError):
        goal_setting('NOPE')


def test_user_timezone(settings):
    settings.TIME_ZONE = 'America/New_York'
    assert user_timezone() == pytz.timezone('America/New_York')
