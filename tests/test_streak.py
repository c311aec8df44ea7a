from datetime import date, timedelta
from apps.goals.domain.services import StreakCalculator

BASE = date(2024, 1, 1)


def day(n):
    return BASE + timedelta(days=n)


def test_consecutive_days_ending_today():
    data = StreakCalculator().streak({day(10), day(11), day(12)}, day(12))
    assert data.current_streak == 3
    assert data.longest_streak == 3
    assert data.total_completion_days == 3
    assert data.last_completion_date == day(12)


def test_gap_breaks_the_run():
    data = StreakCalculator().streak({day(10), day(12)}, day(12))
    assert data.current_streak == 1
    assert data.longest_streak == 1


def test_yesterday_keeps_streak_alive():
    data = StreakCalculator().streak([day(10), day(11)], day(12))
    assert data.current_streak == 2


def test_stale_streak_is_zero():
    data = StreakCalculator().streak([day(10), day(11)], day(14))
    assert data.current_streak == 0
    assert data.longest_streak == 2


def test_longest_run_in_the_past():
    data = StreakCalculator().streak([day(1), day(2), day(3), day(4), day(10)], day(10))
    assert data.current_streak == 1
    assert data.longest_streak == 4


def test_duplicates_count_once():
    data = StreakCalculator().streak([day(5), day(5), day(6)], day(6))
    assert data.total_completion_days == 2
    assert data.current_streak == 2


def test_empty_input():
    data = StreakCalculator().streak([], day(0))
    assert data.current_streak == 0
    assert data.longest_streak == 0
    assert data.total_completion_days == 0
    assert data.last_completion_date is None


def test_no_grace_period():
    data = StreakCalculator(grace_days=0).streak([day(10), day(11)], day(12))
    assert data.current_streak == 0
