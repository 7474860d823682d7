from datetime import date, datetime, timedelta

from routely.utils.streaks import LOOKBACK_DAYS, consecutive_days

TODAY = date(2026, 3, 15)


def _at(d: date, hour=12):
    return datetime(d.year, d.month, d.day, hour, 30)


def test_no_entries_is_zero():
    assert consecutive_days([], TODAY) == 0


def test_three_consecutive_days():
    stamps = [_at(TODAY - timedelta(days=i)) for i in range(3)]
    assert consecutive_days(stamps, TODAY) == 3


def test_gap_yesterday_stops_streak():
    stamps = [_at(TODAY), _at(TODAY - timedelta(days=2))]
    assert consecutive_days(stamps, TODAY) == 1


def test_nothing_today_means_no_streak():
    stamps = [_at(TODAY - timedelta(days=1)), _at(TODAY - timedelta(days=2))]
    assert consecutive_days(stamps, TODAY) == 0


def test_time_of_day_is_ignored():
    stamps = [
        datetime(2026, 3, 15, 0, 0, 1),
        datetime(2026, 3, 14, 23, 59, 59),
        datetime(2026, 3, 14, 8, 0),
    ]
    assert consecutive_days(stamps, datetime(2026, 3, 15, 18, 0)) == 2


def test_streak_capped_at_lookback():
    stamps = [_at(TODAY - timedelta(days=i)) for i in range(45)]
    assert consecutive_days(stamps, TODAY) == LOOKBACK_DAYS == 30


def test_future_entries_do_not_count():
    stamps = [_at(TODAY + timedelta(days=1))]
    assert consecutive_days(stamps, TODAY) == 0
