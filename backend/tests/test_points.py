from datetime import datetime

import pytest

from conftest import make_user
from routely.utils import points


def test_award_increments_points_and_counter(ctx):
    u = make_user()
    now = datetime(2026, 1, 2, 3, 4, 5)
    points.award(u, 20, points.COUNTER_INCIDENT, now=now)
    assert u.points == 20
    assert u.incidents_reported_count == 1
    assert u.last_incident_reported_at == now


def test_zero_award_still_counts_activity(ctx):
    u = make_user()
    points.award(u, 0, points.COUNTER_JOURNAL)
    assert u.points == 0
    assert u.journal_entries_count == 1
    assert u.last_journal_entry_at is not None


def test_bonus_award_leaves_counters_alone(ctx):
    u = make_user()
    points.award(u, 150)
    assert u.points == 150
    assert u.journal_entries_count == 0
    assert u.incidents_reported_count == 0


def test_negative_award_rejected(ctx):
    u = make_user()
    with pytest.raises(ValueError):
        points.award(u, -5)


def test_refund_clamps_at_zero(ctx):
    u = make_user(points=15, incidents_reported_count=1)
    points.refund(u, 20, points.COUNTER_INCIDENT)
    assert u.points == 0
    assert u.incidents_reported_count == 0

    # a duplicate refund must not go negative
    points.refund(u, 20, points.COUNTER_INCIDENT)
    assert u.points == 0
    assert u.incidents_reported_count == 0


def test_points_never_negative_over_mixed_sequence(ctx):
    u = make_user()
    for amount, kind in [(20, "award"), (20, "refund"), (20, "refund"), (10, "award"), (50, "refund")]:
        if kind == "award":
            points.award(u, amount, points.COUNTER_JOURNAL)
        else:
            points.refund(u, amount, points.COUNTER_JOURNAL)
        assert u.points >= 0
        assert u.journal_entries_count >= 0


@pytest.mark.parametrize("owner, deleter, awarded, expected", [
    (1, 1, 20, True),
    (1, 1, 0, False),
    (1, 2, 20, False),
    (None, 1, 20, False),
    (1, None, 20, False),
])
def test_should_refund(owner, deleter, awarded, expected):
    assert points.should_refund(owner, deleter, awarded) is expected
