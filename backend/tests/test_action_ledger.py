from datetime import datetime, timedelta

import pytest

from conftest import make_user, reload_user
from routely.extensions import db
from routely.models import UserAction
from routely.utils import action_ledger

T0 = datetime(2026, 5, 1, 9, 0, 0)


def test_counts_include_the_new_action(ctx):
    u = make_user()
    assert action_ledger.record_and_count(u, "incident", now=T0) == 1
    assert action_ledger.record_and_count(u, "incident", now=T0 + timedelta(minutes=5)) == 2


def test_counts_are_per_action_type(ctx):
    u = make_user()
    action_ledger.record_and_count(u, "journal", now=T0)
    action_ledger.record_and_count(u, "journal", now=T0 + timedelta(minutes=1))
    assert action_ledger.record_and_count(u, "incident", now=T0 + timedelta(minutes=2)) == 1
    assert action_ledger.recent_count(u, "journal", now=T0 + timedelta(minutes=2)) == 2


def test_entries_on_the_window_edge_are_evicted(ctx):
    u = make_user()
    action_ledger.record_and_count(u, "incident", now=T0)
    action_ledger.record_and_count(u, "incident", now=T0 + timedelta(minutes=10))
    # T0 is exactly one hour before: evicted before counting
    assert action_ledger.record_and_count(u, "incident", now=T0 + timedelta(hours=1)) == 2


def test_pruned_entries_are_deleted(ctx):
    u = make_user()
    action_ledger.record_and_count(u, "journal", now=T0)
    action_ledger.record_and_count(u, "journal", now=T0 + timedelta(minutes=30))
    db.session.commit()

    action_ledger.record_and_count(u, "incident", now=T0 + timedelta(hours=2))
    db.session.commit()

    u = reload_user(u.id)
    assert [a.action for a in u.actions] == ["incident"]
    assert UserAction.query.count() == 1


def test_unknown_action_rejected(ctx):
    u = make_user()
    with pytest.raises(ValueError):
        action_ledger.record_and_count(u, "comment", now=T0)
