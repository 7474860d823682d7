import pytest

from routely.errors import RateLimitExceeded
from routely.utils import rate_limits
from routely.utils.action_ledger import ACTION_INCIDENT, ACTION_JOURNAL


@pytest.mark.parametrize("recent, allowed, pts", [
    (0, True, 20),
    (2, True, 20),
    (3, True, 0),
    (4, True, 0),
    (5, False, 0),
    (9, False, 0),
])
def test_incident_policy(recent, allowed, pts):
    decision = rate_limits.evaluate(ACTION_INCIDENT, recent)
    assert decision.allowed is allowed
    assert decision.points_to_award == pts


@pytest.mark.parametrize("recent, allowed, pts", [
    (0, True, 10),
    (4, True, 10),
    (5, True, 0),
    (9, True, 0),
    (10, False, 0),
])
def test_journal_policy(recent, allowed, pts):
    decision = rate_limits.evaluate(ACTION_JOURNAL, recent)
    assert decision.allowed is allowed
    assert decision.points_to_award == pts


def test_enforce_raises_with_retry_hint():
    with pytest.raises(RateLimitExceeded) as exc:
        rate_limits.enforce(ACTION_INCIDENT, 5)
    assert exc.value.status_code == 429
    assert exc.value.to_dict()["retry_after_seconds"] == 3600
    assert "incident" in exc.value.message


def test_enforce_returns_points_when_allowed():
    assert rate_limits.enforce(ACTION_JOURNAL, 0) == 10
    assert rate_limits.enforce(ACTION_JOURNAL, 7) == 0
