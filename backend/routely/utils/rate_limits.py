"""Anti-spam policy for user-generated content.

``recent`` is always the number of same-type actions in the trailing hour
*before* the action being evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass

from routely.errors import RateLimitExceeded
from routely.utils.action_ledger import ACTION_INCIDENT, ACTION_JOURNAL


@dataclass(frozen=True)
class ActionPolicy:
    hard_cap: int      # reject at or above
    rewarded: int      # actions below this count earn points
    points: int


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    points_to_award: int


POLICIES = {
    ACTION_INCIDENT: ActionPolicy(hard_cap=5, rewarded=3, points=20),
    ACTION_JOURNAL: ActionPolicy(hard_cap=10, rewarded=5, points=10),
}

REJECT_MESSAGES = {
    ACTION_INCIDENT: "Too many incident reports. Please wait before reporting another incident.",
    ACTION_JOURNAL: "Too many journal entries. Please wait before creating another entry.",
}


def evaluate(action: str, recent: int) -> RateDecision:
    policy = POLICIES[action]
    recent = max(0, int(recent))
    if recent >= policy.hard_cap:
        return RateDecision(allowed=False, points_to_award=0)
    if recent < policy.rewarded:
        return RateDecision(allowed=True, points_to_award=policy.points)
    return RateDecision(allowed=True, points_to_award=0)


def enforce(action: str, recent: int) -> int:
    """Return the points to award, or raise ``RateLimitExceeded``."""
    decision = evaluate(action, recent)
    if not decision.allowed:
        raise RateLimitExceeded(REJECT_MESSAGES[action], retry_after_seconds=3600)
    return decision.points_to_award
