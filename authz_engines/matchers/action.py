"""
authz_engines.matchers.action -- Does an action satisfy an ActionCondition?

Responsibility:
    Pattern matching for action conditions.  A pattern is an exact action,
    the universal ``"*"``, or ``"<prefix>:*"`` covering every action with
    that prefix.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``"journal_entry:*"`` matches ``journal_entry:post`` and never
      ``report:read``.
    - A condition matches if any of its patterns matches; an empty pattern
      list matches nothing.
"""

from __future__ import annotations

from collections.abc import Iterable

from authz_kernel.domain.actions import WILDCARD, get_action_prefix
from authz_kernel.domain.conditions import ActionCondition


def matches_action_pattern(pattern: str, action: str) -> bool:
    if pattern == WILDCARD or pattern == action:
        return True
    if pattern.endswith(":*"):
        return pattern[:-2] == get_action_prefix(action)
    return False


def matches_action_condition(condition: ActionCondition, action: str) -> bool:
    return any(matches_action_pattern(p, action) for p in condition.actions)


def get_action_mismatch_reason(condition: ActionCondition, action: str) -> str | None:
    if matches_action_condition(condition, action):
        return None
    return f"Action '{action}' does not match any of: [{', '.join(condition.actions)}]"


def filter_matching_actions(condition: ActionCondition, actions: Iterable[str]) -> list[str]:
    """Actions from ``actions`` (in input order) covered by ``condition``."""
    return [a for a in actions if matches_action_condition(condition, a)]
