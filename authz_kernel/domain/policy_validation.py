"""
Authoring-time policy validation (``authz_kernel.domain.policy_validation``).

Responsibility
--------------
Rejects malformed policies before they are stored or seeded.  Evaluation
never calls into this module: matchers are total and treat anything they
cannot interpret as a mismatch.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  Uses the standard library
``ipaddress`` module for IP pattern parsing.

Failure modes
-------------
Every check raises a ``PolicyValidationError`` subclass describing the
first problem found:

* ``InvalidPolicyIdError``          -- id is not a UUID
* ``PolicyPriorityError``           -- outside [0, 1000], or above 899 for
  a custom policy
* ``UnknownResourceTypeError``      -- resource type not in the vocabulary
* ``InvalidPolicyConditionError``   -- empty/unknown action patterns, bad
  account-number range, malformed or wrapping time window, day-of-week
  out of range, unparseable IP pattern
* ``PolicyValidationError``         -- empty name
"""

from __future__ import annotations

import ipaddress
from uuid import UUID

from authz_kernel.domain.actions import (
    RESOURCE_TYPES,
    WILDCARD,
    is_resource_type,
    is_valid_action_pattern,
)
from authz_kernel.domain.conditions import (
    ActionCondition,
    EnvironmentCondition,
    ResourceCondition,
    time_to_minutes,
)
from authz_kernel.domain.policy import (
    MAX_CUSTOM_PRIORITY,
    MAX_PRIORITY,
    MIN_PRIORITY,
    AuthorizationPolicy,
)
from authz_kernel.exceptions import (
    InvalidPolicyConditionError,
    InvalidPolicyIdError,
    PolicyPriorityError,
    PolicyValidationError,
    UnknownResourceTypeError,
)

MAX_NAME_LENGTH = 255


def parse_policy_id(value: str | UUID) -> UUID:
    """Parse a policy id, raising ``InvalidPolicyIdError`` if not a UUID."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise InvalidPolicyIdError(str(value)) from exc


def validate_priority(priority: object, *, is_system_policy: bool) -> int:
    max_allowed = MAX_PRIORITY if is_system_policy else MAX_CUSTOM_PRIORITY
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise PolicyPriorityError(priority, MIN_PRIORITY, max_allowed)
    if not MIN_PRIORITY <= priority <= max_allowed:
        raise PolicyPriorityError(priority, MIN_PRIORITY, max_allowed)
    return priority


def validate_resource_condition(condition: ResourceCondition) -> None:
    if condition.type != WILDCARD and not is_resource_type(condition.type):
        raise UnknownResourceTypeError(condition.type, RESOURCE_TYPES + (WILDCARD,))

    attrs = condition.attributes
    if attrs is None or attrs.account_number is None:
        return
    number_range = attrs.account_number.range
    if number_range is not None:
        if len(number_range) != 2:
            raise InvalidPolicyConditionError(
                "resource.attributes.accountNumber.range", "expected [min, max]"
            )
        low, high = number_range
        if low > high:
            raise InvalidPolicyConditionError(
                "resource.attributes.accountNumber.range",
                f"min {low} is greater than max {high}",
            )


def validate_action_condition(condition: ActionCondition) -> None:
    if not condition.actions:
        raise InvalidPolicyConditionError("action.actions", "at least one action is required")
    invalid = [a for a in condition.actions if not is_valid_action_pattern(a)]
    if invalid:
        raise InvalidPolicyConditionError(
            "action.actions", f"unknown action patterns: {', '.join(invalid)}"
        )


def validate_environment_condition(condition: EnvironmentCondition | None) -> None:
    if condition is None:
        return

    window = condition.time_of_day
    if window is not None:
        start = time_to_minutes(window.start)
        end = time_to_minutes(window.end)
        if start is None or end is None:
            raise InvalidPolicyConditionError(
                "environment.timeOfDay",
                f"expected 'HH:MM' bounds, got {window.start!r}-{window.end!r}",
            )
        if start > end:
            raise InvalidPolicyConditionError(
                "environment.timeOfDay",
                f"window {window.start}-{window.end} wraps midnight; split it into two policies",
            )

    for day in condition.days_of_week or ():
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise InvalidPolicyConditionError(
                "environment.daysOfWeek", f"day {day!r} is not in 0 (Sunday)..6 (Saturday)"
            )

    for field_name, patterns in (
        ("environment.ipAllowList", condition.ip_allow_list),
        ("environment.ipDenyList", condition.ip_deny_list),
    ):
        for pattern in patterns or ():
            try:
                ipaddress.ip_network(pattern, strict=False)
            except ValueError as exc:
                raise InvalidPolicyConditionError(
                    field_name, f"invalid IP address or CIDR block {pattern!r}"
                ) from exc


def validate_policy(policy: AuthorizationPolicy) -> None:
    """Run every authoring-time check against ``policy``.

    Raises:
        PolicyValidationError: (or a subclass) for the first problem found.
    """
    parse_policy_id(policy.id)
    if not policy.name or not policy.name.strip():
        raise PolicyValidationError("Policy name must not be empty", field="name")
    if len(policy.name) > MAX_NAME_LENGTH:
        raise PolicyValidationError(
            f"Policy name exceeds {MAX_NAME_LENGTH} characters", field="name"
        )
    validate_priority(policy.priority, is_system_policy=policy.is_system_policy)
    validate_resource_condition(policy.resource)
    validate_action_condition(policy.action)
    validate_environment_condition(policy.environment)
