"""
authz_engines.matchers.environment -- Does a request satisfy an EnvironmentCondition?

Responsibility:
    Match time-of-day windows, days of week and IP allow/deny lists
    against an ``EnvironmentContext``, and derive that context from a
    timezone-aware moment.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  IP parsing uses the
    standard library ``ipaddress`` module.

Invariants enforced:
    - Time windows are inclusive and never wrap midnight: ``start <= now
      <= end`` in minutes since midnight.  A window with ``start > end``
      matches nothing (authoring-time validation rejects it).
    - A field the condition constrains but the context lacks is a mismatch.
    - An IP on the deny list fails the condition even when the allow list
      also matches it.
    - Total: malformed times or IPs never raise; they simply do not match.
"""

from __future__ import annotations

import ipaddress
from datetime import datetime

from authz_kernel.domain.conditions import EnvironmentCondition, TimeRange, time_to_minutes
from authz_kernel.domain.contexts import EnvironmentContext

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def _day_name(day: int) -> str:
    return DAY_NAMES[day] if isinstance(day, int) and 0 <= day <= 6 else str(day)


def create_environment_context(
    moment: datetime,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> EnvironmentContext:
    """Environment for ``moment`` as observed in its own timezone.

    Day of week is 0 (Sunday) through 6 (Saturday).
    """
    return EnvironmentContext(
        current_time=f"{moment.hour:02d}:{moment.minute:02d}",
        current_day_of_week=(moment.weekday() + 1) % 7,
        ip_address=ip_address,
        user_agent=user_agent,
    )


def matches_time_of_day(window: TimeRange, current_time: str) -> bool:
    start = time_to_minutes(window.start)
    end = time_to_minutes(window.end)
    now = time_to_minutes(current_time)
    if start is None or end is None or now is None:
        return False
    return start <= now <= end


def matches_day_of_week(days: tuple[int, ...], day: int) -> bool:
    return day in days


def matches_ip_pattern(pattern: str, ip_address: str) -> bool:
    """Exact address or CIDR containment. Malformed input never matches."""
    try:
        address = ipaddress.ip_address(ip_address)
        network = ipaddress.ip_network(pattern, strict=False)
    except ValueError:
        return False
    return address.version == network.version and address in network


def ip_in_list(patterns: tuple[str, ...], ip_address: str) -> bool:
    return any(matches_ip_pattern(p, ip_address) for p in patterns)


def _is_parseable_ip(ip_address: str) -> bool:
    try:
        ipaddress.ip_address(ip_address)
    except ValueError:
        return False
    return True


def matches_environment_condition(
    condition: EnvironmentCondition, context: EnvironmentContext
) -> bool:
    return get_environment_mismatch_reason(condition, context) is None


def get_environment_mismatch_reason(
    condition: EnvironmentCondition, context: EnvironmentContext
) -> str | None:
    """Describe the first failing field, or ``None`` if the context matches."""
    window = condition.time_of_day
    if window is not None:
        if context.current_time is None:
            return "Condition requires time of day but context has no time"
        if not matches_time_of_day(window, context.current_time):
            return (
                f"Current time '{context.current_time}' is not within allowed "
                f"range {window.start} to {window.end}"
            )

    if condition.days_of_week:
        if context.current_day_of_week is None:
            return "Condition requires day of week but context has no day"
        if not matches_day_of_week(condition.days_of_week, context.current_day_of_week):
            allowed = ", ".join(_day_name(d) for d in condition.days_of_week)
            return (
                f"Current day '{_day_name(context.current_day_of_week)}' is not in "
                f"allowed days: [{allowed}]"
            )

    if condition.ip_allow_list or condition.ip_deny_list:
        if context.ip_address is None:
            return "Condition requires IP address but context has no IP"
        if not _is_parseable_ip(context.ip_address):
            return f"IP address '{context.ip_address}' is not a valid address"

    if condition.ip_deny_list and ip_in_list(condition.ip_deny_list, context.ip_address):
        return (
            f"IP address '{context.ip_address}' is in deny list: "
            f"[{', '.join(condition.ip_deny_list)}]"
        )

    if condition.ip_allow_list and not ip_in_list(condition.ip_allow_list, context.ip_address):
        return (
            f"IP address '{context.ip_address}' is not in allowed list: "
            f"[{', '.join(condition.ip_allow_list)}]"
        )

    return None
