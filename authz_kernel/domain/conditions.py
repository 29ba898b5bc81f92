"""
Policy condition value objects (``authz_kernel.domain.conditions``).

Responsibility
--------------
The four condition kinds an ``AuthorizationPolicy`` is built from.  Each
field is optional; an unset (``None``) or empty collection places no
constraint.  Set fields are AND-combined by the matchers in
``authz_engines.matchers``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  Shape
validation lives in ``policy_validation``; wire conversion in
``condition_codec``.
"""

from __future__ import annotations

from dataclasses import dataclass

from authz_kernel.domain.contexts import AccountType, JournalEntryType, PeriodStatus
from authz_kernel.domain.roles import BaseRole, FunctionalRole


def _enum_tuple(enum_cls, values):
    if values is None:
        return None
    return tuple(enum_cls(v) for v in values)


@dataclass(frozen=True)
class SubjectCondition:
    """Who a policy applies to.

    ``roles`` and ``functional_roles`` match when the subject holds any of
    the listed roles.  ``is_platform_admin`` requires an exact flag value.
    """

    roles: tuple[BaseRole, ...] | None = None
    functional_roles: tuple[FunctionalRole, ...] | None = None
    user_ids: tuple[str, ...] | None = None
    is_platform_admin: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", _enum_tuple(BaseRole, self.roles))
        object.__setattr__(
            self, "functional_roles", _enum_tuple(FunctionalRole, self.functional_roles)
        )
        if self.user_ids is not None:
            object.__setattr__(self, "user_ids", tuple(self.user_ids))


@dataclass(frozen=True)
class AccountNumberCondition:
    """Inclusive ``range`` and/or explicit ``values`` (wire key ``in``)."""

    range: tuple[int, int] | None = None
    values: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        if self.range is not None:
            object.__setattr__(self, "range", tuple(self.range))
        if self.values is not None:
            object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class ResourceAttributes:
    account_number: AccountNumberCondition | None = None
    account_type: tuple[AccountType, ...] | None = None
    is_intercompany: bool | None = None
    entry_type: tuple[JournalEntryType, ...] | None = None
    is_own_entry: bool | None = None
    period_status: tuple[PeriodStatus, ...] | None = None
    is_adjustment_period: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "account_type", _enum_tuple(AccountType, self.account_type))
        object.__setattr__(self, "entry_type", _enum_tuple(JournalEntryType, self.entry_type))
        object.__setattr__(self, "period_status", _enum_tuple(PeriodStatus, self.period_status))


@dataclass(frozen=True)
class ResourceCondition:
    """What a policy applies to. ``type`` is a resource type or ``"*"``."""

    type: str
    attributes: ResourceAttributes | None = None


@dataclass(frozen=True)
class ActionCondition:
    """Action patterns: exact action, ``"*"`` or ``"<prefix>:*"``."""

    actions: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", tuple(self.actions))


def time_to_minutes(value: str) -> int | None:
    """Minutes since midnight for ``"HH:MM"``; ``None`` if malformed."""
    hours, sep, minutes = value.partition(":")
    if not sep or len(minutes) != 2 or not (1 <= len(hours) <= 2):
        return None
    if not (hours.isdigit() and minutes.isdigit()):
        return None
    h, m = int(hours), int(minutes)
    if h > 23 or m > 59:
        return None
    return h * 60 + m


@dataclass(frozen=True)
class TimeRange:
    """``"HH:MM"`` bounds, inclusive on both ends. Never wraps midnight."""

    start: str
    end: str


@dataclass(frozen=True)
class EnvironmentCondition:
    """When and from where a policy applies.

    ``days_of_week`` uses 0 (Sunday) through 6 (Saturday).  IP entries are
    literal addresses or CIDR blocks.
    """

    time_of_day: TimeRange | None = None
    days_of_week: tuple[int, ...] | None = None
    ip_allow_list: tuple[str, ...] | None = None
    ip_deny_list: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        for name in ("days_of_week", "ip_allow_list", "ip_deny_list"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, tuple(value))

    def is_empty(self) -> bool:
        """True if no field places a constraint."""
        return (
            self.time_of_day is None
            and not self.days_of_week
            and not self.ip_allow_list
            and not self.ip_deny_list
        )
