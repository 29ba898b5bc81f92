"""
Request attribute contexts (``authz_kernel.domain.contexts``).

Responsibility
--------------
Immutable snapshots of the attributes a single authorization decision is
made against: who is acting (``SubjectContext``), what is being acted on
(``ResourceContext``), and under which circumstances (``EnvironmentContext``).
Also the value vocabularies that resource attributes are drawn from.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Contexts are frozen; matchers never mutate them.
* Enum-valued fields are normalized on construction, so a context built
  from raw storage strings compares equal to one built from enum members.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from authz_kernel.domain.roles import BaseRole, FunctionalRole


# =========================================================================
# Value vocabularies
# =========================================================================


class AccountType(str, Enum):
    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class JournalEntryType(str, Enum):
    STANDARD = "Standard"
    ADJUSTING = "Adjusting"
    CLOSING = "Closing"
    REVERSING = "Reversing"
    ELIMINATION = "Elimination"
    CONSOLIDATION = "Consolidation"
    INTERCOMPANY = "Intercompany"


class PeriodStatus(str, Enum):
    """Fiscal period lifecycle as seen by authorization policies."""

    FUTURE = "Future"
    OPEN = "Open"
    SOFT_CLOSE = "SoftClose"
    CLOSED = "Closed"
    LOCKED = "Locked"


def _optional_enum(enum_cls: type[Enum], value: object) -> Enum | None:
    return None if value is None else enum_cls(value)


# =========================================================================
# Contexts
# =========================================================================


@dataclass(frozen=True)
class SubjectContext:
    """The acting user within one organization."""

    user_id: str
    role: BaseRole
    functional_roles: frozenset[FunctionalRole] = field(default_factory=frozenset)
    is_platform_admin: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", BaseRole(self.role))
        object.__setattr__(
            self,
            "functional_roles",
            frozenset(FunctionalRole(r) for r in self.functional_roles),
        )


@dataclass(frozen=True)
class ResourceContext:
    """The target of an action.

    ``type`` is one of the ABAC resource types.  Every attribute is optional;
    a policy that constrains an attribute the resource does not carry does
    not match.
    """

    type: str
    id: str | None = None
    account_number: int | None = None
    account_type: AccountType | None = None
    is_intercompany: bool | None = None
    entry_type: JournalEntryType | None = None
    is_own_entry: bool | None = None
    period_status: PeriodStatus | None = None
    is_adjustment_period: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "account_type", _optional_enum(AccountType, self.account_type)
        )
        object.__setattr__(
            self, "entry_type", _optional_enum(JournalEntryType, self.entry_type)
        )
        object.__setattr__(
            self, "period_status", _optional_enum(PeriodStatus, self.period_status)
        )


@dataclass(frozen=True)
class EnvironmentContext:
    """Request circumstances.

    ``current_time`` is ``"HH:MM"`` (24h), ``current_day_of_week`` is
    0 (Sunday) through 6 (Saturday).  ``user_agent`` is carried into the
    audit log and never matched.
    """

    current_time: str | None = None
    current_day_of_week: int | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class PolicyEvaluationContext:
    """Everything the policy engine needs to decide one request."""

    subject: SubjectContext
    resource: ResourceContext
    action: str
    environment: EnvironmentContext | None = None
