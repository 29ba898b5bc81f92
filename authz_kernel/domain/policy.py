"""
Authorization policy entity (``authz_kernel.domain.policy``).

Responsibility
--------------
An ``AuthorizationPolicy`` is one conditional allow/deny rule owned by an
organization.  It is matched as a whole: subject, resource and action
conditions must all hold, plus the environment condition when present.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``priority`` lies in [``MIN_PRIORITY``, ``MAX_PRIORITY``]; higher is
  evaluated first among allows.
* System policies cannot be modified or deleted through ordinary APIs.
* Custom (non-system) policies are capped at ``MAX_CUSTOM_PRIORITY`` so
  they can never outrank owner access or period-lock protection.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from uuid import UUID

from authz_kernel.domain.conditions import (
    ActionCondition,
    EnvironmentCondition,
    ResourceCondition,
    SubjectCondition,
)

MIN_PRIORITY = 0
MAX_PRIORITY = 1000
MAX_CUSTOM_PRIORITY = 899
DEFAULT_POLICY_PRIORITY = 500


class PolicyEffect(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


class SystemPolicyPriority(IntEnum):
    """Reserved priority bands for system-seeded policies."""

    PLATFORM_ADMIN_OVERRIDE = 1000
    LOCKED_PERIOD_PROTECTION = 999
    SOFT_CLOSE_CONTROLLER_ACCESS = 998
    SOFT_CLOSE_DEFAULT_RESTRICTION = 997
    OWNER_FULL_ACCESS = 900
    DEFAULT_CUSTOM = 500
    VIEWER_READ_ONLY = 100


@dataclass(frozen=True)
class AuthorizationPolicy:
    """A single conditional allow/deny rule.

    ``environment`` is optional; ``None`` (or an empty condition) places no
    environmental constraint.
    """

    id: UUID
    organization_id: str
    name: str
    subject: SubjectCondition
    resource: ResourceCondition
    action: ActionCondition
    effect: PolicyEffect
    priority: int = DEFAULT_POLICY_PRIORITY
    description: str | None = None
    environment: EnvironmentCondition | None = None
    is_system_policy: bool = False
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "effect", PolicyEffect(self.effect))

    def can_modify(self) -> bool:
        return not self.is_system_policy

    def can_delete(self) -> bool:
        return not self.is_system_policy

    def is_allow(self) -> bool:
        return self.effect == PolicyEffect.ALLOW

    def is_deny(self) -> bool:
        return self.effect == PolicyEffect.DENY

    @property
    def has_environment_condition(self) -> bool:
        return self.environment is not None and not self.environment.is_empty()
