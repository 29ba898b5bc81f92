"""
Role taxonomy (``authz_kernel.domain.roles``).

Responsibility
--------------
Base roles (exactly one per membership), functional roles (zero or more,
orthogonal to the base role) and the organization membership value object
that the authorization service resolves its subject from.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* A membership always carries exactly one ``BaseRole``.
* Functional roles are additive grants; they never remove permissions.
* Only an ``ACTIVE`` membership may act.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BaseRole(str, Enum):
    """Organization-level role. Exactly one per membership."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class FunctionalRole(str, Enum):
    """Finance-function role layered on top of the base role."""

    CONTROLLER = "controller"
    FINANCE_MANAGER = "finance_manager"
    ACCOUNTANT = "accountant"
    PERIOD_ADMIN = "period_admin"
    CONSOLIDATION_MANAGER = "consolidation_manager"


class MembershipStatus(str, Enum):
    """Lifecycle state of an organization membership."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    REMOVED = "removed"


@dataclass(frozen=True)
class OrganizationMembership:
    """A user's membership in one organization.

    ``is_platform_admin`` is copied from the user record; it is not an
    organization-level grant.
    """

    user_id: str
    organization_id: str
    role: BaseRole
    functional_roles: frozenset[FunctionalRole] = field(default_factory=frozenset)
    status: MembershipStatus = MembershipStatus.ACTIVE
    is_platform_admin: bool = False

    def __post_init__(self) -> None:
        # Normalize raw strings coming from storage or request payloads.
        object.__setattr__(self, "role", BaseRole(self.role))
        object.__setattr__(
            self,
            "functional_roles",
            frozenset(FunctionalRole(r) for r in self.functional_roles),
        )
        object.__setattr__(self, "status", MembershipStatus(self.status))

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE
