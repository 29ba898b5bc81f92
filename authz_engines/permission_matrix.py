"""
authz_engines.permission_matrix -- Static RBAC permission tables.

Responsibility:
    Map a base role plus any functional roles to the set of concrete
    actions they grant.  This is the fast, I/O-free half of every
    authorization decision.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import authz_kernel.domain types.

Invariants enforced:
    - Owner holds every concrete action; admin holds owner's set minus
      organization deletion and ownership transfer.
    - Member and viewer hold the same read-only set; a member without
      functional roles has no write permission.
    - Functional roles are strictly additive: adding one never removes
      a permission.
    - ``has_permission`` matches exactly or via the universal ``"*"``;
      prefix wildcards are an ABAC concept and are not expanded here.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from authz_kernel.domain.actions import ALL_ACTIONS, WILDCARD
from authz_kernel.domain.roles import BaseRole, FunctionalRole

PermissionSet = frozenset[str]

# =========================================================================
# Base role tables
# =========================================================================

_OWNER_PERMISSIONS: PermissionSet = frozenset(ALL_ACTIONS)

_OWNER_ONLY: PermissionSet = frozenset({
    "organization:delete",
    "organization:transfer_ownership",
})

_ADMIN_PERMISSIONS: PermissionSet = _OWNER_PERMISSIONS - _OWNER_ONLY

_READ_ONLY_PERMISSIONS: PermissionSet = frozenset({
    "company:read",
    "account:read",
    "journal_entry:read",
    "fiscal_period:read",
    "consolidation_group:read",
    "report:read",
    "report:export",
    "exchange_rate:read",
})

BASE_ROLE_PERMISSIONS = MappingProxyType({
    BaseRole.OWNER: _OWNER_PERMISSIONS,
    BaseRole.ADMIN: _ADMIN_PERMISSIONS,
    BaseRole.MEMBER: _READ_ONLY_PERMISSIONS,
    BaseRole.VIEWER: _READ_ONLY_PERMISSIONS,
})

# =========================================================================
# Functional role tables
# =========================================================================

FUNCTIONAL_ROLE_PERMISSIONS = MappingProxyType({
    FunctionalRole.CONTROLLER: frozenset({
        "journal_entry:create",
        "journal_entry:read",
        "journal_entry:update",
        "journal_entry:post",
        "journal_entry:reverse",
        "fiscal_period:read",
        "fiscal_period:manage",
        "consolidation_group:read",
        "consolidation_group:run",
        "report:read",
        "report:export",
        "account:read",
        "audit_log:read",
        "exchange_rate:read",
    }),
    FunctionalRole.FINANCE_MANAGER: frozenset({
        "account:create",
        "account:read",
        "account:update",
        "account:deactivate",
        "exchange_rate:read",
        "exchange_rate:manage",
        "fiscal_period:read",
        "fiscal_period:manage",
        "elimination:create",
        "report:read",
        "report:export",
    }),
    FunctionalRole.ACCOUNTANT: frozenset({
        "journal_entry:create",
        "journal_entry:read",
        "journal_entry:update",
        "journal_entry:post",
        "account:read",
        "fiscal_period:read",
        "report:read",
    }),
    FunctionalRole.PERIOD_ADMIN: frozenset({
        "fiscal_period:read",
        "fiscal_period:manage",
        "journal_entry:read",
        "report:read",
    }),
    FunctionalRole.CONSOLIDATION_MANAGER: frozenset({
        "consolidation_group:create",
        "consolidation_group:read",
        "consolidation_group:update",
        "consolidation_group:delete",
        "consolidation_group:run",
        "elimination:create",
        "report:read",
        "report:export",
    }),
})


# =========================================================================
# Operations
# =========================================================================


def base_permissions(role: BaseRole | str) -> PermissionSet:
    """Actions granted by a base role."""
    return BASE_ROLE_PERMISSIONS[BaseRole(role)]


def functional_permissions(role: FunctionalRole | str) -> PermissionSet:
    """Actions granted by a single functional role."""
    return FUNCTIONAL_ROLE_PERMISSIONS[FunctionalRole(role)]


def compute_effective_permissions(
    base_role: BaseRole | str,
    functional_roles: Iterable[FunctionalRole | str] = (),
) -> PermissionSet:
    """Union of the base role's actions and every functional role's actions."""
    permissions = set(base_permissions(base_role))
    for role in functional_roles:
        permissions |= functional_permissions(role)
    return frozenset(permissions)


def has_permission(permissions: Iterable[str], action: str) -> bool:
    """True if ``action`` is granted exactly or the set holds ``"*"``."""
    permissions = permissions if isinstance(permissions, (set, frozenset)) else set(permissions)
    return action in permissions or WILDCARD in permissions


def permission_set_to_list(permissions: Iterable[str]) -> list[str]:
    """Sorted, deterministic list form of a permission set."""
    return sorted(set(permissions))
