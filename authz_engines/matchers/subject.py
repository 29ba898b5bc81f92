"""
authz_engines.matchers.subject -- Does a subject satisfy a SubjectCondition?

Responsibility:
    Match the acting user's base role, functional roles, id and
    platform-admin flag against a policy's subject condition, and build
    ``SubjectContext`` values from organization memberships.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Unset or empty condition fields place no constraint.
    - Set fields are AND-combined; list fields match on any element.
    - Only an active membership produces a subject.

Failure modes:
    - ``MembershipInvalidError`` from ``subject_context_from_membership``
      for suspended or removed memberships.
"""

from __future__ import annotations

from authz_kernel.domain.conditions import SubjectCondition
from authz_kernel.domain.contexts import SubjectContext
from authz_kernel.domain.roles import OrganizationMembership
from authz_kernel.exceptions import MembershipInvalidError


def matches_subject_condition(condition: SubjectCondition, subject: SubjectContext) -> bool:
    return get_subject_mismatch_reason(condition, subject) is None


def get_subject_mismatch_reason(
    condition: SubjectCondition, subject: SubjectContext
) -> str | None:
    """Describe the first failing field, or ``None`` if the subject matches."""
    if condition.roles and subject.role not in condition.roles:
        allowed = ", ".join(r.value for r in condition.roles)
        return f"Role '{subject.role.value}' is not in allowed roles: [{allowed}]"

    if condition.functional_roles:
        if not any(r in subject.functional_roles for r in condition.functional_roles):
            required = ", ".join(r.value for r in condition.functional_roles)
            held = ", ".join(sorted(r.value for r in subject.functional_roles)) or "none"
            return (
                f"Functional roles [{held}] do not include any of "
                f"required roles: [{required}]"
            )

    if condition.user_ids and subject.user_id not in condition.user_ids:
        return f"User '{subject.user_id}' is not in allowed user list"

    if (
        condition.is_platform_admin is not None
        and subject.is_platform_admin != condition.is_platform_admin
    ):
        if condition.is_platform_admin:
            return "Condition requires a platform administrator"
        return "Condition excludes platform administrators"

    return None


def subject_context_from_membership(membership: OrganizationMembership) -> SubjectContext:
    """Build the subject for an active membership.

    Raises:
        MembershipInvalidError: if the membership is not active.
    """
    if not membership.is_active:
        raise MembershipInvalidError(
            membership.user_id, membership.organization_id, membership.status.value
        )
    return SubjectContext(
        user_id=membership.user_id,
        role=membership.role,
        functional_roles=membership.functional_roles,
        is_platform_admin=membership.is_platform_admin,
    )
