"""
authz_services.policy_simulator -- Dry-run policy evaluation.

Responsibility:
    Let an organization administrator ask "what would happen if this member
    tried this action on this resource?" and see the decision, every
    matching policy and why each other policy did not match.  Also
    evaluates an unsaved candidate policy alongside the stored set.

Architecture position:
    Services -- read-only.  No audit record is written, no policy is stored.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from authz_engines.matchers.subject import subject_context_from_membership
from authz_engines.permission_matrix import compute_effective_permissions, has_permission
from authz_engines.policy_engine import (
    active_policies,
    evaluate_policies,
    evaluate_policy,
    sort_policies,
)
from authz_kernel.domain.actions import RESOURCE_TYPES, is_resource_type
from authz_kernel.domain.contexts import (
    EnvironmentContext,
    PolicyEvaluationContext,
    ResourceContext,
)
from authz_kernel.domain.evaluation import PolicyEvaluationResult, PolicyMatchResult
from authz_kernel.domain.policy import AuthorizationPolicy
from authz_kernel.domain.policy_validation import validate_policy
from authz_kernel.domain.ports import PolicyRepository
from authz_kernel.domain.roles import OrganizationMembership
from authz_kernel.exceptions import UnknownResourceTypeError


@dataclass(frozen=True)
class PolicySimulation:
    """Outcome of a dry run."""

    result: PolicyEvaluationResult
    matching: tuple[PolicyMatchResult, ...]
    would_deny: bool
    rbac_allowed: bool
    explanations: tuple[PolicyMatchResult, ...] = field(default_factory=tuple)

    @property
    def matched_policy_ids(self) -> tuple[str, ...]:
        return tuple(str(m.policy.id) for m in self.matching)


def simulate(
    policies: Sequence[AuthorizationPolicy],
    membership: OrganizationMembership,
    action: str,
    resource: ResourceContext,
    environment: EnvironmentContext | None = None,
) -> PolicySimulation:
    """Evaluate ``policies`` for ``membership`` without side effects.

    Raises:
        MembershipInvalidError: if the membership is not active.
    """
    subject = subject_context_from_membership(membership)
    context = PolicyEvaluationContext(
        subject=subject, resource=resource, action=action, environment=environment
    )
    explanations = tuple(
        evaluate_policy(p, context) for p in sort_policies(active_policies(policies))
    )
    matching = tuple(e for e in explanations if e.matched)
    return PolicySimulation(
        result=evaluate_policies(policies=policies, context=context),
        matching=matching,
        would_deny=any(m.policy.is_deny() for m in matching),
        rbac_allowed=has_permission(
            compute_effective_permissions(subject.role, subject.functional_roles), action
        ),
        explanations=explanations,
    )


class PolicySimulator:
    """Dry-run evaluation against an organization's stored policies."""

    def __init__(self, policy_repository: PolicyRepository):
        self._policy_repository = policy_repository

    def test_policy(
        self,
        membership: OrganizationMembership,
        action: str,
        resource_type: str,
        resource_id: str | None = None,
        environment: EnvironmentContext | None = None,
    ) -> PolicySimulation:
        """
        Raises:
            UnknownResourceTypeError: for a resource type outside the taxonomy.
            PolicyLoadError: if the organization's policies cannot be loaded.
        """
        if not is_resource_type(resource_type):
            raise UnknownResourceTypeError(resource_type, RESOURCE_TYPES)
        policies = self._policy_repository.load_active_policies(membership.organization_id)
        return simulate(
            policies,
            membership,
            action,
            ResourceContext(type=resource_type, id=resource_id),
            environment,
        )

    def test_candidate(
        self,
        candidate: AuthorizationPolicy,
        membership: OrganizationMembership,
        action: str,
        resource: ResourceContext,
        environment: EnvironmentContext | None = None,
    ) -> PolicySimulation:
        """Evaluate as if ``candidate`` were already stored and active.

        Raises:
            PolicyValidationError: if the candidate would be rejected on save.
        """
        validate_policy(candidate)
        stored = [
            p
            for p in self._policy_repository.load_active_policies(membership.organization_id)
            if p.id != candidate.id
        ]
        return simulate(
            stored + [replace(candidate, is_active=True)],
            membership,
            action,
            resource,
            environment,
        )
