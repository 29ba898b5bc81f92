"""
authz_services.authorization_service -- Per-request authorization facade.

Responsibility:
    Answer "may the current member perform this action on this resource?"
    by combining the static RBAC matrix with the organization's ABAC
    policies, recording every refusal through the audit sink before the
    caller sees it.

Architecture position:
    Services -- stateful orchestration.  Collaborators are injected through
    the ``authz_kernel.domain.ports`` protocols; evaluation is delegated to
    the pure ``authz_engines`` layer.

Invariants enforced:
    - Cheap path: with no resource context and an RBAC grant the decision
      is made without loading policies.
    - A policy deny overrides RBAC.  A policy default deny falls back to
      the RBAC result.  An empty policy set leaves the decision to RBAC.
    - Policy load failures propagate; they are never read as "no policies".
    - A denial is written to the audit sink before ``PermissionDeniedError``
      is raised.  If the write fails, ``AuditWriteError`` is raised instead.

Failure modes:
    - MembershipInvalidError from subject resolution.
    - PolicyLoadError from the policy repository.
    - AuditWriteError when a denial cannot be recorded.
    - PermissionDeniedError on a recorded denial.

Audit relevance:
    Denials log at WARNING as ``authorization_denied``; audit failures log
    at ERROR as ``authorization_audit_failed``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from authz_engines.matchers.subject import subject_context_from_membership
from authz_engines.permission_matrix import (
    PermissionSet,
    compute_effective_permissions,
    has_permission,
    permission_set_to_list,
)
from authz_engines.policy_engine import evaluate_policies
from authz_kernel.domain.actions import get_resource_type
from authz_kernel.domain.clock import Clock, SystemClock
from authz_kernel.domain.contexts import (
    EnvironmentContext,
    PolicyEvaluationContext,
    ResourceContext,
    SubjectContext,
)
from authz_kernel.domain.evaluation import AuthorizationDenial
from authz_kernel.domain.policy import AuthorizationPolicy
from authz_kernel.domain.ports import (
    AuditSink,
    EnvironmentProvider,
    MembershipProvider,
    PolicyRepository,
)
from authz_kernel.domain.roles import BaseRole, FunctionalRole, OrganizationMembership
from authz_kernel.exceptions import AuditWriteError, PermissionDeniedError
from authz_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.authorization")


@dataclass(frozen=True)
class _Decision:
    allowed: bool
    reason: str
    denied_by_policy: bool = False
    matched_policy_ids: tuple[str, ...] = ()


class AuthorizationService:
    """
    Authorization facade for one request.

    Construct once per request; the membership, subject and permission set
    are resolved lazily and cached for the lifetime of the instance.

    Usage:
        service = AuthorizationService(memberships, policies, audit)
        service.check_permission("journal_entry:post", journal_entry_resource(...))
    """

    def __init__(
        self,
        membership_provider: MembershipProvider,
        policy_repository: PolicyRepository,
        audit_sink: AuditSink,
        environment_provider: EnvironmentProvider | None = None,
        clock: Clock | None = None,
    ):
        self._membership_provider = membership_provider
        self._policy_repository = policy_repository
        self._audit_sink = audit_sink
        self._environment_provider = environment_provider
        self._clock = clock or SystemClock()
        self._membership: OrganizationMembership | None = None
        self._subject: SubjectContext | None = None
        self._permissions: PermissionSet | None = None

    # -----------------------------------------------------------------
    # Lazy resolution
    # -----------------------------------------------------------------

    @property
    def membership(self) -> OrganizationMembership:
        if self._membership is None:
            self._membership = self._membership_provider.current_membership()
        return self._membership

    @property
    def subject(self) -> SubjectContext:
        if self._subject is None:
            self._subject = subject_context_from_membership(self.membership)
        return self._subject

    @property
    def permissions(self) -> PermissionSet:
        if self._permissions is None:
            subject = self.subject
            self._permissions = compute_effective_permissions(
                subject.role, subject.functional_roles
            )
        return self._permissions

    def _environment(self) -> EnvironmentContext | None:
        if self._environment_provider is None:
            return None
        return self._environment_provider.current_environment()

    def _load_policies(self) -> list[AuthorizationPolicy]:
        return list(
            self._policy_repository.load_active_policies(self.membership.organization_id)
        )

    # -----------------------------------------------------------------
    # Decision
    # -----------------------------------------------------------------

    def _decide(
        self,
        action: str,
        rbac_allowed: bool,
        policies: Sequence[AuthorizationPolicy],
        resource: ResourceContext,
        environment: EnvironmentContext | None,
    ) -> _Decision:
        rbac_reason = (
            f"Role '{self.subject.role.value}' grants {action}"
            if rbac_allowed
            else f"Role '{self.subject.role.value}' does not grant {action}"
        )
        if not policies:
            return _Decision(allowed=rbac_allowed, reason=rbac_reason)

        result = evaluate_policies(
            policies=policies,
            context=PolicyEvaluationContext(
                subject=self.subject,
                resource=resource,
                action=action,
                environment=environment,
            ),
        )
        if result.denied_by_policy:
            return _Decision(
                allowed=False,
                reason=result.reason,
                denied_by_policy=True,
                matched_policy_ids=result.matched_policy_ids,
            )
        if result.is_allowed:
            return _Decision(
                allowed=True,
                reason=result.reason,
                matched_policy_ids=result.matched_policy_ids,
            )
        # default deny: RBAC decides
        return _Decision(allowed=rbac_allowed, reason=rbac_reason)

    def _record_denial(
        self,
        action: str,
        resource: ResourceContext,
        decision: _Decision,
        environment: EnvironmentContext | None,
    ) -> None:
        denial = AuthorizationDenial(
            user_id=self.subject.user_id,
            organization_id=self.membership.organization_id,
            action=action,
            resource_type=resource.type,
            resource_id=resource.id,
            reason=decision.reason,
            occurred_at=self._clock.now(),
            matched_policy_ids=decision.matched_policy_ids,
            ip_address=environment.ip_address if environment else None,
            user_agent=environment.user_agent if environment else None,
        )
        try:
            self._audit_sink.record_denial(denial)
        except AuditWriteError:
            logger.error(
                "authorization_audit_failed",
                extra={"resource_type": resource.type},
                exc_info=True,
            )
            raise
        except Exception as exc:
            logger.error(
                "authorization_audit_failed",
                extra={"resource_type": resource.type},
                exc_info=True,
            )
            raise AuditWriteError(
                action, self.membership.organization_id, str(exc)
            ) from exc

    def check_permission(self, action: str, resource: ResourceContext | None = None) -> None:
        """Allow silently or raise.

        Raises:
            MembershipInvalidError: the caller has no active membership.
            PolicyLoadError: the organization's policies could not be loaded.
            AuditWriteError: the request was denied and the denial could
                not be recorded.
            PermissionDeniedError: the request was denied and recorded.
        """
        membership = self.membership
        with LogContext.bind(
            organization_id=membership.organization_id,
            user_id=membership.user_id,
            action=action,
        ):
            rbac_allowed = has_permission(self.permissions, action)
            if resource is None and rbac_allowed:
                logger.debug("authorization_granted_by_role")
                return

            policies = self._load_policies()
            target = resource or ResourceContext(type=get_resource_type(action))
            environment = self._environment()
            decision = self._decide(action, rbac_allowed, policies, target, environment)
            if decision.allowed:
                logger.debug(
                    "authorization_granted",
                    extra={
                        "resource_type": target.type,
                        "matched_policy_ids": list(decision.matched_policy_ids),
                    },
                )
                return

            self._record_denial(action, target, decision, environment)
            logger.warning(
                "authorization_denied",
                extra={
                    "resource_type": target.type,
                    "resource_id": target.id,
                    "reason": decision.reason,
                    "denied_by_policy": decision.denied_by_policy,
                    "matched_policy_ids": list(decision.matched_policy_ids),
                },
            )
            raise PermissionDeniedError(
                action=action,
                resource_type=target.type,
                reason=decision.reason,
                resource_id=target.id,
                denied_by_policy=decision.denied_by_policy,
                policy_ids=decision.matched_policy_ids,
            )

    def check_permissions(self, actions: Iterable[str]) -> dict[str, bool]:
        """Decide several actions without a resource context.

        Never raises ``PermissionDeniedError`` and never writes to the
        audit sink.  Policies are loaded at most once; load failures
        propagate.
        """
        permissions = self.permissions
        environment: EnvironmentContext | None = None
        policies: list[AuthorizationPolicy] | None = None
        results: dict[str, bool] = {}
        for action in actions:
            rbac_allowed = has_permission(permissions, action)
            if rbac_allowed:
                results[action] = True
                continue
            if policies is None:
                policies = self._load_policies()
                environment = self._environment()
            decision = self._decide(
                action,
                rbac_allowed,
                policies,
                ResourceContext(type=get_resource_type(action)),
                environment,
            )
            results[action] = decision.allowed
        return results

    # -----------------------------------------------------------------
    # Membership queries
    # -----------------------------------------------------------------

    def has_role(self, role: BaseRole | str) -> bool:
        """False for role names outside the vocabulary."""
        return self.membership.role == role

    def has_functional_role(self, role: FunctionalRole | str) -> bool:
        return any(held == role for held in self.membership.functional_roles)

    def get_effective_permissions(self) -> list[str]:
        """Sorted RBAC action list for the current member."""
        return permission_set_to_list(self.permissions)
