"""
authz_engines.policy_engine -- Pure ABAC policy evaluation.

Responsibility:
    Reduce an organization's policy set and one request context to an
    allow/deny decision with an explanation.  Also provides read-only
    enumeration (all matching policies, would-any-deny) for simulation and
    debugging.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import authz_kernel.domain types and sibling engine modules.

Invariants enforced:
    - Inactive policies never participate.
    - Deny override: any fully matching deny policy denies, whatever the
      priorities of matching allows.
    - Deterministic ordering: policies are scanned by priority descending,
      ties broken by policy id string; the first matching allow wins.
    - Default deny: with no match, the decision is DENY with
      ``default_deny=True``.
    - A policy with a non-empty environment condition cannot match a
      context that carries no environment.
    - Purity: no clock access, no I/O, no database.

Failure modes:
    None.  Matchers are total; malformed policy data yields a mismatch.

Audit relevance:
    ``evaluate_policies`` emits an AUTHZ_ENGINE_TRACE record carrying the
    input fingerprint, decision and matched policy ids.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from authz_engines.matchers.action import get_action_mismatch_reason
from authz_engines.matchers.environment import get_environment_mismatch_reason
from authz_engines.matchers.resource import get_resource_mismatch_reason
from authz_engines.matchers.subject import get_subject_mismatch_reason
from authz_engines.tracer import traced_engine
from authz_kernel.domain.contexts import PolicyEvaluationContext
from authz_kernel.domain.evaluation import (
    PolicyDecision,
    PolicyEvaluationResult,
    PolicyMatchResult,
)
from authz_kernel.domain.policy import AuthorizationPolicy

ENGINE_NAME = "policy_engine"
ENGINE_VERSION = "1.0"


def _priority_key(policy: AuthorizationPolicy) -> tuple[int, str]:
    return (-policy.priority, str(policy.id))


def sort_policies(policies: Iterable[AuthorizationPolicy]) -> list[AuthorizationPolicy]:
    """Priority descending, ties broken by id string."""
    return sorted(policies, key=_priority_key)


def active_policies(policies: Iterable[AuthorizationPolicy]) -> list[AuthorizationPolicy]:
    return [p for p in policies if p.is_active]


def evaluate_policy(
    policy: AuthorizationPolicy, context: PolicyEvaluationContext
) -> PolicyMatchResult:
    """Match one policy; the result names the first failing condition."""
    if not policy.is_active:
        return PolicyMatchResult(policy, False, "Policy is inactive")

    reason = get_subject_mismatch_reason(policy.subject, context.subject)
    if reason is not None:
        return PolicyMatchResult(policy, False, reason)

    reason = get_resource_mismatch_reason(policy.resource, context.resource)
    if reason is not None:
        return PolicyMatchResult(policy, False, reason)

    reason = get_action_mismatch_reason(policy.action, context.action)
    if reason is not None:
        return PolicyMatchResult(policy, False, reason)

    if policy.has_environment_condition:
        if context.environment is None:
            return PolicyMatchResult(
                policy,
                False,
                "Policy has environment conditions but no environment context provided",
            )
        reason = get_environment_mismatch_reason(policy.environment, context.environment)
        if reason is not None:
            return PolicyMatchResult(policy, False, reason)

    return PolicyMatchResult(policy, True)


def _summarize(result: PolicyEvaluationResult) -> dict[str, Any]:
    return {
        "decision": result.decision.value,
        "matched_policy_ids": list(result.matched_policy_ids),
        "denied_by_policy": result.denied_by_policy,
        "default_deny": result.default_deny,
    }


@traced_engine(
    ENGINE_NAME,
    ENGINE_VERSION,
    fingerprint_fields=("policies", "context"),
    summarize=_summarize,
)
def evaluate_policies(
    policies: Sequence[AuthorizationPolicy],
    context: PolicyEvaluationContext,
) -> PolicyEvaluationResult:
    """Decide ``context`` against ``policies`` with deny override and default deny."""
    ordered = sort_policies(active_policies(policies))
    if not ordered:
        return PolicyEvaluationResult(
            decision=PolicyDecision.DENY,
            reason="No active policies found - default deny",
            default_deny=True,
        )

    denies = [p for p in ordered if p.is_deny()]
    allows = [p for p in ordered if p.is_allow()]

    for policy in denies:
        if evaluate_policy(policy, context).matched:
            return PolicyEvaluationResult(
                decision=PolicyDecision.DENY,
                reason=f"Denied by policy: {policy.name}",
                matched_policies=(policy,),
                denied_by_policy=True,
            )

    for policy in allows:
        if evaluate_policy(policy, context).matched:
            return PolicyEvaluationResult(
                decision=PolicyDecision.ALLOW,
                reason=f"Allowed by policy: {policy.name}",
                matched_policies=(policy,),
            )

    return PolicyEvaluationResult(
        decision=PolicyDecision.DENY,
        reason="No matching allow policy found - default deny",
        default_deny=True,
    )


def find_matching_policies(
    policies: Sequence[AuthorizationPolicy],
    context: PolicyEvaluationContext,
) -> list[PolicyMatchResult]:
    """Every active policy that fully matches, in evaluation order."""
    results = [evaluate_policy(p, context) for p in sort_policies(active_policies(policies))]
    return [r for r in results if r.matched]


def would_deny(
    policies: Sequence[AuthorizationPolicy],
    context: PolicyEvaluationContext,
) -> bool:
    """True if any active deny policy fully matches."""
    return any(
        evaluate_policy(p, context).matched
        for p in active_policies(policies)
        if p.is_deny()
    )
