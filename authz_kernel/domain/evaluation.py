"""
Evaluation results and denial records (``authz_kernel.domain.evaluation``).

Responsibility
--------------
Outputs of the policy engine (``PolicyMatchResult``,
``PolicyEvaluationResult``) and the ``AuthorizationDenial`` record the
authorization service hands to its audit sink.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``denied_by_policy`` and ``default_deny`` are mutually exclusive and
  both imply ``decision == DENY``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from authz_kernel.domain.policy import AuthorizationPolicy


class PolicyDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class PolicyMatchResult:
    """Outcome of matching a single policy against a context."""

    policy: AuthorizationPolicy
    matched: bool
    mismatch_reason: str | None = None


@dataclass(frozen=True)
class PolicyEvaluationResult:
    """Outcome of evaluating a policy set against a context."""

    decision: PolicyDecision
    reason: str
    matched_policies: tuple[AuthorizationPolicy, ...] = ()
    denied_by_policy: bool = False
    default_deny: bool = False

    def __post_init__(self) -> None:
        if self.denied_by_policy and self.default_deny:
            raise ValueError("denied_by_policy and default_deny are mutually exclusive")
        if (self.denied_by_policy or self.default_deny) and self.decision != PolicyDecision.DENY:
            raise ValueError("denied_by_policy/default_deny require a DENY decision")

    @property
    def is_allowed(self) -> bool:
        return self.decision == PolicyDecision.ALLOW

    @property
    def matched_policy_ids(self) -> tuple[str, ...]:
        return tuple(str(p.id) for p in self.matched_policies)


@dataclass(frozen=True)
class AuthorizationDenial:
    """One refused authorization request, as written to the audit log."""

    user_id: str
    organization_id: str
    action: str
    resource_type: str
    reason: str
    occurred_at: datetime
    resource_id: str | None = None
    matched_policy_ids: tuple[str, ...] = field(default_factory=tuple)
    ip_address: str | None = None
    user_agent: str | None = None
