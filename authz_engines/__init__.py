"""
Module: authz_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    authorization engines: the RBAC permission matrix, the four condition
    matchers, and the ABAC policy engine.  This is the canonical import
    surface for authz_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import authz_kernel.domain (and sibling engine modules).
    MUST NOT import authz_services, authz_config, authz_kernel.db or
    authz_kernel.models.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``.  Environment context
      and timestamps are passed in by the caller.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Policy evaluation is traced via the ``@traced_engine`` decorator
    (see ``authz_engines.tracer``), emitting AUTHZ_ENGINE_TRACE records.
"""

from authz_engines.matchers import (
    create_environment_context,
    filter_matching_actions,
    matches_action_condition,
    matches_environment_condition,
    matches_resource_condition,
    matches_subject_condition,
    subject_context_from_membership,
)
from authz_engines.permission_matrix import (
    base_permissions,
    compute_effective_permissions,
    functional_permissions,
    has_permission,
    permission_set_to_list,
)
from authz_engines.policy_engine import (
    evaluate_policies,
    evaluate_policy,
    find_matching_policies,
    would_deny,
)

__all__ = [
    # Permission matrix
    "base_permissions",
    "functional_permissions",
    "compute_effective_permissions",
    "has_permission",
    "permission_set_to_list",
    # Matchers
    "matches_subject_condition",
    "matches_resource_condition",
    "matches_action_condition",
    "matches_environment_condition",
    "subject_context_from_membership",
    "filter_matching_actions",
    "create_environment_context",
    # Policy engine
    "evaluate_policy",
    "evaluate_policies",
    "find_matching_policies",
    "would_deny",
]
