"""
authz_services -- Package init and public API.

Responsibility:
    Stateful orchestration over the pure engines: the per-request
    authorization facade, policy and audit storage adapters, system policy
    seeding and dry-run simulation.  This is the only layer that holds
    database sessions or reads the configuration pack.

Architecture position:
    Services -- stateful orchestration over engines + kernel + config.

    Dependency direction (enforced by tests/architecture/test_import_boundaries.py):
        authz_services/ -> authz_engines/  (allowed)
        authz_services/ -> authz_config/   (allowed)
        authz_services/ -> authz_kernel/   (allowed)
        authz_engines/  -> authz_services/ (FORBIDDEN)
        authz_kernel/   -> authz_services/ (FORBIDDEN)

Audit relevance:
    This package is the canonical import surface for host applications.
"""

from authz_kernel.logging_config import get_logger

logger = get_logger("services")

from authz_services.audit_sink import InMemoryAuditSink, SqlAuditSink  # noqa: E402
from authz_services.authorization_service import AuthorizationService  # noqa: E402
from authz_services.policy_repository import (  # noqa: E402
    InMemoryPolicyRepository,
    SqlPolicyRepository,
)
from authz_services.policy_simulator import (  # noqa: E402
    PolicySimulation,
    PolicySimulator,
    simulate,
)
from authz_services.providers import (  # noqa: E402
    ClockEnvironmentProvider,
    StaticMembershipProvider,
)
from authz_services.system_policies import (  # noqa: E402
    create_system_policies_for_organization,
    has_system_policies,
    seed_system_policies,
)

__all__ = [
    "AuthorizationService",
    "ClockEnvironmentProvider",
    "InMemoryAuditSink",
    "InMemoryPolicyRepository",
    "PolicySimulation",
    "PolicySimulator",
    "SqlAuditSink",
    "SqlPolicyRepository",
    "StaticMembershipProvider",
    "create_system_policies_for_organization",
    "has_system_policies",
    "seed_system_policies",
    "simulate",
]
