"""
Pure domain layer.

This module contains the authorization vocabularies, value objects and
protocols with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (other than the injectable Clock)
- I/O

All domain objects are immutable and deterministic.
"""

from authz_kernel.domain.actions import (
    ALL_ACTIONS,
    RESOURCE_TYPES,
    WILDCARD,
    get_action_prefix,
    get_resource_type,
    is_known_action,
    is_resource_type,
    is_valid_action_pattern,
)
from authz_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from authz_kernel.domain.conditions import (
    AccountNumberCondition,
    ActionCondition,
    EnvironmentCondition,
    ResourceAttributes,
    ResourceCondition,
    SubjectCondition,
    TimeRange,
)
from authz_kernel.domain.contexts import (
    AccountType,
    EnvironmentContext,
    JournalEntryType,
    PeriodStatus,
    PolicyEvaluationContext,
    ResourceContext,
    SubjectContext,
)
from authz_kernel.domain.evaluation import (
    AuthorizationDenial,
    PolicyDecision,
    PolicyEvaluationResult,
    PolicyMatchResult,
)
from authz_kernel.domain.policy import (
    DEFAULT_POLICY_PRIORITY,
    MAX_CUSTOM_PRIORITY,
    AuthorizationPolicy,
    PolicyEffect,
    SystemPolicyPriority,
)
from authz_kernel.domain.ports import (
    AuditSink,
    EnvironmentProvider,
    MembershipProvider,
    PolicyRepository,
)
from authz_kernel.domain.roles import (
    BaseRole,
    FunctionalRole,
    MembershipStatus,
    OrganizationMembership,
)

__all__ = [
    # Taxonomy
    "ALL_ACTIONS",
    "RESOURCE_TYPES",
    "WILDCARD",
    "get_action_prefix",
    "get_resource_type",
    "is_known_action",
    "is_resource_type",
    "is_valid_action_pattern",
    # Roles
    "BaseRole",
    "FunctionalRole",
    "MembershipStatus",
    "OrganizationMembership",
    # Contexts
    "AccountType",
    "JournalEntryType",
    "PeriodStatus",
    "SubjectContext",
    "ResourceContext",
    "EnvironmentContext",
    "PolicyEvaluationContext",
    # Conditions
    "SubjectCondition",
    "ResourceCondition",
    "ResourceAttributes",
    "AccountNumberCondition",
    "ActionCondition",
    "EnvironmentCondition",
    "TimeRange",
    # Policy
    "AuthorizationPolicy",
    "PolicyEffect",
    "SystemPolicyPriority",
    "DEFAULT_POLICY_PRIORITY",
    "MAX_CUSTOM_PRIORITY",
    # Evaluation
    "PolicyDecision",
    "PolicyMatchResult",
    "PolicyEvaluationResult",
    "AuthorizationDenial",
    # Ports
    "MembershipProvider",
    "PolicyRepository",
    "AuditSink",
    "EnvironmentProvider",
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
]
