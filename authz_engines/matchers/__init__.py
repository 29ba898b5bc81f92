"""Condition matchers: one module per condition kind, all pure and total."""

from authz_engines.matchers.action import (
    filter_matching_actions,
    get_action_mismatch_reason,
    matches_action_condition,
    matches_action_pattern,
)
from authz_engines.matchers.environment import (
    create_environment_context,
    get_environment_mismatch_reason,
    matches_environment_condition,
    matches_ip_pattern,
    matches_time_of_day,
)
from authz_engines.matchers.resource import (
    account_resource,
    company_resource,
    consolidation_group_resource,
    fiscal_period_resource,
    get_resource_mismatch_reason,
    journal_entry_resource,
    matches_resource_condition,
    organization_resource,
    report_resource,
)
from authz_engines.matchers.subject import (
    get_subject_mismatch_reason,
    matches_subject_condition,
    subject_context_from_membership,
)

__all__ = [
    "matches_subject_condition",
    "get_subject_mismatch_reason",
    "subject_context_from_membership",
    "matches_resource_condition",
    "get_resource_mismatch_reason",
    "account_resource",
    "journal_entry_resource",
    "fiscal_period_resource",
    "organization_resource",
    "company_resource",
    "consolidation_group_resource",
    "report_resource",
    "matches_action_pattern",
    "matches_action_condition",
    "get_action_mismatch_reason",
    "filter_matching_actions",
    "matches_environment_condition",
    "get_environment_mismatch_reason",
    "matches_time_of_day",
    "matches_ip_pattern",
    "create_environment_context",
]
