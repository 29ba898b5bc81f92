"""
authz_engines.matchers.resource -- Does a resource satisfy a ResourceCondition?

Responsibility:
    Match a ``ResourceContext`` against a policy's resource type and
    attribute constraints, and provide per-kind constructors for resource
    contexts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Type matches on equality or the ``"*"`` wildcard.
    - Attribute constraints are AND-combined.  An attribute the condition
      constrains but the resource does not carry is a mismatch.
    - Empty attribute lists place no constraint.
    - Account-number ranges are inclusive on both ends.
"""

from __future__ import annotations

from authz_kernel.domain.actions import WILDCARD
from authz_kernel.domain.conditions import (
    AccountNumberCondition,
    ResourceAttributes,
    ResourceCondition,
)
from authz_kernel.domain.contexts import (
    AccountType,
    JournalEntryType,
    PeriodStatus,
    ResourceContext,
)


def matches_resource_type(condition_type: str, resource_type: str) -> bool:
    return condition_type == WILDCARD or condition_type == resource_type


def matches_account_number(condition: AccountNumberCondition, account_number: int) -> bool:
    if condition.range is not None:
        low, high = condition.range
        if not low <= account_number <= high:
            return False
    if condition.values and account_number not in condition.values:
        return False
    return True


def _describe_flag(value: bool, true_label: str, false_label: str) -> str:
    return true_label if value else false_label


def _attribute_mismatch(attrs: ResourceAttributes, resource: ResourceContext) -> str | None:
    if attrs.account_number is not None:
        number = resource.account_number
        if number is None:
            return "Condition requires account number but resource has none"
        if not matches_account_number(attrs.account_number, number):
            if attrs.account_number.range is not None:
                low, high = attrs.account_number.range
                if not low <= number <= high:
                    return f"Account number {number} is not in range [{low}, {high}]"
            allowed = ", ".join(str(v) for v in attrs.account_number.values or ())
            return f"Account number {number} is not in allowed list: [{allowed}]"

    if attrs.account_type:
        if resource.account_type is None:
            return "Condition requires account type but resource has none"
        if resource.account_type not in attrs.account_type:
            allowed = ", ".join(t.value for t in attrs.account_type)
            return (
                f"Account type '{resource.account_type.value}' is not in "
                f"allowed types: [{allowed}]"
            )

    if attrs.is_intercompany is not None:
        if resource.is_intercompany is None:
            return "Condition requires intercompany flag but resource has none"
        if resource.is_intercompany != attrs.is_intercompany:
            actual = _describe_flag(resource.is_intercompany, "intercompany", "non-intercompany")
            expected = _describe_flag(attrs.is_intercompany, "intercompany", "non-intercompany")
            return f"Resource is {actual} but condition requires {expected}"

    if attrs.entry_type:
        if resource.entry_type is None:
            return "Condition requires entry type but resource has none"
        if resource.entry_type not in attrs.entry_type:
            allowed = ", ".join(t.value for t in attrs.entry_type)
            return (
                f"Entry type '{resource.entry_type.value}' is not in "
                f"allowed types: [{allowed}]"
            )

    if attrs.is_own_entry is not None:
        if resource.is_own_entry is None:
            return "Condition requires own entry check but resource has no creator info"
        if resource.is_own_entry != attrs.is_own_entry:
            actual = _describe_flag(resource.is_own_entry, "own entry", "other's entry")
            expected = _describe_flag(attrs.is_own_entry, "own entry", "other's entry")
            return f"Resource is {actual} but condition requires {expected}"

    if attrs.period_status:
        if resource.period_status is None:
            return "Condition requires period status but resource has none"
        if resource.period_status not in attrs.period_status:
            allowed = ", ".join(s.value for s in attrs.period_status)
            return (
                f"Period status '{resource.period_status.value}' is not in "
                f"allowed statuses: [{allowed}]"
            )

    if attrs.is_adjustment_period is not None:
        if resource.is_adjustment_period is None:
            return "Condition requires adjustment period flag but resource has none"
        if resource.is_adjustment_period != attrs.is_adjustment_period:
            actual = _describe_flag(
                resource.is_adjustment_period, "adjustment period", "regular period"
            )
            expected = _describe_flag(
                attrs.is_adjustment_period, "adjustment period", "regular period"
            )
            return f"Resource is {actual} but condition requires {expected}"

    return None


def matches_resource_attributes(attrs: ResourceAttributes, resource: ResourceContext) -> bool:
    return _attribute_mismatch(attrs, resource) is None


def matches_resource_condition(condition: ResourceCondition, resource: ResourceContext) -> bool:
    return get_resource_mismatch_reason(condition, resource) is None


def get_resource_mismatch_reason(
    condition: ResourceCondition, resource: ResourceContext
) -> str | None:
    """Describe the first failing check, or ``None`` if the resource matches."""
    if not matches_resource_type(condition.type, resource.type):
        return (
            f"Resource type '{resource.type}' does not match "
            f"condition type '{condition.type}'"
        )
    if condition.attributes is not None:
        return _attribute_mismatch(condition.attributes, resource)
    return None


# =========================================================================
# Context constructors
# =========================================================================


def account_resource(
    id: str | None = None,
    account_number: int | None = None,
    account_type: AccountType | str | None = None,
    is_intercompany: bool | None = None,
) -> ResourceContext:
    return ResourceContext(
        type="account",
        id=id,
        account_number=account_number,
        account_type=account_type,
        is_intercompany=is_intercompany,
    )


def journal_entry_resource(
    id: str | None = None,
    entry_type: JournalEntryType | str | None = None,
    is_own_entry: bool | None = None,
    period_status: PeriodStatus | str | None = None,
) -> ResourceContext:
    return ResourceContext(
        type="journal_entry",
        id=id,
        entry_type=entry_type,
        is_own_entry=is_own_entry,
        period_status=period_status,
    )


def fiscal_period_resource(
    id: str | None = None,
    period_status: PeriodStatus | str | None = None,
    is_adjustment_period: bool | None = None,
) -> ResourceContext:
    return ResourceContext(
        type="fiscal_period",
        id=id,
        period_status=period_status,
        is_adjustment_period=is_adjustment_period,
    )


def organization_resource(id: str | None = None) -> ResourceContext:
    return ResourceContext(type="organization", id=id)


def company_resource(id: str | None = None) -> ResourceContext:
    return ResourceContext(type="company", id=id)


def consolidation_group_resource(id: str | None = None) -> ResourceContext:
    return ResourceContext(type="consolidation_group", id=id)


def report_resource(id: str | None = None) -> ResourceContext:
    return ResourceContext(type="report", id=id)
