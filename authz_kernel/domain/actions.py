"""
Action and resource taxonomy.

Responsibility:
    Defines the closed vocabulary of actions (``"{resource}:{verb}"``) and the
    ABAC resource types they target.  Action strings are persisted in policy
    conditions and audit rows, so their spelling is part of the wire format.

Architecture position:
    Kernel > Domain -- pure constants and string helpers, zero I/O.

Invariants enforced:
    - Every concrete action has exactly one ``:`` separating a known prefix
      from a verb.
    - Every action prefix resolves to exactly one ABAC resource type.
"""

from __future__ import annotations

from typing import Final

WILDCARD: Final[str] = "*"
"""Universal action wildcard. Also the resource-condition wildcard."""


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

ORGANIZATION_ACTIONS: Final[tuple[str, ...]] = (
    "organization:manage_settings",
    "organization:manage_members",
    "organization:delete",
    "organization:transfer_ownership",
)

COMPANY_ACTIONS: Final[tuple[str, ...]] = (
    "company:create",
    "company:read",
    "company:update",
    "company:delete",
)

ACCOUNT_ACTIONS: Final[tuple[str, ...]] = (
    "account:create",
    "account:read",
    "account:update",
    "account:deactivate",
)

JOURNAL_ENTRY_ACTIONS: Final[tuple[str, ...]] = (
    "journal_entry:create",
    "journal_entry:read",
    "journal_entry:update",
    "journal_entry:post",
    "journal_entry:reverse",
)

FISCAL_PERIOD_ACTIONS: Final[tuple[str, ...]] = (
    "fiscal_period:read",
    "fiscal_period:manage",
)

CONSOLIDATION_GROUP_ACTIONS: Final[tuple[str, ...]] = (
    "consolidation_group:create",
    "consolidation_group:read",
    "consolidation_group:update",
    "consolidation_group:delete",
    "consolidation_group:run",
)

ELIMINATION_ACTIONS: Final[tuple[str, ...]] = ("elimination:create",)

REPORT_ACTIONS: Final[tuple[str, ...]] = (
    "report:read",
    "report:export",
)

EXCHANGE_RATE_ACTIONS: Final[tuple[str, ...]] = (
    "exchange_rate:read",
    "exchange_rate:manage",
)

AUDIT_LOG_ACTIONS: Final[tuple[str, ...]] = ("audit_log:read",)

ALL_ACTIONS: Final[tuple[str, ...]] = (
    *ORGANIZATION_ACTIONS,
    *COMPANY_ACTIONS,
    *ACCOUNT_ACTIONS,
    *JOURNAL_ENTRY_ACTIONS,
    *FISCAL_PERIOD_ACTIONS,
    *CONSOLIDATION_GROUP_ACTIONS,
    *ELIMINATION_ACTIONS,
    *REPORT_ACTIONS,
    *EXCHANGE_RATE_ACTIONS,
    *AUDIT_LOG_ACTIONS,
)

_KNOWN_ACTIONS: Final[frozenset[str]] = frozenset(ALL_ACTIONS)


# ---------------------------------------------------------------------------
# Resource types
# ---------------------------------------------------------------------------

RESOURCE_TYPES: Final[tuple[str, ...]] = (
    "organization",
    "company",
    "account",
    "journal_entry",
    "fiscal_period",
    "consolidation_group",
    "report",
)

_RESOURCE_TYPE_SET: Final[frozenset[str]] = frozenset(RESOURCE_TYPES)

# Action prefixes that do not name their own resource type.
_PREFIX_RESOURCE_OVERRIDES: Final[dict[str, str]] = {
    "exchange_rate": "report",
    "elimination": "consolidation_group",
    "audit_log": "organization",
}

ACTION_PREFIXES: Final[tuple[str, ...]] = tuple(
    dict.fromkeys(action.split(":", 1)[0] for action in ALL_ACTIONS)
)

_ACTION_PREFIX_SET: Final[frozenset[str]] = frozenset(ACTION_PREFIXES)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_action_prefix(action: str) -> str:
    """Return the part before the first ``:`` (the whole string if none)."""
    return action.split(":", 1)[0]


def get_resource_type(action: str) -> str:
    """
    Return the ABAC resource type an action targets.

    ``exchange_rate`` actions target reports, ``elimination`` actions target
    consolidation groups and ``audit_log`` actions target the organization.
    Unknown prefixes are returned unchanged.
    """
    prefix = get_action_prefix(action)
    return _PREFIX_RESOURCE_OVERRIDES.get(prefix, prefix)


def is_known_action(value: str) -> bool:
    """True if ``value`` is a concrete action from the vocabulary."""
    return value in _KNOWN_ACTIONS


def is_resource_type(value: str) -> bool:
    """True if ``value`` is one of the ABAC resource types."""
    return value in _RESOURCE_TYPE_SET


def is_valid_action_pattern(value: str) -> bool:
    """
    True if ``value`` may appear in an action condition.

    Accepted: a concrete action, ``"*"``, or ``"<known prefix>:*"``.
    """
    if value == WILDCARD or value in _KNOWN_ACTIONS:
        return True
    prefix, sep, verb = value.partition(":")
    return bool(sep) and verb == WILDCARD and prefix in _ACTION_PREFIX_SET
