"""
Condition wire codec (``authz_kernel.domain.condition_codec``).

Responsibility
--------------
Converts policy conditions between their persisted JSON shape (camelCase
keys, as stored in policy rows and authored in YAML packs) and the frozen
condition dataclasses.

Architecture position
---------------------
**Kernel domain layer** -- pure functions, no I/O.  Used by the YAML
loader (``authz_config``) and the ORM model (``authz_kernel.models``).

Invariants enforced
-------------------
* ``encode_*(decode_*(data))`` preserves every key present in ``data``.
* Keys whose value is unset are omitted on encode.

Failure modes
-------------
* ``InvalidPolicyConditionError`` for non-mapping payloads, wrong value
  types, or values outside the role/attribute vocabularies.  Unknown keys
  are rejected so that typos never silently widen a policy.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, TypeVar

from authz_kernel.domain.conditions import (
    AccountNumberCondition,
    ActionCondition,
    EnvironmentCondition,
    ResourceAttributes,
    ResourceCondition,
    SubjectCondition,
    TimeRange,
)
from authz_kernel.domain.contexts import AccountType, JournalEntryType, PeriodStatus
from authz_kernel.domain.roles import BaseRole, FunctionalRole
from authz_kernel.exceptions import InvalidPolicyConditionError

T = TypeVar("T")

_SUBJECT_KEYS = frozenset({"roles", "functionalRoles", "userIds", "isPlatformAdmin"})
_RESOURCE_KEYS = frozenset({"type", "attributes"})
_ATTRIBUTE_KEYS = frozenset({
    "accountNumber",
    "accountType",
    "isIntercompany",
    "entryType",
    "isOwnEntry",
    "periodStatus",
    "isAdjustmentPeriod",
})
_ACCOUNT_NUMBER_KEYS = frozenset({"range", "in"})
_ACTION_KEYS = frozenset({"actions"})
_ENVIRONMENT_KEYS = frozenset({"timeOfDay", "daysOfWeek", "ipAllowList", "ipDenyList"})
_TIME_RANGE_KEYS = frozenset({"start", "end"})


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------


def _require_mapping(data: Any, path: str, allowed: frozenset[str]) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidPolicyConditionError(path, f"expected an object, got {type(data).__name__}")
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise InvalidPolicyConditionError(path, f"unknown keys: {', '.join(unknown)}")
    return data


def _list_of(data: Any, path: str, convert: Callable[[Any], T]) -> tuple[T, ...] | None:
    if data is None:
        return None
    if not isinstance(data, (list, tuple)):
        raise InvalidPolicyConditionError(path, f"expected a list, got {type(data).__name__}")
    try:
        return tuple(convert(item) for item in data)
    except (ValueError, TypeError) as exc:
        raise InvalidPolicyConditionError(path, str(exc)) from exc


def _optional_bool(data: Any, path: str) -> bool | None:
    if data is None or isinstance(data, bool):
        return data
    raise InvalidPolicyConditionError(path, f"expected a boolean, got {type(data).__name__}")


def _str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return value


def _int(value: Any) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return value


def _enum_values(values: tuple | None) -> list[str] | None:
    return None if values is None else [v.value for v in values]


# ---------------------------------------------------------------------------
# Subject
# ---------------------------------------------------------------------------


def decode_subject_condition(data: Any) -> SubjectCondition:
    data = _require_mapping(data, "subject", _SUBJECT_KEYS)
    return SubjectCondition(
        roles=_list_of(data.get("roles"), "subject.roles", BaseRole),
        functional_roles=_list_of(
            data.get("functionalRoles"), "subject.functionalRoles", FunctionalRole
        ),
        user_ids=_list_of(data.get("userIds"), "subject.userIds", _str),
        is_platform_admin=_optional_bool(
            data.get("isPlatformAdmin"), "subject.isPlatformAdmin"
        ),
    )


def encode_subject_condition(condition: SubjectCondition) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if condition.roles is not None:
        out["roles"] = _enum_values(condition.roles)
    if condition.functional_roles is not None:
        out["functionalRoles"] = _enum_values(condition.functional_roles)
    if condition.user_ids is not None:
        out["userIds"] = list(condition.user_ids)
    if condition.is_platform_admin is not None:
        out["isPlatformAdmin"] = condition.is_platform_admin
    return out


# ---------------------------------------------------------------------------
# Resource
# ---------------------------------------------------------------------------


def _decode_account_number(data: Any) -> AccountNumberCondition:
    path = "resource.attributes.accountNumber"
    data = _require_mapping(data, path, _ACCOUNT_NUMBER_KEYS)
    number_range = _list_of(data.get("range"), f"{path}.range", _int)
    if number_range is not None and len(number_range) != 2:
        raise InvalidPolicyConditionError(f"{path}.range", "expected [min, max]")
    return AccountNumberCondition(
        range=number_range,
        values=_list_of(data.get("in"), f"{path}.in", _int),
    )


def _decode_attributes(data: Any) -> ResourceAttributes:
    path = "resource.attributes"
    data = _require_mapping(data, path, _ATTRIBUTE_KEYS)
    account_number = data.get("accountNumber")
    return ResourceAttributes(
        account_number=(
            None if account_number is None else _decode_account_number(account_number)
        ),
        account_type=_list_of(data.get("accountType"), f"{path}.accountType", AccountType),
        is_intercompany=_optional_bool(data.get("isIntercompany"), f"{path}.isIntercompany"),
        entry_type=_list_of(data.get("entryType"), f"{path}.entryType", JournalEntryType),
        is_own_entry=_optional_bool(data.get("isOwnEntry"), f"{path}.isOwnEntry"),
        period_status=_list_of(data.get("periodStatus"), f"{path}.periodStatus", PeriodStatus),
        is_adjustment_period=_optional_bool(
            data.get("isAdjustmentPeriod"), f"{path}.isAdjustmentPeriod"
        ),
    )


def decode_resource_condition(data: Any) -> ResourceCondition:
    data = _require_mapping(data, "resource", _RESOURCE_KEYS)
    resource_type = data.get("type")
    if not isinstance(resource_type, str) or not resource_type:
        raise InvalidPolicyConditionError("resource.type", "a resource type is required")
    attributes = data.get("attributes")
    return ResourceCondition(
        type=resource_type,
        attributes=None if attributes is None else _decode_attributes(attributes),
    )


def encode_resource_condition(condition: ResourceCondition) -> dict[str, Any]:
    out: dict[str, Any] = {"type": condition.type}
    attrs = condition.attributes
    if attrs is None:
        return out

    encoded: dict[str, Any] = {}
    if attrs.account_number is not None:
        number: dict[str, Any] = {}
        if attrs.account_number.range is not None:
            number["range"] = list(attrs.account_number.range)
        if attrs.account_number.values is not None:
            number["in"] = list(attrs.account_number.values)
        encoded["accountNumber"] = number
    if attrs.account_type is not None:
        encoded["accountType"] = _enum_values(attrs.account_type)
    if attrs.is_intercompany is not None:
        encoded["isIntercompany"] = attrs.is_intercompany
    if attrs.entry_type is not None:
        encoded["entryType"] = _enum_values(attrs.entry_type)
    if attrs.is_own_entry is not None:
        encoded["isOwnEntry"] = attrs.is_own_entry
    if attrs.period_status is not None:
        encoded["periodStatus"] = _enum_values(attrs.period_status)
    if attrs.is_adjustment_period is not None:
        encoded["isAdjustmentPeriod"] = attrs.is_adjustment_period
    out["attributes"] = encoded
    return out


# ---------------------------------------------------------------------------
# Action
# ---------------------------------------------------------------------------


def decode_action_condition(data: Any) -> ActionCondition:
    data = _require_mapping(data, "action", _ACTION_KEYS)
    actions = _list_of(data.get("actions"), "action.actions", _str)
    if actions is None:
        raise InvalidPolicyConditionError("action.actions", "an action list is required")
    return ActionCondition(actions=actions)


def encode_action_condition(condition: ActionCondition) -> dict[str, Any]:
    return {"actions": list(condition.actions)}


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


def decode_environment_condition(data: Any) -> EnvironmentCondition | None:
    """Decode an environment condition; ``None`` stays ``None``."""
    if data is None:
        return None
    data = _require_mapping(data, "environment", _ENVIRONMENT_KEYS)

    time_of_day = None
    raw_time = data.get("timeOfDay")
    if raw_time is not None:
        raw_time = _require_mapping(raw_time, "environment.timeOfDay", _TIME_RANGE_KEYS)
        start, end = raw_time.get("start"), raw_time.get("end")
        if not isinstance(start, str) or not isinstance(end, str):
            raise InvalidPolicyConditionError(
                "environment.timeOfDay", "start and end must be 'HH:MM' strings"
            )
        time_of_day = TimeRange(start=start, end=end)

    return EnvironmentCondition(
        time_of_day=time_of_day,
        days_of_week=_list_of(data.get("daysOfWeek"), "environment.daysOfWeek", _int),
        ip_allow_list=_list_of(data.get("ipAllowList"), "environment.ipAllowList", _str),
        ip_deny_list=_list_of(data.get("ipDenyList"), "environment.ipDenyList", _str),
    )


def encode_environment_condition(
    condition: EnvironmentCondition | None,
) -> dict[str, Any] | None:
    if condition is None:
        return None
    out: dict[str, Any] = {}
    if condition.time_of_day is not None:
        out["timeOfDay"] = {
            "start": condition.time_of_day.start,
            "end": condition.time_of_day.end,
        }
    if condition.days_of_week is not None:
        out["daysOfWeek"] = list(condition.days_of_week)
    if condition.ip_allow_list is not None:
        out["ipAllowList"] = list(condition.ip_allow_list)
    if condition.ip_deny_list is not None:
        out["ipDenyList"] = list(condition.ip_deny_list)
    return out
