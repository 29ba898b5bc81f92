"""
System policy pack validator (``authz_config.validator``).

Responsibility
--------------
Checks a parsed ``SystemPolicyPack`` before any organization is seeded
from it.

Architecture position
---------------------
**Config layer** -- build-time validation.  Reuses the kernel's
authoring-time checks (``authz_kernel.domain.policy_validation``) for each
template and adds pack-level checks.

Invariants enforced
-------------------
* Template keys and names are unique within the pack.
* Every template passes the kernel's policy validation at system priority.
* Deny templates sit in the reserved period-protection bands.

Failure modes
-------------
* Validation errors (``ConfigValidationResult.errors``)  -> the pack MUST
  NOT be used for seeding.
* Validation warnings  -> the pack may be used but should be reviewed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from authz_config.schema import SystemPolicyPack, SystemPolicyTemplate
from authz_kernel.domain.policy import MAX_CUSTOM_PRIORITY, PolicyEffect
from authz_kernel.domain.policy_validation import (
    validate_action_condition,
    validate_environment_condition,
    validate_priority,
    validate_resource_condition,
)
from authz_kernel.exceptions import PolicyValidationError


@dataclass
class ConfigValidationResult:
    """
    Result of pack validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def _validate_template(template: SystemPolicyTemplate, result: ConfigValidationResult) -> None:
    if not template.name.strip():
        result.add_error(f"Template '{template.key}': name must not be empty")
    try:
        validate_priority(template.priority, is_system_policy=True)
        validate_resource_condition(template.resource)
        validate_action_condition(template.action)
        validate_environment_condition(template.environment)
    except PolicyValidationError as exc:
        result.add_error(f"Template '{template.key}': {exc}")
        return

    if template.priority <= MAX_CUSTOM_PRIORITY and template.effect == PolicyEffect.DENY:
        result.add_warning(
            f"Template '{template.key}': deny at priority {template.priority} "
            f"is inside the custom policy band"
        )
    if not template.is_active:
        result.add_warning(f"Template '{template.key}' is seeded inactive")


def validate_system_policy_pack(pack: SystemPolicyPack) -> ConfigValidationResult:
    """Validate every template and the pack as a whole."""
    result = ConfigValidationResult()

    if not pack.templates:
        result.add_error("Pack contains no policies")

    for key, count in Counter(t.key for t in pack.templates).items():
        if count > 1:
            result.add_error(f"Duplicate template key '{key}'")
    for name, count in Counter(t.name for t in pack.templates).items():
        if count > 1:
            result.add_error(f"Duplicate template name '{name}'")

    for template in pack.templates:
        _validate_template(template, result)

    return result
