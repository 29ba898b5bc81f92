"""
System policy pack schema.

Defines the human-authored, reviewable source artifact for the policies
seeded into every organization.  YAML is parsed into these types by the
loader, checked by the validator, and instantiated per organization by
``authz_services.system_policies``.

Key distinction:
  SystemPolicyTemplate = organization-independent policy definition
  AuthorizationPolicy  = a template bound to one organization with an id
"""

from __future__ import annotations

from dataclasses import dataclass

from authz_kernel.domain.conditions import (
    ActionCondition,
    EnvironmentCondition,
    ResourceCondition,
    SubjectCondition,
)
from authz_kernel.domain.policy import PolicyEffect


@dataclass(frozen=True)
class SystemPolicyTemplate:
    """One system policy, not yet bound to an organization."""

    key: str
    name: str
    subject: SubjectCondition
    resource: ResourceCondition
    action: ActionCondition
    effect: PolicyEffect
    priority: int
    description: str | None = None
    environment: EnvironmentCondition | None = None
    is_active: bool = True


@dataclass(frozen=True)
class SystemPolicyPack:
    """The full set of system policy templates.

    ``checksum`` is the SHA-256 of the canonical JSON form of the source
    YAML, so two packs with equal checksums seed identical policies.
    """

    pack_id: str
    version: int
    templates: tuple[SystemPolicyTemplate, ...]
    checksum: str = ""

    def get(self, key: str) -> SystemPolicyTemplate:
        for template in self.templates:
            if template.key == key:
                return template
        raise KeyError(key)

    @property
    def active_templates(self) -> tuple[SystemPolicyTemplate, ...]:
        return tuple(t for t in self.templates if t.is_active)
