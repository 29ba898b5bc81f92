"""
authz_services.system_policies -- Seed the system policies of an organization.

Responsibility:
    Bind the templates of the system policy pack to one organization and
    store them through a policy repository.

Architecture position:
    Services.  Templates come only from ``authz_config.get_system_policy_pack``.

Invariants enforced:
    - Seeded policies carry ``is_system_policy=True`` and a fresh id; the
      repositories then refuse to update or delete them.
    - Template priorities, conditions and active flags are copied verbatim.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol
from uuid import uuid4

from authz_config import get_system_policy_pack
from authz_config.schema import SystemPolicyPack, SystemPolicyTemplate
from authz_kernel.domain.clock import Clock, SystemClock
from authz_kernel.domain.policy import AuthorizationPolicy

logger = logging.getLogger("authz.services.system_policies")


class _PolicyWriter(Protocol):
    def create(self, policy: AuthorizationPolicy) -> AuthorizationPolicy:
        ...


def _bind_template(
    template: SystemPolicyTemplate, organization_id: str, clock: Clock
) -> AuthorizationPolicy:
    now = clock.now()
    return AuthorizationPolicy(
        id=uuid4(),
        organization_id=organization_id,
        name=template.name,
        description=template.description,
        subject=template.subject,
        resource=template.resource,
        action=template.action,
        environment=template.environment,
        effect=template.effect,
        priority=template.priority,
        is_system_policy=True,
        is_active=template.is_active,
        created_at=now,
        updated_at=now,
    )


def create_system_policies_for_organization(
    organization_id: str,
    pack: SystemPolicyPack | None = None,
    clock: Clock | None = None,
) -> list[AuthorizationPolicy]:
    """One policy per pack template, bound to ``organization_id``. Not stored."""
    pack = pack or get_system_policy_pack()
    clock = clock or SystemClock()
    return [_bind_template(t, organization_id, clock) for t in pack.templates]


def seed_system_policies(
    repository: _PolicyWriter,
    organization_id: str,
    pack: SystemPolicyPack | None = None,
    clock: Clock | None = None,
) -> list[AuthorizationPolicy]:
    """Create and store the system policies for a new organization."""
    pack = pack or get_system_policy_pack()
    created = [
        repository.create(policy)
        for policy in create_system_policies_for_organization(organization_id, pack, clock)
    ]
    logger.info(
        "system_policies_seeded",
        extra={
            "organization_id": organization_id,
            "policy_count": len(created),
            "pack_checksum": pack.checksum,
        },
    )
    return created


def has_system_policies(
    policies: Iterable[AuthorizationPolicy],
    pack: SystemPolicyPack | None = None,
) -> bool:
    """True if the organization holds at least as many system policies as the pack defines."""
    pack = pack or get_system_policy_pack()
    return sum(1 for p in policies if p.is_system_policy) >= len(pack.templates)
