"""
authz_services.policy_repository -- Policy storage adapters.

Responsibility:
    Implementations of the ``PolicyRepository`` port plus the policy CRUD
    that organization administrators use: create (with validation and the
    custom priority cap), update, delete, activate/deactivate, lookups.

Architecture position:
    Services -- stateful adapters over the kernel models.
    ``SqlPolicyRepository`` works inside the caller's SQLAlchemy session;
    it flushes but never commits.

Invariants enforced:
    - Every stored policy passes ``validate_policy`` (custom policies are
      capped at priority 899).
    - Policy names are unique per organization.
    - ``create`` never overwrites: a policy ID that is already stored is
      refused, so a system policy cannot be replaced through it.
    - System policies refuse update and delete.  Toggling ``is_active`` is
      permitted on system policies so inactive-by-default protections can
      be switched on.
    - ``load_active_policies`` never returns an empty list to signal a
      failure: storage and decode errors raise ``PolicyLoadError``.

Failure modes:
    - PolicyLoadError, PolicyNotFoundError, SystemPolicyProtectionError,
      DuplicatePolicyIdError, DuplicatePolicyNameError,
      PolicyValidationError subclasses.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from authz_engines.policy_engine import sort_policies
from authz_kernel.domain.clock import Clock, SystemClock
from authz_kernel.domain.policy import AuthorizationPolicy
from authz_kernel.domain.policy_validation import parse_policy_id, validate_policy
from authz_kernel.exceptions import (
    DuplicatePolicyIdError,
    DuplicatePolicyNameError,
    PolicyLoadError,
    PolicyNotFoundError,
    PolicyValidationError,
    SystemPolicyProtectionError,
)
from authz_kernel.models.policy import OrganizationPolicyModel

logger = logging.getLogger("authz.services.policy_repository")

UPDATABLE_FIELDS = frozenset({
    "name",
    "description",
    "subject",
    "resource",
    "action",
    "environment",
    "effect",
    "priority",
    "is_active",
})


def _stamp_new(policy: AuthorizationPolicy, clock: Clock) -> AuthorizationPolicy:
    now = clock.now()
    stamped = replace(policy, created_at=policy.created_at or now, updated_at=now)
    validate_policy(stamped)
    return stamped


def _apply_changes(
    existing: AuthorizationPolicy, changes: dict[str, Any], clock: Clock
) -> AuthorizationPolicy:
    if not existing.can_modify():
        raise SystemPolicyProtectionError(str(existing.id), "update")
    unknown = sorted(set(changes) - UPDATABLE_FIELDS)
    if unknown:
        raise PolicyValidationError(
            f"Fields cannot be updated: {', '.join(unknown)}", field=unknown[0]
        )
    updated = replace(existing, **changes, updated_at=clock.now())
    validate_policy(updated)
    return updated


class InMemoryPolicyRepository:
    """Dict-backed repository with the same rules as the SQL adapter."""

    def __init__(
        self,
        policies: list[AuthorizationPolicy] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._policies: dict[UUID, AuthorizationPolicy] = {}
        for policy in policies or ():
            self._policies[policy.id] = policy

    def load_active_policies(self, organization_id: str) -> list[AuthorizationPolicy]:
        return [
            p for p in self.find_by_organization(organization_id) if p.is_active
        ]

    def find_by_organization(self, organization_id: str) -> list[AuthorizationPolicy]:
        return sort_policies(
            p for p in self._policies.values() if p.organization_id == organization_id
        )

    def find_by_id(self, policy_id: str | UUID) -> AuthorizationPolicy | None:
        return self._policies.get(parse_policy_id(policy_id))

    def get_by_id(self, policy_id: str | UUID) -> AuthorizationPolicy:
        policy = self.find_by_id(policy_id)
        if policy is None:
            raise PolicyNotFoundError(str(policy_id))
        return policy

    def create(self, policy: AuthorizationPolicy) -> AuthorizationPolicy:
        stamped = _stamp_new(policy, self._clock)
        if stamped.id in self._policies:
            raise DuplicatePolicyIdError(str(stamped.id))
        if any(
            p.organization_id == stamped.organization_id and p.name == stamped.name
            for p in self._policies.values()
        ):
            raise DuplicatePolicyNameError(stamped.organization_id, stamped.name)
        self._policies[stamped.id] = stamped
        return stamped

    def update(self, policy_id: str | UUID, **changes: Any) -> AuthorizationPolicy:
        existing = self.get_by_id(policy_id)
        updated = _apply_changes(existing, changes, self._clock)
        if updated.name != existing.name and any(
            p.organization_id == updated.organization_id
            and p.name == updated.name
            and p.id != updated.id
            for p in self._policies.values()
        ):
            raise DuplicatePolicyNameError(updated.organization_id, updated.name)
        self._policies[updated.id] = updated
        return updated

    def delete(self, policy_id: str | UUID) -> None:
        existing = self.get_by_id(policy_id)
        if not existing.can_delete():
            raise SystemPolicyProtectionError(str(existing.id), "delete")
        del self._policies[existing.id]

    def set_active(self, policy_id: str | UUID, is_active: bool) -> AuthorizationPolicy:
        existing = self.get_by_id(policy_id)
        updated = replace(existing, is_active=is_active, updated_at=self._clock.now())
        self._policies[updated.id] = updated
        return updated

    def activate(self, policy_id: str | UUID) -> AuthorizationPolicy:
        return self.set_active(policy_id, True)

    def deactivate(self, policy_id: str | UUID) -> AuthorizationPolicy:
        return self.set_active(policy_id, False)


class SqlPolicyRepository:
    """SQLAlchemy-backed repository over ``organization_policies``.

    Works inside the caller's session: writes are flushed, never committed.
    """

    def __init__(self, session: Session, clock: Clock | None = None) -> None:
        self._session = session
        self._clock = clock or SystemClock()

    def load_active_policies(self, organization_id: str) -> list[AuthorizationPolicy]:
        """Active policies for the organization.

        Raises:
            PolicyLoadError: on any storage error or undecodable row.
        """
        try:
            rows = self._session.execute(
                select(OrganizationPolicyModel).where(
                    OrganizationPolicyModel.organization_id == organization_id,
                    OrganizationPolicyModel.is_active.is_(True),
                )
            ).scalars().all()
            policies = [row.to_dto() for row in rows]
        except SQLAlchemyError as exc:
            logger.error(
                "policy_load_failed",
                extra={"organization_id": organization_id},
                exc_info=True,
            )
            raise PolicyLoadError(organization_id, str(exc)) from exc
        except (PolicyValidationError, ValueError) as exc:
            logger.error(
                "policy_decode_failed",
                extra={"organization_id": organization_id},
                exc_info=True,
            )
            raise PolicyLoadError(organization_id, f"invalid stored policy: {exc}") from exc

        logger.debug(
            "policies_loaded",
            extra={"organization_id": organization_id, "policy_count": len(policies)},
        )
        return sort_policies(policies)

    def find_by_organization(self, organization_id: str) -> list[AuthorizationPolicy]:
        rows = self._session.execute(
            select(OrganizationPolicyModel).where(
                OrganizationPolicyModel.organization_id == organization_id,
            )
        ).scalars().all()
        return sort_policies(row.to_dto() for row in rows)

    def _find_model(self, policy_id: str | UUID) -> OrganizationPolicyModel | None:
        return self._session.get(OrganizationPolicyModel, parse_policy_id(policy_id))

    def _get_model(self, policy_id: str | UUID) -> OrganizationPolicyModel:
        model = self._find_model(policy_id)
        if model is None:
            raise PolicyNotFoundError(str(policy_id))
        return model

    def find_by_id(self, policy_id: str | UUID) -> AuthorizationPolicy | None:
        model = self._find_model(policy_id)
        return None if model is None else model.to_dto()

    def get_by_id(self, policy_id: str | UUID) -> AuthorizationPolicy:
        return self._get_model(policy_id).to_dto()

    def _name_taken(self, organization_id: str, name: str, exclude: UUID | None = None) -> bool:
        stmt = select(OrganizationPolicyModel.id).where(
            OrganizationPolicyModel.organization_id == organization_id,
            OrganizationPolicyModel.name == name,
        )
        if exclude is not None:
            stmt = stmt.where(OrganizationPolicyModel.id != exclude)
        return self._session.execute(stmt).first() is not None

    def create(self, policy: AuthorizationPolicy) -> AuthorizationPolicy:
        stamped = _stamp_new(policy, self._clock)
        if self._find_model(stamped.id) is not None:
            raise DuplicatePolicyIdError(str(stamped.id))
        if self._name_taken(stamped.organization_id, stamped.name):
            raise DuplicatePolicyNameError(stamped.organization_id, stamped.name)

        self._session.add(OrganizationPolicyModel.from_dto(stamped))
        self._session.flush()

        logger.info(
            "policy_created",
            extra={
                "policy_id": str(stamped.id),
                "organization_id": stamped.organization_id,
                "effect": stamped.effect.value,
                "priority": stamped.priority,
                "is_system_policy": stamped.is_system_policy,
            },
        )
        return stamped

    def update(self, policy_id: str | UUID, **changes: Any) -> AuthorizationPolicy:
        model = self._get_model(policy_id)
        updated = _apply_changes(model.to_dto(), changes, self._clock)
        if self._name_taken(updated.organization_id, updated.name, exclude=updated.id):
            raise DuplicatePolicyNameError(updated.organization_id, updated.name)

        model.apply_dto(updated)
        self._session.flush()
        logger.info(
            "policy_updated",
            extra={"policy_id": str(updated.id), "fields": sorted(changes)},
        )
        return updated

    def delete(self, policy_id: str | UUID) -> None:
        model = self._get_model(policy_id)
        if model.is_system_policy:
            raise SystemPolicyProtectionError(str(model.id), "delete")
        self._session.delete(model)
        self._session.flush()
        logger.info("policy_deleted", extra={"policy_id": str(model.id)})

    def set_active(self, policy_id: str | UUID, is_active: bool) -> AuthorizationPolicy:
        model = self._get_model(policy_id)
        model.is_active = is_active
        model.updated_at = self._clock.now()
        self._session.flush()
        logger.info(
            "policy_activation_changed",
            extra={"policy_id": str(model.id), "is_active": is_active},
        )
        return model.to_dto()

    def activate(self, policy_id: str | UUID) -> AuthorizationPolicy:
        return self.set_active(policy_id, True)

    def deactivate(self, policy_id: str | UUID) -> AuthorizationPolicy:
        return self.set_active(policy_id, False)
