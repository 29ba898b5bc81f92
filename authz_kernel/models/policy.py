"""
Module: authz_kernel.models.policy
Responsibility: ORM persistence for organization authorization policies.

Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain layer (for DTO conversion).

Invariants enforced:
    - Policy names are unique per organization (UNIQUE(organization_id, name)).
    - Effect is constrained to 'allow' / 'deny'; priority to [0, 1000].
    - Conditions are stored in their camelCase JSON wire shape.

Failure modes:
    - IntegrityError on a duplicate name within an organization.
    - InvalidPolicyConditionError from ``to_dto`` when a stored condition
      payload cannot be decoded.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from authz_kernel.db.base import AwareDateTime, Base
from authz_kernel.domain.condition_codec import (
    decode_action_condition,
    decode_environment_condition,
    decode_resource_condition,
    decode_subject_condition,
    encode_action_condition,
    encode_environment_condition,
    encode_resource_condition,
    encode_subject_condition,
)

if TYPE_CHECKING:
    from authz_kernel.domain.policy import AuthorizationPolicy


class OrganizationPolicyModel(Base):
    """Persistent ABAC policy owned by one organization."""

    __tablename__ = "organization_policies"

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "name",
            name="uq_organization_policies_name",
        ),
        CheckConstraint(
            "effect IN ('allow', 'deny')",
            name="ck_organization_policies_effect",
        ),
        CheckConstraint(
            "priority >= 0 AND priority <= 1000",
            name="ck_organization_policies_priority",
        ),
        Index(
            "ix_organization_policies_active",
            "organization_id", "is_active",
        ),
    )

    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject_condition: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    resource_condition: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    action_condition: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    environment_condition: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True,
    )
    effect: Mapped[str] = mapped_column(String(10), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=500)
    is_system_policy: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(AwareDateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(AwareDateTime(), nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<OrganizationPolicy {self.id} {self.name!r} "
            f"{self.effect}@{self.priority} active={self.is_active}>"
        )

    def to_dto(self) -> AuthorizationPolicy:
        """Convert ORM model to frozen domain policy."""
        from authz_kernel.domain.policy import AuthorizationPolicy, PolicyEffect

        return AuthorizationPolicy(
            id=self.id,
            organization_id=self.organization_id,
            name=self.name,
            description=self.description,
            subject=decode_subject_condition(self.subject_condition),
            resource=decode_resource_condition(self.resource_condition),
            action=decode_action_condition(self.action_condition),
            environment=decode_environment_condition(self.environment_condition),
            effect=PolicyEffect(self.effect),
            priority=self.priority,
            is_system_policy=self.is_system_policy,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
            created_by=self.created_by,
        )

    @classmethod
    def from_dto(cls, dto: AuthorizationPolicy) -> OrganizationPolicyModel:
        """Create ORM model from domain policy."""
        model = cls(id=dto.id, organization_id=dto.organization_id)
        model.apply_dto(dto)
        model.created_at = dto.created_at
        model.created_by = dto.created_by
        return model

    def apply_dto(self, dto: AuthorizationPolicy) -> None:
        """Copy mutable fields from ``dto`` onto this row."""
        self.name = dto.name
        self.description = dto.description
        self.subject_condition = encode_subject_condition(dto.subject)
        self.resource_condition = encode_resource_condition(dto.resource)
        self.action_condition = encode_action_condition(dto.action)
        self.environment_condition = encode_environment_condition(dto.environment)
        self.effect = dto.effect.value
        self.priority = dto.priority
        self.is_system_policy = dto.is_system_policy
        self.is_active = dto.is_active
        self.updated_at = dto.updated_at
