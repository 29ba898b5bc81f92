"""
Module: authz_kernel.models.authorization_audit
Responsibility: ORM persistence for denied authorization attempts.

Architecture position: Kernel > Models.  May import from db/base.py only
    (plus the domain DTO for conversion).

Invariants enforced:
    - Append-only: rows are inserted by the SQL audit sink and never updated.
    - ``matched_policy_ids`` is stored as a JSON list of UUID strings.

Audit relevance:
    This table is the compliance record of every refused request.  Indexes
    support the per-organization, per-user and time-ordered queries used by
    administrators.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from authz_kernel.db.base import AwareDateTime, Base

if TYPE_CHECKING:
    from authz_kernel.domain.evaluation import AuthorizationDenial


class AuthorizationAuditLogModel(Base):
    """One denied authorization attempt. Append-only."""

    __tablename__ = "authorization_audit_log"

    __table_args__ = (
        Index("ix_authorization_audit_user", "user_id"),
        Index("ix_authorization_audit_action", "action"),
        Index("ix_authorization_audit_org_time", "organization_id", "created_at"),
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    denial_reason: Mapped[str] = mapped_column(Text, nullable=False)
    matched_policy_ids: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(AwareDateTime(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<AuthorizationAuditLog {self.id} user={self.user_id} "
            f"action={self.action} resource={self.resource_type}>"
        )

    def to_dto(self) -> AuthorizationDenial:
        from authz_kernel.domain.evaluation import AuthorizationDenial

        return AuthorizationDenial(
            user_id=self.user_id,
            organization_id=self.organization_id,
            action=self.action,
            resource_type=self.resource_type,
            resource_id=self.resource_id,
            reason=self.denial_reason,
            matched_policy_ids=tuple(self.matched_policy_ids or ()),
            ip_address=self.ip_address,
            user_agent=self.user_agent,
            occurred_at=self.created_at,
        )

    @classmethod
    def from_dto(cls, dto: AuthorizationDenial) -> AuthorizationAuditLogModel:
        return cls(
            user_id=dto.user_id,
            organization_id=dto.organization_id,
            action=dto.action,
            resource_type=dto.resource_type,
            resource_id=dto.resource_id,
            denial_reason=dto.reason,
            matched_policy_ids=list(dto.matched_policy_ids),
            ip_address=dto.ip_address,
            user_agent=dto.user_agent,
            created_at=dto.occurred_at,
        )
