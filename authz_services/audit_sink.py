"""
authz_services.audit_sink -- Denial audit log adapters.

Responsibility:
    Implementations of the ``AuditSink`` port and the read side of the
    authorization audit log (query by organization or user, count).

Architecture position:
    Services -- stateful adapters over ``AuthorizationAuditLogModel``.

Invariants enforced:
    - ``SqlAuditSink.record_denial`` writes in its own session and commits
      it, so the entry survives a rollback of the business transaction
      that was refused.
    - The log is append-only: no update or delete operations exist.
    - Query results are newest first.

Failure modes:
    - AuditWriteError when the denial cannot be written.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from authz_kernel.db.engine import session_scope
from authz_kernel.domain.evaluation import AuthorizationDenial
from authz_kernel.exceptions import AuditWriteError
from authz_kernel.models.authorization_audit import AuthorizationAuditLogModel

logger = logging.getLogger("authz.services.audit_sink")

DEFAULT_PAGE_SIZE = 50


class InMemoryAuditSink:
    """List-backed sink for tests and embedded use."""

    def __init__(self) -> None:
        self.denials: list[AuthorizationDenial] = []

    def record_denial(self, denial: AuthorizationDenial) -> None:
        self.denials.append(denial)

    def find_by_organization(self, organization_id: str) -> list[AuthorizationDenial]:
        return [d for d in reversed(self.denials) if d.organization_id == organization_id]

    def find_by_user(self, user_id: str) -> list[AuthorizationDenial]:
        return [d for d in reversed(self.denials) if d.user_id == user_id]

    def count_by_organization(self, organization_id: str) -> int:
        return len(self.find_by_organization(organization_id))


class SqlAuditSink:
    """SQLAlchemy sink over ``authorization_audit_log``.

    Takes a session factory rather than a session: every denial is
    committed in a session of its own.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def record_denial(self, denial: AuthorizationDenial) -> None:
        """
        Raises:
            AuditWriteError: if the entry cannot be committed.
        """
        try:
            with session_scope(self._session_factory) as session:
                session.add(AuthorizationAuditLogModel.from_dto(denial))
        except SQLAlchemyError as exc:
            raise AuditWriteError(denial.action, denial.organization_id, str(exc)) from exc

        logger.info(
            "authorization_denial_recorded",
            extra={
                "organization_id": denial.organization_id,
                "user_id": denial.user_id,
                "action": denial.action,
                "resource_type": denial.resource_type,
            },
        )

    def find_by_organization(
        self,
        organization_id: str,
        *,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        action: str | None = None,
        resource_type: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[AuthorizationDenial]:
        """Denials for an organization, newest first.

        ``start`` and ``end`` bound ``occurred_at`` inclusively.
        """
        stmt = select(AuthorizationAuditLogModel).where(
            AuthorizationAuditLogModel.organization_id == organization_id
        )
        if action is not None:
            stmt = stmt.where(AuthorizationAuditLogModel.action == action)
        if resource_type is not None:
            stmt = stmt.where(AuthorizationAuditLogModel.resource_type == resource_type)
        if start is not None:
            stmt = stmt.where(AuthorizationAuditLogModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(AuthorizationAuditLogModel.created_at <= end)
        stmt = (
            stmt.order_by(AuthorizationAuditLogModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        with self._session_factory() as session:
            return [row.to_dto() for row in session.execute(stmt).scalars()]

    def find_by_user(
        self,
        user_id: str,
        *,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[AuthorizationDenial]:
        stmt = (
            select(AuthorizationAuditLogModel)
            .where(AuthorizationAuditLogModel.user_id == user_id)
            .order_by(AuthorizationAuditLogModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        with self._session_factory() as session:
            return [row.to_dto() for row in session.execute(stmt).scalars()]

    def count_by_organization(self, organization_id: str) -> int:
        stmt = select(func.count()).select_from(AuthorizationAuditLogModel).where(
            AuthorizationAuditLogModel.organization_id == organization_id
        )
        with self._session_factory() as session:
            return session.execute(stmt).scalar_one()
