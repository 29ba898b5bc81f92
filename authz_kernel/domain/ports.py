"""
Collaborator ports (``authz_kernel.domain.ports``).

Responsibility:
    Protocols for everything the authorization service needs from the
    outside world: the caller's membership, the organization's active
    policies, a place to record denials, and the request environment.

Architecture position:
    Kernel > Domain -- protocol definitions only.  Implementations live in
    ``authz_services`` (in-memory, SQLAlchemy, static) or in the host
    application.

Failure modes:
    - ``MembershipProvider.current_membership`` raises
      ``MembershipInvalidError`` when no membership can be resolved.
    - ``PolicyRepository.load_active_policies`` raises ``PolicyLoadError``;
      it never returns an empty list to signal failure.
    - ``AuditSink.record_denial`` raises on failure; the service converts
      anything other than ``AuditWriteError`` into one.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from authz_kernel.domain.contexts import EnvironmentContext
from authz_kernel.domain.evaluation import AuthorizationDenial
from authz_kernel.domain.policy import AuthorizationPolicy
from authz_kernel.domain.roles import OrganizationMembership


@runtime_checkable
class MembershipProvider(Protocol):
    """Resolves the acting user's membership for the current request."""

    def current_membership(self) -> OrganizationMembership:
        ...


@runtime_checkable
class PolicyRepository(Protocol):
    """Read port for an organization's active policy set."""

    def load_active_policies(self, organization_id: str) -> Sequence[AuthorizationPolicy]:
        ...


@runtime_checkable
class AuditSink(Protocol):
    """Write port for authorization denials."""

    def record_denial(self, denial: AuthorizationDenial) -> None:
        ...


@runtime_checkable
class EnvironmentProvider(Protocol):
    """Supplies request-time environment attributes, when available."""

    def current_environment(self) -> EnvironmentContext | None:
        ...
