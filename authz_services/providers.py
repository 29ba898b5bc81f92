"""Simple membership and environment providers."""

from __future__ import annotations

from authz_engines.matchers.environment import create_environment_context
from authz_kernel.domain.clock import Clock, SystemClock
from authz_kernel.domain.contexts import EnvironmentContext
from authz_kernel.domain.roles import OrganizationMembership
from authz_kernel.exceptions import MembershipInvalidError


class StaticMembershipProvider:
    """Returns a membership resolved up front by the host application.

    ``None`` means the user has no membership in the organization.
    """

    def __init__(
        self,
        membership: OrganizationMembership | None,
        user_id: str = "",
        organization_id: str = "",
    ):
        self._membership = membership
        self._user_id = user_id
        self._organization_id = organization_id

    def current_membership(self) -> OrganizationMembership:
        if self._membership is None:
            raise MembershipInvalidError(self._user_id, self._organization_id)
        return self._membership


class ClockEnvironmentProvider:
    """Builds the request environment from a clock and request metadata.

    Time of day and day of week are taken in the clock's timezone (UTC for
    ``SystemClock``).
    """

    def __init__(
        self,
        clock: Clock | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ):
        self._clock = clock or SystemClock()
        self._ip_address = ip_address
        self._user_agent = user_agent

    def current_environment(self) -> EnvironmentContext:
        return create_environment_context(
            self._clock.now(),
            ip_address=self._ip_address,
            user_agent=self._user_agent,
        )
