"""
End-to-end: locked fiscal periods against a SQL-backed policy store.

An organization is seeded with the system policies plus:
- a system deny (999) on every fiscal_period action for Locked/Closed periods
- a custom allow (500) of fiscal_period:manage for the period_admin role

A member holding period_admin is refused on a Locked period (and the refusal
is committed to the audit log) but allowed on an Open one.
"""

import pytest

from authz_engines.matchers.resource import fiscal_period_resource, journal_entry_resource
from authz_kernel.domain.conditions import ResourceAttributes
from authz_kernel.exceptions import PermissionDeniedError
from authz_services.audit_sink import SqlAuditSink
from authz_services.authorization_service import AuthorizationService
from authz_services.policy_repository import SqlPolicyRepository
from authz_services.providers import ClockEnvironmentProvider, StaticMembershipProvider
from authz_services.system_policies import seed_system_policies
from tests.conftest import TEST_ORG_ID, make_membership, make_policy


@pytest.fixture
def policy_session(file_session_factory, deterministic_clock):
    session = file_session_factory()
    repository = SqlPolicyRepository(session, clock=deterministic_clock)
    seed_system_policies(repository, TEST_ORG_ID, clock=deterministic_clock)
    repository.create(
        make_policy(
            name="Lock fiscal periods",
            effect="deny",
            priority=999,
            is_system_policy=True,
            roles=("owner", "admin", "member", "viewer"),
            resource_type="fiscal_period",
            attributes=ResourceAttributes(period_status=("Locked", "Closed")),
            actions=("fiscal_period:*",),
        )
    )
    repository.create(
        make_policy(
            name="Period admins manage periods",
            functional_roles=("period_admin",),
            resource_type="fiscal_period",
            actions=("fiscal_period:manage",),
        )
    )
    session.commit()
    yield session
    session.close()


@pytest.fixture
def audit_sink(file_session_factory):
    return SqlAuditSink(file_session_factory)


def _service(session, sink, clock, membership):
    return AuthorizationService(
        membership_provider=StaticMembershipProvider(membership),
        policy_repository=SqlPolicyRepository(session, clock=clock),
        audit_sink=sink,
        environment_provider=ClockEnvironmentProvider(clock, ip_address="192.0.2.10"),
        clock=clock,
    )


class TestLockedPeriodScenario:
    def test_period_admin_denied_on_locked_period(
        self, policy_session, audit_sink, deterministic_clock
    ):
        service = _service(
            policy_session,
            audit_sink,
            deterministic_clock,
            make_membership("member", ["period_admin"]),
        )

        with pytest.raises(PermissionDeniedError) as exc_info:
            service.check_permission(
                "fiscal_period:manage",
                fiscal_period_resource(id="fp-2023-12", period_status="Locked"),
            )

        error = exc_info.value
        assert error.denied_by_policy
        assert error.reason == "Denied by policy: Lock fiscal periods"
        assert error.resource_id == "fp-2023-12"

        (entry,) = audit_sink.find_by_organization(TEST_ORG_ID)
        assert entry.action == "fiscal_period:manage"
        assert entry.resource_type == "fiscal_period"
        assert entry.resource_id == "fp-2023-12"
        assert entry.ip_address == "192.0.2.10"
        assert entry.matched_policy_ids == error.policy_ids
        assert entry.occurred_at == deterministic_clock.now()

    def test_period_admin_allowed_on_open_period(
        self, policy_session, audit_sink, deterministic_clock
    ):
        service = _service(
            policy_session,
            audit_sink,
            deterministic_clock,
            make_membership("member", ["period_admin"]),
        )

        service.check_permission(
            "fiscal_period:manage", fiscal_period_resource(period_status="Open")
        )

        assert audit_sink.count_by_organization(TEST_ORG_ID) == 0

    def test_member_without_functional_role_denied_by_rbac(
        self, policy_session, audit_sink, deterministic_clock
    ):
        service = _service(
            policy_session, audit_sink, deterministic_clock, make_membership("member")
        )

        with pytest.raises(PermissionDeniedError) as exc_info:
            service.check_permission(
                "fiscal_period:manage", fiscal_period_resource(period_status="Open")
            )

        assert not exc_info.value.denied_by_policy
        assert exc_info.value.reason == "Role 'member' does not grant fiscal_period:manage"
        assert audit_sink.count_by_organization(TEST_ORG_ID) == 1

    def test_owner_cannot_post_into_locked_period(
        self, policy_session, audit_sink, deterministic_clock
    ):
        service = _service(
            policy_session, audit_sink, deterministic_clock, make_membership("owner")
        )

        with pytest.raises(PermissionDeniedError):
            service.check_permission(
                "journal_entry:post", journal_entry_resource(period_status="Locked")
            )
        service.check_permission(
            "journal_entry:post", journal_entry_resource(period_status="Open")
        )

        (entry,) = audit_sink.find_by_user(make_membership("owner").user_id)
        assert entry.reason == "Denied by policy: Prevent Modifications to Locked Periods"

    def test_denials_survive_caller_rollback(
        self, policy_session, audit_sink, deterministic_clock
    ):
        service = _service(
            policy_session, audit_sink, deterministic_clock, make_membership("viewer")
        )

        with pytest.raises(PermissionDeniedError):
            service.check_permission(
                "fiscal_period:manage", fiscal_period_resource(period_status="Closed")
            )
        policy_session.rollback()

        assert audit_sink.count_by_organization(TEST_ORG_ID) == 1
