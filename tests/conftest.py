"""
Pytest fixtures for the authorization test suite.

Provides:
- Structured logging configured for the whole run
- Deterministic clock
- SQLite engines and sessions for the SQL adapters
- Policy and membership builders
"""

import json
import logging
from io import StringIO
from uuid import uuid4

import pytest
from sqlalchemy.orm import sessionmaker

from authz_kernel.db.engine import build_engine, create_tables, drop_tables
from authz_kernel.domain.clock import DeterministicClock
from authz_kernel.domain.conditions import (
    ActionCondition,
    EnvironmentCondition,
    ResourceAttributes,
    ResourceCondition,
    SubjectCondition,
)
from authz_kernel.domain.policy import AuthorizationPolicy, PolicyEffect
from authz_kernel.domain.roles import BaseRole, OrganizationMembership
from authz_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_ORG_ID = "org-test"
TEST_USER_ID = "user-test"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture authz logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.check_permission(...)
            logs = captured_logs()
            assert any(r["message"] == "authorization_denied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("authz")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Fixed at 2024-01-01 12:00 UTC (a Monday)."""
    return DeterministicClock()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """In-memory SQLite engine with both tables created."""
    eng = build_engine("sqlite:///:memory:")
    create_tables(eng)
    yield eng
    drop_tables(eng)
    eng.dispose()


@pytest.fixture
def session(engine):
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    sess = factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite engine: separate sessions get separate connections."""
    eng = build_engine(f"sqlite:///{tmp_path / 'authz.db'}")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def file_session_factory(file_engine):
    return sessionmaker(bind=file_engine, expire_on_commit=False)


# =============================================================================
# Builders
# =============================================================================


def make_policy(
    *,
    name: str | None = None,
    effect: PolicyEffect | str = PolicyEffect.ALLOW,
    priority: int = 500,
    roles=None,
    functional_roles=None,
    user_ids=None,
    is_platform_admin=None,
    resource_type: str = "*",
    attributes: ResourceAttributes | None = None,
    actions=("*",),
    environment: EnvironmentCondition | None = None,
    organization_id: str = TEST_ORG_ID,
    is_system_policy: bool = False,
    is_active: bool = True,
) -> AuthorizationPolicy:
    policy_id = uuid4()
    return AuthorizationPolicy(
        id=policy_id,
        organization_id=organization_id,
        name=name or f"policy-{policy_id.hex[:8]}",
        subject=SubjectCondition(
            roles=roles,
            functional_roles=functional_roles,
            user_ids=user_ids,
            is_platform_admin=is_platform_admin,
        ),
        resource=ResourceCondition(type=resource_type, attributes=attributes),
        action=ActionCondition(actions=tuple(actions)),
        environment=environment,
        effect=effect,
        priority=priority,
        is_system_policy=is_system_policy,
        is_active=is_active,
    )


def make_membership(
    role: BaseRole | str = BaseRole.MEMBER,
    functional_roles=(),
    *,
    user_id: str = TEST_USER_ID,
    organization_id: str = TEST_ORG_ID,
    status: str = "active",
    is_platform_admin: bool = False,
) -> OrganizationMembership:
    return OrganizationMembership(
        user_id=user_id,
        organization_id=organization_id,
        role=role,
        functional_roles=frozenset(functional_roles),
        status=status,
        is_platform_admin=is_platform_admin,
    )


@pytest.fixture
def policy_factory():
    return make_policy


@pytest.fixture
def membership_factory():
    return make_membership
