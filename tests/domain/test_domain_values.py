"""Tests for the immutable domain value objects."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from authz_kernel.domain.clock import DeterministicClock
from authz_kernel.domain.conditions import EnvironmentCondition, SubjectCondition, time_to_minutes
from authz_kernel.domain.contexts import PeriodStatus, ResourceContext, SubjectContext
from authz_kernel.domain.evaluation import PolicyDecision, PolicyEvaluationResult
from authz_kernel.domain.policy import PolicyEffect
from authz_kernel.domain.roles import BaseRole, FunctionalRole, MembershipStatus
from tests.conftest import make_membership, make_policy


class TestMembership:
    def test_strings_normalized_to_enums(self):
        membership = make_membership("admin", ["controller"], status="suspended")
        assert membership.role is BaseRole.ADMIN
        assert membership.functional_roles == frozenset({FunctionalRole.CONTROLLER})
        assert membership.status is MembershipStatus.SUSPENDED
        assert not membership.is_active

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            make_membership("superuser")

    def test_frozen(self):
        membership = make_membership()
        with pytest.raises(FrozenInstanceError):
            membership.role = BaseRole.OWNER


class TestContexts:
    def test_subject_normalizes_roles(self):
        subject = SubjectContext(user_id="u", role="viewer", functional_roles=["accountant"])
        assert subject.role is BaseRole.VIEWER
        assert FunctionalRole.ACCOUNTANT in subject.functional_roles

    def test_resource_normalizes_period_status(self):
        resource = ResourceContext(type="fiscal_period", period_status="SoftClose")
        assert resource.period_status is PeriodStatus.SOFT_CLOSE

    def test_resource_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            ResourceContext(type="fiscal_period", period_status="Frozen")


class TestConditions:
    def test_subject_condition_normalizes(self):
        condition = SubjectCondition(roles=["owner"])
        assert condition.roles == (BaseRole.OWNER,)

    def test_empty_environment(self):
        assert EnvironmentCondition().is_empty()
        assert EnvironmentCondition(days_of_week=()).is_empty()
        assert not EnvironmentCondition(ip_deny_list=("10.0.0.1",)).is_empty()

    @pytest.mark.parametrize(
        "value,minutes",
        [("00:00", 0), ("9:30", 570), ("23:59", 1439), ("24:00", None), ("ab:cd", None)],
    )
    def test_time_to_minutes(self, value, minutes):
        assert time_to_minutes(value) == minutes


class TestPolicy:
    def test_system_policy_protection(self):
        assert not make_policy(is_system_policy=True).can_modify()
        assert not make_policy(is_system_policy=True).can_delete()
        assert make_policy().can_modify()

    def test_effect_normalized(self):
        policy = make_policy(effect="deny")
        assert policy.effect is PolicyEffect.DENY
        assert policy.is_deny() and not policy.is_allow()

    def test_empty_environment_is_no_condition(self):
        assert not make_policy(environment=EnvironmentCondition()).has_environment_condition
        assert make_policy(
            environment=EnvironmentCondition(days_of_week=(1,))
        ).has_environment_condition


class TestEvaluationResult:
    def test_flags_mutually_exclusive(self):
        with pytest.raises(ValueError):
            PolicyEvaluationResult(
                decision=PolicyDecision.DENY,
                reason="x",
                denied_by_policy=True,
                default_deny=True,
            )

    def test_flags_require_deny(self):
        with pytest.raises(ValueError):
            PolicyEvaluationResult(
                decision=PolicyDecision.ALLOW, reason="x", default_deny=True
            )

    def test_matched_policy_ids(self):
        policy = make_policy()
        result = PolicyEvaluationResult(
            decision=PolicyDecision.ALLOW, reason="ok", matched_policies=(policy,)
        )
        assert result.is_allowed
        assert result.matched_policy_ids == (str(policy.id),)


class TestDeterministicClock:
    def test_default_is_monday_noon_utc(self):
        now = DeterministicClock().now()
        assert now == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert now.weekday() == 0

    def test_advance_and_set(self):
        clock = DeterministicClock()
        start = clock.now()
        clock.advance(90)
        assert clock.now() - start == timedelta(seconds=90)
        clock.set_time(start)
        assert clock.now() == start
