"""
Property-based tests for the authorization engines.

Properties checked:
- RBAC: adding functional roles never removes a permission
- RBAC: owner and admin differ by exactly the owner-only actions
- ABAC: a matching deny wins whatever the allow priorities
- ABAC: no matching allow means default deny
- ABAC: the reported allow is the highest-priority matching one
- ABAC: evaluation is independent of input order
- Matchers are total: arbitrary action strings never raise
"""

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from authz_engines.matchers.action import matches_action_pattern
from authz_engines.permission_matrix import compute_effective_permissions, has_permission
from authz_engines.policy_engine import evaluate_policies
from authz_kernel.domain.actions import ALL_ACTIONS, get_resource_type
from authz_kernel.domain.contexts import PolicyEvaluationContext, ResourceContext, SubjectContext
from authz_kernel.domain.evaluation import PolicyDecision
from authz_kernel.domain.roles import BaseRole, FunctionalRole
from tests.conftest import make_policy

base_roles = st.sampled_from(list(BaseRole))
functional_role_sets = st.frozensets(st.sampled_from(list(FunctionalRole)))
actions = st.sampled_from(ALL_ACTIONS)
custom_priorities = st.integers(min_value=0, max_value=899)


def _context(action: str, role: BaseRole = BaseRole.MEMBER) -> PolicyEvaluationContext:
    return PolicyEvaluationContext(
        subject=SubjectContext(user_id="u-fuzz", role=role),
        resource=ResourceContext(type=get_resource_type(action)),
        action=action,
    )


class TestPermissionMatrixProperties:
    @given(role=base_roles, smaller=functional_role_sets, extra=functional_role_sets)
    @settings(max_examples=200)
    def test_monotonic_in_functional_roles(self, role, smaller, extra):
        assert compute_effective_permissions(role, smaller) <= compute_effective_permissions(
            role, smaller | extra
        )

    @given(functional=functional_role_sets)
    @settings(max_examples=50)
    def test_owner_exceeds_admin_by_owner_only_actions(self, functional):
        owner = compute_effective_permissions(BaseRole.OWNER, functional)
        admin = compute_effective_permissions(BaseRole.ADMIN, functional)
        assert owner - admin == {"organization:delete", "organization:transfer_ownership"}

    @given(role=base_roles, functional=functional_role_sets, action=actions)
    @settings(max_examples=200)
    def test_granted_actions_are_known(self, role, functional, action):
        permissions = compute_effective_permissions(role, functional)
        assert permissions <= set(ALL_ACTIONS)
        assert has_permission(permissions, action) == (action in permissions)


class TestPolicyEngineProperties:
    @given(
        action=actions,
        allow_priorities=st.lists(custom_priorities, max_size=5),
        deny_priority=custom_priorities,
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_matching_deny_always_wins(self, action, allow_priorities, deny_priority):
        allows = [make_policy(priority=p) for p in allow_priorities]
        deny = make_policy(effect="deny", priority=deny_priority)
        result = evaluate_policies(policies=allows + [deny], context=_context(action))
        assert result.decision == PolicyDecision.DENY
        assert result.denied_by_policy
        assert result.matched_policies[0].is_deny()

    @given(action=actions, priorities=st.lists(custom_priorities, max_size=5))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_no_matching_allow_is_default_deny(self, action, priorities):
        policies = [make_policy(roles=("owner",), priority=p) for p in priorities]
        result = evaluate_policies(policies=policies, context=_context(action))
        assert result.decision == PolicyDecision.DENY
        assert result.default_deny
        assert not result.denied_by_policy

    @given(action=actions, priorities=st.lists(custom_priorities, min_size=1, max_size=6))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_highest_priority_allow_reported(self, action, priorities):
        policies = [make_policy(priority=p) for p in priorities]
        result = evaluate_policies(policies=policies, context=_context(action))
        assert result.is_allowed
        assert result.matched_policies[0].priority == max(priorities)

    @given(
        action=actions,
        specs=st.lists(
            st.tuples(st.sampled_from(["allow", "deny"]), custom_priorities, st.booleans()),
            max_size=6,
        ),
        data=st.data(),
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_order_independent(self, action, specs, data):
        policies = [
            make_policy(effect=effect, priority=priority, is_active=active)
            for effect, priority, active in specs
        ]
        shuffled = data.draw(st.permutations(policies))
        context = _context(action)
        assert evaluate_policies(policies=policies, context=context) == evaluate_policies(
            policies=shuffled, context=context
        )


class TestMatcherTotality:
    @given(pattern=st.text(max_size=30), action=st.text(max_size=30))
    @settings(max_examples=300)
    def test_action_pattern_never_raises(self, pattern, action):
        assert matches_action_pattern(pattern, action) in (True, False)

    @given(action=st.text(max_size=30))
    @settings(max_examples=200)
    def test_unknown_actions_never_granted_without_wildcard(self, action):
        permissions = compute_effective_permissions(BaseRole.ADMIN)
        if action not in ALL_ACTIONS:
            assert not has_permission(permissions, action)
