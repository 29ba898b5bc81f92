"""
Tests for dry-run policy simulation.
"""

from dataclasses import replace

import pytest

from authz_engines.matchers.resource import journal_entry_resource
from authz_kernel.domain.contexts import ResourceContext
from authz_kernel.domain.evaluation import PolicyDecision
from authz_kernel.exceptions import (
    MembershipInvalidError,
    PolicyPriorityError,
    UnknownResourceTypeError,
)
from authz_services.policy_repository import InMemoryPolicyRepository
from authz_services.policy_simulator import PolicySimulator, simulate
from authz_services.system_policies import seed_system_policies
from tests.conftest import TEST_ORG_ID, make_membership, make_policy


@pytest.fixture
def repository(deterministic_clock):
    repo = InMemoryPolicyRepository(clock=deterministic_clock)
    seed_system_policies(repo, TEST_ORG_ID, clock=deterministic_clock)
    return repo


@pytest.fixture
def simulator(repository):
    return PolicySimulator(repository)


class TestSimulate:
    def test_explains_every_active_policy(self):
        allow = make_policy(name="Accountants", functional_roles=("accountant",))
        other = make_policy(name="Owners", roles=("owner",))
        inactive = make_policy(name="Off", is_active=False)
        simulation = simulate(
            [allow, other, inactive],
            make_membership("member", ["accountant"]),
            "journal_entry:post",
            journal_entry_resource(),
        )
        assert {e.policy.name for e in simulation.explanations} == {"Accountants", "Owners"}
        assert simulation.matched_policy_ids == (str(allow.id),)
        (mismatch,) = [e for e in simulation.explanations if not e.matched]
        assert mismatch.mismatch_reason.startswith("Role 'member'")
        assert simulation.result.is_allowed
        assert simulation.rbac_allowed
        assert not simulation.would_deny

    def test_would_deny(self):
        deny = make_policy(effect="deny", priority=10)
        simulation = simulate(
            [deny, make_policy(priority=800)],
            make_membership("admin"),
            "report:read",
            ResourceContext(type="report"),
        )
        assert simulation.would_deny
        assert simulation.result.decision == PolicyDecision.DENY
        assert len(simulation.matching) == 2

    def test_rbac_reported_separately(self):
        simulation = simulate(
            [], make_membership("viewer"), "account:delete", ResourceContext(type="account")
        )
        assert not simulation.rbac_allowed
        assert simulation.result.default_deny

    def test_inactive_membership(self):
        with pytest.raises(MembershipInvalidError):
            simulate(
                [],
                make_membership(status="suspended"),
                "report:read",
                ResourceContext(type="report"),
            )


class TestPolicySimulator:
    def test_period_protections_need_period_status(self, simulator):
        simulation = simulator.test_policy(
            make_membership("owner"), "journal_entry:post", "journal_entry"
        )
        assert simulation.result.is_allowed

    def test_unknown_resource_type(self, simulator):
        with pytest.raises(UnknownResourceTypeError):
            simulator.test_policy(make_membership(), "report:read", "invoice")

    def test_viewer_matches_read_only_policy(self, simulator):
        simulation = simulator.test_policy(
            make_membership("viewer"), "report:read", "report", resource_id="r-1"
        )
        assert simulation.result.is_allowed
        assert simulation.matching[0].policy.name == "Viewer Read-Only Access"

    def test_candidate_deny_evaluated_with_stored_set(self, simulator):
        candidate = make_policy(
            name="No posting on own entries",
            effect="deny",
            priority=600,
            resource_type="journal_entry",
            actions=("journal_entry:post",),
            is_active=False,
        )
        simulation = simulator.test_candidate(
            candidate,
            make_membership("owner"),
            "journal_entry:post",
            journal_entry_resource(period_status="Open"),
        )
        assert simulation.would_deny
        assert simulation.result.matched_policies[0].id == candidate.id

    def test_candidate_replaces_stored_version(self, repository, simulator):
        stored = repository.create(make_policy(name="Mine", effect="deny", priority=100))
        revised = replace(stored, effect="allow")
        simulation = simulator.test_candidate(
            revised,
            make_membership("member"),
            "report:read",
            ResourceContext(type="report"),
        )
        assert not simulation.would_deny
        assert [m.policy.id for m in simulation.matching].count(stored.id) == 1

    def test_candidate_validated(self, simulator):
        with pytest.raises(PolicyPriorityError):
            simulator.test_candidate(
                make_policy(priority=950),
                make_membership(),
                "report:read",
                ResourceContext(type="report"),
            )

    def test_no_side_effects(self, repository, simulator):
        before = repository.find_by_organization(TEST_ORG_ID)
        candidate = make_policy(effect="deny")
        simulator.test_candidate(
            candidate,
            make_membership(),
            "report:read",
            ResourceContext(type="report"),
        )
        assert repository.find_by_organization(TEST_ORG_ID) == before
        assert repository.find_by_id(candidate.id) is None
