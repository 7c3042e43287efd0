"""
Unit tests for the allow rules and the policy evaluator.
"""

import pytest

from service_authz.app.directory.groups import GroupDirectory
from service_authz.app.domain.models import Principal, Resource
from service_authz.app.rules.engine import PolicyEvaluator
from service_authz.app.rules.models import Rule, TenantContext
from service_authz.app.rules.predicates import (
    ELEVATED_ROLE, GROUP_DELEGATION, OWNERSHIP,
    build_default_rules, elevated_role, group_delegation, ownership
)


GROUPS = {
    "group_ingrid_A": {"tenantId": "tenant_A", "resourceIds": ["ac_101"]},
    "group_ingrid_B": {"tenantId": "tenant_B", "resourceIds": ["ac_200"]},
}


@pytest.fixture
def directory():
    return GroupDirectory.from_mapping(GROUPS)


@pytest.fixture
def evaluator(directory):
    return PolicyEvaluator(directory)


def account(account_id, owner_id, tenant_id):
    return Resource(kind="account", id=account_id, owner_id=owner_id, tenant_id=tenant_id)


class TestPredicates:
    """Each rule in isolation."""

    @pytest.fixture
    def context(self, directory):
        return TenantContext(active_tenant_id="tenant_B", groups=directory.snapshot())

    def test_elevated_role(self, context):
        predicate = elevated_role(["agent"])
        resource = account("ac_200", "user_bob", "tenant_B")

        assert predicate(Principal(id="user_agent", roles={"agent"}), resource, context)
        assert not predicate(Principal(id="user_alice", roles={"user"}), resource, context)

    def test_ownership(self, context):
        resource = account("ac_201", "user_alice", "tenant_B")

        assert ownership(Principal(id="user_alice"), resource, context)
        assert not ownership(Principal(id="user_bob"), resource, context)

    def test_ownership_requires_owner(self, context):
        """A resource with no owner is owned by nobody."""
        resource = Resource(kind="account", id="ac_x", tenant_id="tenant_B")

        assert not ownership(Principal(id=""), resource, context)

    def test_group_delegation(self, context):
        predicate = group_delegation(["introducer"])
        principal = Principal(id="user_ingrid", roles={"introducer"}, group_ref="group_ingrid_B")

        assert predicate(principal, account("ac_200", "user_bob", "tenant_B"), context)
        assert not predicate(principal, account("ac_201", "user_alice", "tenant_B"), context)

    def test_group_delegation_requires_role(self, context):
        predicate = group_delegation(["introducer"])
        principal = Principal(id="user_ingrid", roles={"user"}, group_ref="group_ingrid_B")

        assert not predicate(principal, account("ac_200", "user_bob", "tenant_B"), context)

    def test_group_delegation_requires_group_ref(self, context):
        predicate = group_delegation(["introducer"])
        principal = Principal(id="user_ingrid", roles={"introducer"})

        assert not predicate(principal, account("ac_200", "user_bob", "tenant_B"), context)

    def test_group_delegation_unknown_group(self, context):
        predicate = group_delegation(["introducer"])
        principal = Principal(id="user_ingrid", roles={"introducer"}, group_ref="group_missing")

        assert not predicate(principal, account("ac_200", "user_bob", "tenant_B"), context)

    def test_group_delegation_never_crosses_tenants(self, directory):
        """A group only grants within its own tenant, even for a listed id."""
        predicate = group_delegation(["introducer"])
        principal = Principal(id="user_ingrid", roles={"introducer"}, group_ref="group_ingrid_B")
        context = TenantContext(active_tenant_id="tenant_A", groups=directory.snapshot())

        assert not predicate(principal, account("ac_200", "user_bob", "tenant_A"), context)

    def test_default_rule_order(self):
        rules = build_default_rules()

        assert [rule.name for rule in rules] == [ELEVATED_ROLE, OWNERSHIP, GROUP_DELEGATION]


class TestPolicyEvaluator:
    """Test cases for PolicyEvaluator."""

    def test_owner_allowed(self, evaluator):
        principal = Principal(id="user_alice", roles={"user"}, active_tenant_id="tenant_A")

        result = evaluator.evaluate(principal, account("ac_100", "user_alice", "tenant_A"), "view")

        assert result.allowed is True
        assert result.matched_rule == OWNERSHIP
        assert result.reason == "Rule 'ownership' matched"

    def test_owner_denied_in_other_tenant(self, evaluator):
        """Ownership does not survive a tenant mismatch."""
        principal = Principal(id="user_alice", roles={"user"}, active_tenant_id="tenant_B")

        result = evaluator.evaluate(principal, account("ac_100", "user_alice", "tenant_A"), "view")

        assert result.allowed is False
        assert result.reason == "Tenant mismatch"

    def test_agent_allowed_any_resource_in_tenant(self, evaluator):
        principal = Principal(id="user_agent", roles={"agent"}, active_tenant_id="tenant_B")

        for resource in (account("ac_200", "user_bob", "tenant_B"), account("ac_201", "user_alice", "tenant_B")):
            result = evaluator.evaluate(principal, resource, "view")
            assert result.allowed is True
            assert result.matched_rule == ELEVATED_ROLE

    @pytest.mark.parametrize("roles,principal_id", [
        ({"agent"}, "user_agent"),
        ({"user"}, "user_alice"),
        ({"introducer"}, "user_ingrid"),
    ])
    def test_tenant_gate_dominates_every_rule(self, evaluator, roles, principal_id):
        """Mismatched tenants deny regardless of role, ownership or group."""
        principal = Principal(id=principal_id, roles=roles, active_tenant_id="tenant_A",
                              group_ref="group_ingrid_B")
        resource = account("ac_200", principal_id, "tenant_B")

        assert evaluator.evaluate(principal, resource, "view").allowed is False

    def test_missing_resource_tenant_denies(self, evaluator):
        principal = Principal(id="user_agent", roles={"agent"}, active_tenant_id="tenant_A")
        resource = Resource(kind="account", id="ac_100", owner_id="user_agent")

        result = evaluator.evaluate(principal, resource, "view")

        assert result.allowed is False
        assert result.reason == "Resource tenant missing"

    def test_missing_active_tenant_denies(self, evaluator):
        principal = Principal(id="user_agent", roles={"agent"})

        result = evaluator.evaluate(principal, account("ac_100", "user_agent", "tenant_A"), "view")

        assert result.allowed is False

    def test_unrecognized_action_denies(self, evaluator):
        principal = Principal(id="user_agent", roles={"agent"}, active_tenant_id="tenant_A")

        result = evaluator.evaluate(principal, account("ac_100", "user_alice", "tenant_A"), "delete")

        assert result.allowed is False
        assert result.reason == "Unrecognized action or resource kind"

    def test_unrecognized_kind_denies(self, evaluator):
        principal = Principal(id="user_agent", roles={"agent"}, active_tenant_id="tenant_A")
        resource = Resource(kind="invoice", id="inv_1", tenant_id="tenant_A", owner_id="user_agent")

        assert evaluator.evaluate(principal, resource, "view").allowed is False

    def test_group_delegation_allowed(self, evaluator):
        principal = Principal(id="user_ingrid", roles={"introducer"}, active_tenant_id="tenant_B",
                              group_ref="group_ingrid_B")

        result = evaluator.evaluate(principal, account("ac_200", "user_bob", "tenant_B"), "view")

        assert result.allowed is True
        assert result.matched_rule == GROUP_DELEGATION

    def test_group_delegation_flips_on_resource_membership(self, evaluator):
        principal = Principal(id="user_ingrid", roles={"introducer"}, active_tenant_id="tenant_B",
                              group_ref="group_ingrid_B")

        assert evaluator.evaluate(principal, account("ac_201", "user_alice", "tenant_B"), "view").allowed is False

    def test_group_delegation_flips_on_group_tenant(self, evaluator):
        """Scenario: group tenant_B, active tenant_A, resource in tenant_A."""
        principal = Principal(id="user_ingrid", roles={"introducer"}, active_tenant_id="tenant_A",
                              group_ref="group_ingrid_B")

        result = evaluator.evaluate(principal, account("ac_101", "user_alice", "tenant_A"), "view")

        assert result.allowed is False
        assert result.reason == "No applicable rules matched"

    def test_default_deny(self, evaluator):
        principal = Principal(id="user_bob", roles={"user"}, active_tenant_id="tenant_A")

        result = evaluator.evaluate(principal, account("ac_100", "user_alice", "tenant_A"), "view")

        assert result.allowed is False
        assert result.matched_rule is None

    def test_first_match_wins(self, directory):
        """Rules run in table order."""
        rules = [
            Rule(name="first", predicate=lambda p, r, c: True),
            Rule(name="second", predicate=lambda p, r, c: True),
        ]
        evaluator = PolicyEvaluator(directory, rules=rules)
        principal = Principal(id="user_x", active_tenant_id="tenant_A")

        result = evaluator.evaluate(principal, account("ac_100", "user_alice", "tenant_A"), "view")

        assert result.matched_rule == "first"

    def test_failing_predicate_is_no_match(self, directory):
        """A predicate that raises fails closed and the scan continues."""
        def broken(principal, resource, context):
            raise KeyError("boom")

        rules = [Rule(name="broken", predicate=broken), Rule(name="owner", predicate=ownership)]
        evaluator = PolicyEvaluator(directory, rules=rules)

        denied = evaluator.evaluate(Principal(id="user_bob", active_tenant_id="tenant_A"),
                                    account("ac_100", "user_alice", "tenant_A"), "view")
        allowed = evaluator.evaluate(Principal(id="user_alice", active_tenant_id="tenant_A"),
                                     account("ac_100", "user_alice", "tenant_A"), "view")

        assert denied.allowed is False
        assert allowed.matched_rule == "owner"

    def test_custom_roles_and_permissions(self, directory):
        evaluator = PolicyEvaluator(
            directory,
            rules=build_default_rules(elevated_roles=["support"], delegated_roles=["broker"]),
            permissions={"account": ["view", "export"]}
        )
        principal = Principal(id="user_s", roles={"support"}, active_tenant_id="tenant_A")

        result = evaluator.evaluate(principal, account("ac_100", "user_alice", "tenant_A"), "export")

        assert result.allowed is True
        assert evaluator.evaluate(
            Principal(id="user_a", roles={"agent"}, active_tenant_id="tenant_A"),
            account("ac_100", "user_alice", "tenant_A"), "view"
        ).allowed is False

    def test_reads_current_directory_snapshot(self, evaluator, directory):
        """Group changes published by a swap take effect on the next evaluation."""
        principal = Principal(id="user_ingrid", roles={"introducer"}, active_tenant_id="tenant_B",
                              group_ref="group_ingrid_B")
        resource = account("ac_201", "user_alice", "tenant_B")
        assert evaluator.evaluate(principal, resource, "view").allowed is False

        directory.replace(GroupDirectory.from_mapping({
            "group_ingrid_B": {"tenantId": "tenant_B", "resourceIds": ["ac_200", "ac_201"]}
        }).snapshot())

        assert evaluator.evaluate(principal, resource, "view").allowed is True

    def test_get_engine_stats(self, evaluator):
        stats = evaluator.get_engine_stats()

        assert stats["rules"] == [ELEVATED_ROLE, OWNERSHIP, GROUP_DELEGATION]
        assert stats["permissions"] == {"account": ["view"]}
        assert stats["groups"] == 2
