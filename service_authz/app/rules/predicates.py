"""
Built-in allow rules.

Each predicate is pure and assumes the tenant match gate has already
passed; the evaluator enforces that before any rule runs.
"""

from typing import Iterable, List

from ..domain.models import Principal, Resource
from .models import Rule, RulePredicate, TenantContext


ELEVATED_ROLE = "elevated_role"
OWNERSHIP = "ownership"
GROUP_DELEGATION = "group_delegation"


def elevated_role(roles: Iterable[str]) -> RulePredicate:
    """Holders of any of ``roles`` may access every resource in the tenant."""
    roles = frozenset(roles)

    def predicate(principal: Principal, resource: Resource, context: TenantContext) -> bool:
        return principal.has_any_role(roles)

    return predicate


def ownership(principal: Principal, resource: Resource, context: TenantContext) -> bool:
    """The resource owner may access it."""
    return resource.owner_id is not None and resource.owner_id == principal.id


def group_delegation(roles: Iterable[str]) -> RulePredicate:
    """Delegated-role holders may access resources their group lists.

    The group must belong to the active tenant; membership never crosses
    tenants.
    """
    roles = frozenset(roles)

    def predicate(principal: Principal, resource: Resource, context: TenantContext) -> bool:
        if not principal.has_any_role(roles) or not principal.group_ref:
            return False

        group = context.groups.get(principal.group_ref)
        if group is None:
            return False

        return group.grants(context.active_tenant_id, resource.id)

    return predicate


def build_default_rules(elevated_roles: Iterable[str] = ("agent",),
                        delegated_roles: Iterable[str] = ("introducer",)) -> List[Rule]:
    """Ordered rule table; the first match wins."""
    return [
        Rule(
            name=ELEVATED_ROLE,
            predicate=elevated_role(elevated_roles),
            description="Elevated roles see every resource in the active tenant"
        ),
        Rule(
            name=OWNERSHIP,
            predicate=ownership,
            description="Owners see their own resources"
        ),
        Rule(
            name=GROUP_DELEGATION,
            predicate=group_delegation(delegated_roles),
            description="Introducers see resources listed by their tenant's group"
        ),
    ]
