"""
Rule data models for the policy evaluator.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from ..directory.groups import GroupSnapshot
from ..domain.models import Principal, Resource


@dataclass(frozen=True)
class TenantContext:
    """Per-evaluation view: the active tenant and one directory snapshot."""
    active_tenant_id: str
    groups: GroupSnapshot


RulePredicate = Callable[[Principal, Resource, TenantContext], bool]


@dataclass(frozen=True)
class Rule:
    """Named allow predicate."""
    name: str
    predicate: RulePredicate
    description: Optional[str] = None

    def matches(self, principal: Principal, resource: Resource, context: TenantContext) -> bool:
        return bool(self.predicate(principal, resource, context))


@dataclass(frozen=True)
class EvaluationResult:
    """Result of policy evaluation."""
    allowed: bool
    reason: str
    matched_rule: Optional[str] = None
