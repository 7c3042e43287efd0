"""
Policy evaluation engine for the authorization service.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from shared.logging import get_logger
from ..directory.groups import GroupDirectory
from ..domain.models import Principal, Resource
from .models import Rule, TenantContext, EvaluationResult
from .predicates import build_default_rules


DEFAULT_PERMISSIONS: Mapping[str, Sequence[str]] = {"account": ("view",)}


class PolicyEvaluator:
    """Tenant-gated, first-match rule evaluator.

    Evaluation never raises: missing attributes and unknown kinds or
    actions deny.
    """

    def __init__(self, directory: GroupDirectory,
                 rules: Optional[Iterable[Rule]] = None,
                 permissions: Optional[Mapping[str, Iterable[str]]] = None):
        self.logger = get_logger("authz.policy_evaluator")
        self.directory = directory
        self.rules = tuple(rules if rules is not None else build_default_rules())
        self.permissions: Dict[str, frozenset] = {
            kind: frozenset(actions)
            for kind, actions in (permissions if permissions is not None else DEFAULT_PERMISSIONS).items()
        }

    def is_recognized(self, kind: str, action: str) -> bool:
        """Whether ``action`` on ``kind`` is something this evaluator rules on."""
        return action in self.permissions.get(kind, frozenset())

    def evaluate(self, principal: Principal, resource: Resource, action: str) -> EvaluationResult:
        """Evaluate rules for one principal/resource/action."""
        active_tenant_id = principal.active_tenant_id
        resource_tenant_id = resource.tenant_id

        if not resource_tenant_id:
            self.logger.warning(
                "Resource has no tenant id",
                resource_kind=resource.kind,
                resource_id=resource.id
            )
            return EvaluationResult(allowed=False, reason="Resource tenant missing")

        if not active_tenant_id or active_tenant_id != resource_tenant_id:
            return EvaluationResult(allowed=False, reason="Tenant mismatch")

        if not self.is_recognized(resource.kind, action):
            return EvaluationResult(allowed=False, reason="Unrecognized action or resource kind")

        # One snapshot per evaluation
        context = TenantContext(active_tenant_id=active_tenant_id, groups=self.directory.snapshot())

        for rule in self.rules:
            try:
                matched = rule.matches(principal, resource, context)
            except Exception as e:
                self.logger.error("Rule predicate failed", rule=rule.name, error=str(e))
                matched = False

            if matched:
                self.logger.debug(
                    "Rule matched",
                    rule=rule.name,
                    principal_id=principal.id,
                    resource_id=resource.id
                )
                return EvaluationResult(
                    allowed=True,
                    reason=f"Rule '{rule.name}' matched",
                    matched_rule=rule.name
                )

        return EvaluationResult(allowed=False, reason="No applicable rules matched")

    def get_engine_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        return {
            "rules": [rule.name for rule in self.rules],
            "permissions": {kind: sorted(actions) for kind, actions in self.permissions.items()},
            "groups": len(self.directory),
        }
