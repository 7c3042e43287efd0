"""
Decision pipeline: the single authorization entry point.

Gates run strictly in order and every gate is final for the request:

1. required context present        -> else missing_context
2. tenant membership               -> else tenant_not_permitted
3. resource lookup                 -> else resource_not_found
4. policy evaluation               -> else policy_denied

Nothing is retried and nothing shared is mutated, so concurrent calls are
independent and a cancelled call leaves nothing to roll back.
"""

import time
from typing import Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .domain.models import (
    AuthorizationDecision, AuthorizationRequest, Principal, PrincipalClaims, ReasonCode
)
from .resources.repository import ResourceLookup
from .rules.engine import PolicyEvaluator
from .tenancy.membership import check_membership


class DecisionPipeline:
    """Composes the membership gate, resource lookup and policy evaluator."""

    def __init__(self, evaluator: PolicyEvaluator, resource_lookup: ResourceLookup,
                 metrics: Optional[MetricsCollector] = None):
        self.evaluator = evaluator
        self.resource_lookup = resource_lookup
        self.metrics = metrics
        self.logger = get_logger("authz.pipeline")

    async def authorize(self, claims: PrincipalClaims, tenant_id: Optional[str],
                        resource_kind: Optional[str], resource_id: Optional[str],
                        action: Optional[str]) -> AuthorizationDecision:
        """Decide whether the claimed principal may ``action`` the resource."""
        request = AuthorizationRequest(
            claims=claims,
            tenant_id=tenant_id,
            resource_kind=resource_kind,
            resource_id=resource_id,
            action=action
        )

        start_time = time.time()
        decision = await self._decide(request)
        duration = time.time() - start_time

        if self.metrics is not None:
            self.metrics.record_decision(
                decision.allowed,
                decision.reason.value if decision.reason else None,
                duration
            )

        log = self.logger.info if decision.allowed else self.logger.warning
        log(
            "Authorization decision",
            user_id=claims.user_id,
            tenant_id=tenant_id,
            resource_kind=resource_kind,
            resource_id=resource_id,
            action=action,
            decision=decision.decision,
            reason=decision.reason.value if decision.reason else None,
            matched_rule=decision.matched_rule,
            duration_ms=round(duration * 1000, 3)
        )

        return decision

    async def _decide(self, request: AuthorizationRequest) -> AuthorizationDecision:
        claims = request.claims

        if not self._has_required_context(request):
            return AuthorizationDecision.deny(ReasonCode.MISSING_CONTEXT)

        if not check_membership(claims.allowed_tenants, request.tenant_id):
            return AuthorizationDecision.deny(ReasonCode.TENANT_NOT_PERMITTED)

        resource = await self.resource_lookup.fetch_resource(request.resource_kind, request.resource_id)
        if resource is None:
            return AuthorizationDecision.deny(ReasonCode.RESOURCE_NOT_FOUND)

        principal = Principal(
            id=claims.user_id,
            roles=frozenset(claims.roles),
            active_tenant_id=request.tenant_id,
            group_ref=claims.group_ref or None
        )

        result = self.evaluator.evaluate(principal, resource, request.action)
        if not result.allowed:
            self.logger.debug("Policy denied", reason=result.reason, resource_id=resource.id)
            return AuthorizationDecision.deny(ReasonCode.POLICY_DENIED)

        return AuthorizationDecision.allow(result.matched_rule)

    @staticmethod
    def _has_required_context(request: AuthorizationRequest) -> bool:
        claims = request.claims
        return bool(
            claims.user_id
            and any(claims.roles)
            and claims.allowed_tenants
            and request.tenant_id
            and request.resource_kind
            and request.resource_id
            and request.action
        )
