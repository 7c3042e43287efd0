"""
Authorization service for the Access Layer.
"""

from datetime import datetime
from typing import Optional

from fastapi import Request

from shared.base_service import BaseService
from shared.config import AuthzConfig, get_config
from shared.errors import AuthorizationError, ConfigurationError
from shared.logging import set_user_context

from .claims import claims_from_headers
from .directory.groups import GroupDirectory
from .pipeline import DecisionPipeline
from .resources.repository import ACCOUNT_KIND, AccountRepository
from .rules.engine import PolicyEvaluator
from .rules.predicates import build_default_rules
from .schemas import (
    AccountResponse, AuthorizationCheckRequest, AuthorizationCheckResponse, GroupListResponse
)


class AuthorizationService(BaseService):
    """Authorization service implementation."""

    def __init__(self, config: Optional[AuthzConfig] = None):
        config = config if config is not None else get_config()
        super().__init__(config.service_name, config)

        # Static data is loaded once; a broken file fails startup
        self.directory = GroupDirectory.from_file(self.config.groups_file)
        self.accounts = AccountRepository.from_file(self.config.accounts_file)

        self.evaluator = PolicyEvaluator(
            self.directory,
            rules=build_default_rules(self.config.elevated_roles, self.config.delegated_roles),
            permissions=self.config.permissions
        )
        self.pipeline = DecisionPipeline(self.evaluator, self.accounts, metrics=self.metrics)

        self._setup_authz_routes()

    def _setup_authz_routes(self):
        """Set up authorization-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": self.service_name,
                "message": "Access Layer - Authorization Service",
                "version": "1.0.0",
                "capabilities": ["tenant_membership", "policy_evaluation", "group_delegation"]
            }

        @self.app.post("/authz/check", response_model=AuthorizationCheckResponse)
        async def check_authorization(request: AuthorizationCheckRequest):
            """Decide a single authorization request.

            Meant for trusted callers; the deny reason is returned as-is.
            """
            claims = request.claims.to_claims()
            set_user_context(claims.user_id, request.tenant_id)

            decision = await self.pipeline.authorize(
                claims,
                request.tenant_id,
                request.resource_kind,
                request.resource_id,
                request.action
            )
            return AuthorizationCheckResponse.from_decision(decision)

        @self.app.get("/accounts/{account_id}", response_model=AccountResponse)
        async def get_account(account_id: str, request: Request):
            """Return an account the caller may view.

            Every deny reason produces the same 403 so callers cannot probe
            tenants or account existence.
            """
            claims, tenant_id = claims_from_headers(request.headers)
            set_user_context(claims.user_id, tenant_id)

            decision = await self.pipeline.authorize(claims, tenant_id, ACCOUNT_KIND, account_id, "view")
            if not decision.allowed:
                raise AuthorizationError()

            account = self.accounts.get_account(account_id)
            return AccountResponse(**account.to_dict())

        @self.app.get("/authz/groups", response_model=GroupListResponse)
        async def list_groups():
            """Current group directory snapshot."""
            groups = self.directory.to_config()
            return GroupListResponse(groups=groups, total=len(groups))

        @self.app.post("/authz/groups/reload")
        async def reload_groups():
            """Reload groups from the configured file."""
            try:
                total = self.directory.reload()
            except ConfigurationError:
                self.metrics.record_directory_reload("error")
                raise

            self.metrics.record_directory_reload("ok")
            self.logger.info("Group directory reloaded", groups=total)
            return {"success": True, "groups": total}

        @self.app.get("/authz/stats")
        async def get_stats():
            """Get authorization service statistics."""
            return {
                "engine": self.evaluator.get_engine_stats(),
                "accounts": len(self.accounts),
                "timestamp": datetime.now().isoformat()
            }

    async def _check_dependencies(self):
        """Report the static data sources."""
        return {
            "group_directory": {"status": "ok", "groups": len(self.directory)},
            "accounts": {"status": "ok", "accounts": len(self.accounts)},
        }


def create_app(config: Optional[AuthzConfig] = None):
    """Create authorization service application."""
    service = AuthorizationService(config)
    return service.app


if __name__ == "__main__":
    service = AuthorizationService()
    service.run()
