"""
Request and response models for the authorization API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .domain.models import AuthorizationDecision, PrincipalClaims


class ClaimsModel(BaseModel):
    """Caller-normalized principal claims."""
    user_id: Optional[str] = Field(None, description="Authenticated user id")
    roles: List[str] = Field(default_factory=list, description="Role labels")
    allowed_tenants: Optional[List[str]] = Field(None, description="Tenants the user may act in")
    group_ref: Optional[str] = Field(None, description="Introducer group id")

    def to_claims(self) -> PrincipalClaims:
        return PrincipalClaims(
            user_id=self.user_id,
            roles=tuple(self.roles),
            allowed_tenants=tuple(self.allowed_tenants) if self.allowed_tenants is not None else None,
            group_ref=self.group_ref
        )


class AuthorizationCheckRequest(BaseModel):
    """Request model for an authorization check."""
    claims: ClaimsModel = Field(..., description="Principal claims")
    tenant_id: Optional[str] = Field(None, description="Requested (active) tenant")
    resource_kind: str = Field(..., description="Resource kind, e.g. account")
    resource_id: str = Field(..., description="Resource identifier")
    action: str = Field(..., description="Action to perform")


class AuthorizationCheckResponse(BaseModel):
    """Response model for an authorization check."""
    allowed: bool = Field(..., description="Whether the action is allowed")
    decision: str = Field(..., description="allow or deny")
    reason: Optional[str] = Field(None, description="Deny reason code")
    matched_rule: Optional[str] = Field(None, description="Rule that granted access")

    @classmethod
    def from_decision(cls, decision: AuthorizationDecision) -> "AuthorizationCheckResponse":
        return cls(
            allowed=decision.allowed,
            decision=decision.decision,
            reason=decision.reason.value if decision.reason else None,
            matched_rule=decision.matched_rule
        )


class AccountResponse(BaseModel):
    """Account returned by the protected account endpoint."""
    id: str
    name: str
    owner_id: str
    tenant_id: str


class GroupListResponse(BaseModel):
    """Group directory snapshot in configuration shape."""
    groups: Dict[str, Dict[str, Any]]
    total: int
