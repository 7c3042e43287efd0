"""
Principal, resource and decision records for the authorization service.

Every record here is immutable. Well-known authorization facts (tenant,
owner, group reference) are typed fields; anything else a future rule may
need travels in the read-only ``attributes`` extension map.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple


# Well-known attribute names
ACTIVE_TENANT_ID = "active_tenant_id"
GROUP_REF = "group_ref"
TENANT_ID = "tenant_id"
OWNER_ID = "owner_id"


def _freeze(attributes: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(attributes or {}))


class ReasonCode(str, Enum):
    """Closed set of deny reasons."""
    MISSING_CONTEXT = "missing_context"
    TENANT_NOT_PERMITTED = "tenant_not_permitted"
    RESOURCE_NOT_FOUND = "resource_not_found"
    POLICY_DENIED = "policy_denied"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as seen by the policy evaluator."""
    id: str
    roles: FrozenSet[str] = frozenset()
    active_tenant_id: Optional[str] = None
    group_ref: Optional[str] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "roles", frozenset(self.roles))
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return not self.roles.isdisjoint(roles)

    def get_attribute(self, name: str) -> Any:
        """Look up a well-known field first, then the extension map."""
        if name == ACTIVE_TENANT_ID:
            return self.active_tenant_id
        if name == GROUP_REF:
            return self.group_ref
        return self.attributes.get(name)


@dataclass(frozen=True)
class Resource:
    """The object access is requested against."""
    kind: str
    id: str
    tenant_id: Optional[str] = None
    owner_id: Optional[str] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    def get_attribute(self, name: str) -> Any:
        """Look up a well-known field first, then the extension map."""
        if name == TENANT_ID:
            return self.tenant_id
        if name == OWNER_ID:
            return self.owner_id
        return self.attributes.get(name)


@dataclass(frozen=True)
class Group:
    """Tenant-scoped set of resources a delegated role may access."""
    group_id: str
    tenant_id: str
    resource_ids: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "resource_ids", frozenset(self.resource_ids))

    def grants(self, tenant_id: Optional[str], resource_id: str) -> bool:
        return self.tenant_id == tenant_id and resource_id in self.resource_ids


@dataclass(frozen=True)
class PrincipalClaims:
    """Caller-normalized claims.

    Mapping real credentials (tokens, headers, sessions) into this shape is
    the request layer's job. Any field may be absent; the decision pipeline
    validates presence.
    """
    user_id: Optional[str] = None
    roles: Tuple[str, ...] = ()
    allowed_tenants: Optional[Tuple[str, ...]] = None
    group_ref: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "roles", tuple(self.roles or ()))
        if self.allowed_tenants is not None:
            object.__setattr__(self, "allowed_tenants", tuple(self.allowed_tenants))


@dataclass(frozen=True)
class AuthorizationRequest:
    """One decision call's inputs; never stored."""
    claims: PrincipalClaims
    tenant_id: Optional[str]
    resource_kind: Optional[str]
    resource_id: Optional[str]
    action: Optional[str]


@dataclass(frozen=True)
class AuthorizationDecision:
    """Allow, or Deny with a reason code."""
    allowed: bool
    reason: Optional[ReasonCode] = None
    matched_rule: Optional[str] = None

    @classmethod
    def allow(cls, matched_rule: Optional[str] = None) -> "AuthorizationDecision":
        return cls(allowed=True, matched_rule=matched_rule)

    @classmethod
    def deny(cls, reason: ReasonCode) -> "AuthorizationDecision":
        return cls(allowed=False, reason=reason)

    @property
    def decision(self) -> str:
        return "allow" if self.allowed else "deny"
