"""
Normalization of request headers into principal claims.

Stands in for real token parsing: a gateway in front of this service is
expected to have authenticated the caller and forwarded its identity in
these headers.
"""

from typing import List, Mapping, Optional, Tuple

from .domain.models import PrincipalClaims


USER_ID_HEADER = "X-User-Id"
ROLES_HEADER = "X-User-Roles"
TENANTS_HEADER = "X-User-Tenants"
INTRODUCER_HEADER = "X-User-Introducer-Id"
TENANT_HEADER = "X-Tenant-Id"


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    if value is None:
        return None
    value = value.strip()
    return value or None


def split_csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated header, trimming items and dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def claims_from_headers(headers: Mapping[str, str]) -> Tuple[PrincipalClaims, Optional[str]]:
    """Return the normalized claims and the requested tenant id."""
    tenants_header = _header(headers, TENANTS_HEADER)

    claims = PrincipalClaims(
        user_id=_header(headers, USER_ID_HEADER),
        roles=tuple(split_csv(_header(headers, ROLES_HEADER))),
        allowed_tenants=tuple(split_csv(tenants_header)) if tenants_header is not None else None,
        group_ref=_header(headers, INTRODUCER_HEADER)
    )

    return claims, _header(headers, TENANT_HEADER)
