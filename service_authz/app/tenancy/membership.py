"""
Tenant membership gate.
"""

from typing import Iterable, Optional


def check_membership(allowed_tenants: Optional[Iterable[str]], active_tenant_id: str) -> bool:
    """Return True iff the principal may operate under ``active_tenant_id``.

    An empty or absent ``allowed_tenants`` never admits anyone.
    """
    if not active_tenant_id:
        raise ValueError("active_tenant_id is required")

    if not allowed_tenants:
        return False

    return active_tenant_id in set(allowed_tenants)
