"""
Resource lookup for the authorization service.

The decision pipeline only needs ``fetch_resource``; ``AccountRepository``
is the in-memory account store the service ships with.
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Union

import yaml

from shared.errors import ConfigurationError
from shared.logging import get_logger
from ..domain.models import Resource


ACCOUNT_KIND = "account"


class ResourceLookup(Protocol):
    """Anything that can resolve a resource by kind and id."""

    async def fetch_resource(self, kind: str, resource_id: str) -> Optional[Resource]:
        ...


@dataclass(frozen=True)
class Account:
    """Account record."""
    id: str
    name: str
    owner_id: str
    tenant_id: str

    def to_resource(self) -> Resource:
        return Resource(
            kind=ACCOUNT_KIND,
            id=self.id,
            tenant_id=self.tenant_id,
            owner_id=self.owner_id,
            attributes={"name": self.name}
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner_id": self.owner_id,
            "tenant_id": self.tenant_id,
        }


def parse_accounts(entries: Iterable[Mapping[str, Any]]) -> Dict[str, Account]:
    """Build accounts from a list of ``{id, name, ownerId, tenantId}``."""
    accounts: Dict[str, Account] = {}
    for entry in entries:
        try:
            account = Account(
                id=entry["id"],
                name=entry.get("name", entry["id"]),
                owner_id=entry["ownerId"],
                tenant_id=entry["tenantId"]
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError("Malformed account entry", details={"entry": str(entry), "error": str(e)})

        if not account.tenant_id:
            raise ConfigurationError("Account tenantId is required", details={"account_id": account.id})

        accounts[account.id] = account

    return accounts


class AccountRepository:
    """Read-only, in-memory account store."""

    def __init__(self, accounts: Optional[Iterable[Account]] = None):
        self.logger = get_logger("authz.account_repository")
        self._accounts: Mapping[str, Account] = MappingProxyType(
            {account.id: account for account in (accounts or [])}
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AccountRepository":
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError("Cannot load accounts", details={"path": str(path), "error": str(e)})

        if not isinstance(data, dict):
            raise ConfigurationError("Account file must be a mapping", details={"path": str(path)})

        repo = cls(parse_accounts(data.get("accounts", [])).values())
        repo.logger.info("Accounts loaded", path=str(path), accounts=len(repo))
        return repo

    def get_account(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    async def fetch_resource(self, kind: str, resource_id: str) -> Optional[Resource]:
        if kind != ACCOUNT_KIND:
            return None

        account = self._accounts.get(resource_id)
        if account is None:
            return None
        return account.to_resource()

    def __len__(self) -> int:
        return len(self._accounts)
