"""
Group directory for delegated (introducer) access.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from shared.errors import ConfigurationError
from shared.logging import get_logger
from ..domain.models import Group


GroupSnapshot = Mapping[str, Group]


def parse_groups(config: Mapping[str, Any]) -> Dict[str, Group]:
    """Build groups from ``{groupId: {tenantId, resourceIds}}``."""
    if not isinstance(config, Mapping):
        raise ConfigurationError(
            "Group configuration must be a mapping",
            details={"type": type(config).__name__}
        )

    groups: Dict[str, Group] = {}
    for group_id, entry in config.items():
        if not isinstance(group_id, str) or not group_id:
            raise ConfigurationError("Group id must be a non-empty string", details={"group_id": str(group_id)})
        if not isinstance(entry, Mapping):
            raise ConfigurationError("Group entry must be a mapping", details={"group_id": group_id})

        tenant_id = entry.get("tenantId")
        if not isinstance(tenant_id, str) or not tenant_id:
            raise ConfigurationError("Group tenantId is required", details={"group_id": group_id})

        resource_ids = entry.get("resourceIds", [])
        if not isinstance(resource_ids, list) or not all(isinstance(r, str) and r for r in resource_ids):
            raise ConfigurationError(
                "Group resourceIds must be a list of non-empty strings",
                details={"group_id": group_id}
            )

        groups[group_id] = Group(group_id=group_id, tenant_id=tenant_id, resource_ids=frozenset(resource_ids))

    return groups


def load_groups_file(path: Union[str, Path]) -> Dict[str, Group]:
    """Load groups from a YAML (or JSON) file."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigurationError("Cannot read group configuration", details={"path": str(path), "error": str(e)})
    except yaml.YAMLError as e:
        raise ConfigurationError("Cannot parse group configuration", details={"path": str(path), "error": str(e)})

    return parse_groups(data or {})


class GroupDirectory:
    """Read-only lookup from group id to group.

    The groups live in a single immutable snapshot. Reloads build a new
    snapshot and swap the reference; readers never lock and never see a
    half-updated group.
    """

    def __init__(self, groups: Optional[Mapping[str, Group]] = None, source: Optional[Path] = None):
        self.logger = get_logger("authz.group_directory")
        self.source = source
        self._snapshot: GroupSnapshot = MappingProxyType(dict(groups or {}))

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "GroupDirectory":
        return cls(parse_groups(config))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "GroupDirectory":
        path = Path(path)
        directory = cls(load_groups_file(path), source=path)
        directory.logger.info("Group directory loaded", path=str(path), groups=len(directory))
        return directory

    def snapshot(self) -> GroupSnapshot:
        """Current snapshot; hold on to it for a consistent view."""
        return self._snapshot

    def get(self, group_id: Optional[str]) -> Optional[Group]:
        if not group_id:
            return None
        return self._snapshot.get(group_id)

    def replace(self, groups: Mapping[str, Group]) -> None:
        """Publish a new snapshot."""
        self._snapshot = MappingProxyType(dict(groups))
        self.logger.info("Group directory replaced", groups=len(groups))

    def reload(self) -> int:
        """Reload from the source file; the old snapshot survives a failure."""
        if self.source is None:
            raise ConfigurationError("Group directory has no source file to reload from")

        groups = load_groups_file(self.source)
        self.replace(groups)
        return len(groups)

    def to_config(self) -> Dict[str, Dict[str, Any]]:
        """Render the snapshot back in the static configuration shape."""
        return {
            group.group_id: {
                "tenantId": group.tenant_id,
                "resourceIds": sorted(group.resource_ids),
            }
            for group in self._snapshot.values()
        }

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._snapshot
