from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from config_store import ConfigError


@dataclass(frozen=True)
class ServerDescriptor:
    name: str
    address: str
    secret: str
    container_ref: Optional[str] = None

    @property
    def has_container(self) -> bool:
        return bool(self.container_ref)


class ServerRegistry:
    """Immutable, ordered set of configured servers. Built once at startup."""

    def __init__(self, servers: Iterable[ServerDescriptor]):
        self._servers: tuple = tuple(servers)
        self._by_name: Dict[str, ServerDescriptor] = {}
        for server in self._servers:
            if not server.name:
                raise ConfigError("server name must not be empty")
            if server.name in self._by_name:
                raise ConfigError(f"duplicate server name: {server.name}")
            self._by_name[server.name] = server

    @classmethod
    def load(cls, server_list: Iterable) -> "ServerRegistry":
        servers: List[ServerDescriptor] = []
        for entry in server_list:
            if isinstance(entry, ServerDescriptor):
                servers.append(entry)
            else:
                servers.append(_from_mapping(entry))
        if not servers:
            raise ConfigError("empty registry")
        return cls(servers)

    def lookup(self, name: Optional[str]) -> Optional[ServerDescriptor]:
        if not name:
            return None
        return self._by_name.get(name)

    def at(self, index: int) -> ServerDescriptor:
        return self._servers[index]

    def names(self) -> List[str]:
        return [s.name for s in self._servers]

    def __len__(self) -> int:
        return len(self._servers)

    def __iter__(self) -> Iterator[ServerDescriptor]:
        return iter(self._servers)


def _from_mapping(entry: Mapping) -> ServerDescriptor:
    container = entry.get("container") or entry.get("container_ref") or None
    return ServerDescriptor(
        name=str(entry.get("name") or ""),
        address=str(entry.get("address") or ""),
        secret=str(entry.get("secret", entry.get("password")) or ""),
        container_ref=container,
    )
