import pytest

from config_store import ConfigError
from registry import ServerDescriptor, ServerRegistry


def test_load_from_mappings():
    registry = ServerRegistry.load(
        [
            {"name": "A", "address": "1.2.3.4:27015", "secret": "x"},
            {"name": "B", "address": "1.2.3.5:27015", "password": "y", "container": "mc"},
        ]
    )
    assert registry.names() == ["A", "B"]
    assert registry.lookup("A").container_ref is None
    assert registry.lookup("B").secret == "y"
    assert registry.lookup("B").container_ref == "mc"


def test_empty_registry_is_a_config_error():
    with pytest.raises(ConfigError, match="empty registry"):
        ServerRegistry.load([])


def test_duplicate_names_rejected():
    servers = [ServerDescriptor("A", "h:1", "x"), ServerDescriptor("A", "h:2", "y")]
    with pytest.raises(ConfigError, match="duplicate"):
        ServerRegistry.load(servers)


def test_lookup_unknown_or_empty_name(registry):
    assert registry.lookup("nope") is None
    assert registry.lookup(None) is None
    assert registry.lookup("") is None


def test_descriptor_is_immutable(server_a):
    with pytest.raises(AttributeError):
        server_a.name = "other"
