"""Tests for node naming and flag merging."""

from localnet.models import NodeConfig
from localnet.network import merge_flags, next_free_name, resolve_node_names


def test_resolve_node_names():
    configs = [
        NodeConfig(name="alpha"),
        NodeConfig(),
        NodeConfig(name="beta"),
        NodeConfig(),
    ]

    assert resolve_node_names(configs) == ["alpha", "node-0", "beta", "node-1"]


def test_resolve_node_names_all_unnamed():
    names = resolve_node_names([NodeConfig() for _ in range(5)])

    assert names == [f"node-{i}" for i in range(5)]


def test_next_free_name():
    assert next_free_name([]) == "node-0"
    assert next_free_name(["node-0", "node-1"]) == "node-2"
    assert next_free_name(["node-1", "alpha"]) == "node-0"


def test_merge_flags():
    """Node-level values win; keys from both sides are kept."""
    network_flags = {"a": 1, "c": 2}
    node_flags = {"b": 1, "d": 1, "c": 3}

    merged = merge_flags(network_flags, node_flags)

    assert merged == {"a": 1, "b": 1, "c": 3, "d": 1}
    # Inputs are left alone
    assert network_flags == {"a": 1, "c": 2}
    assert node_flags == {"b": 1, "d": 1, "c": 3}


def test_merge_flags_empty():
    assert merge_flags(None, None) == {}
    assert merge_flags({"a": 1}, {}) == {"a": 1}
    assert merge_flags({}, {"b": 2}) == {"b": 2}
