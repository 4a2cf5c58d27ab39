"""Local network orchestration."""

from .network import LocalNetwork, new_network
from .node import Node
from .health import HealthAggregator, HealthStatus
from .names import resolve_node_names, next_free_name, merge_flags
from .validation import ValidatedNetwork, parse_genesis, validate_network_config, validate_node_config
from .defaults import build_genesis, default_network_config, new_default_network

__all__ = [
    "LocalNetwork",
    "new_network",
    "Node",
    "HealthAggregator",
    "HealthStatus",
    "resolve_node_names",
    "next_free_name",
    "merge_flags",
    "ValidatedNetwork",
    "parse_genesis",
    "validate_network_config",
    "validate_node_config",
    "build_genesis",
    "default_network_config",
    "new_default_network",
]
