"""Data models and schemas for localnet."""

from .genesis import Genesis, Allocation
from .config import NodeConfig, NetworkConfig, RunnerSettings
from .node_settings import LocalNodeConfig, ConfigFileOverrides, NodeSettings

__all__ = [
    "Genesis",
    "Allocation",
    "NodeConfig",
    "NetworkConfig",
    "RunnerSettings",
    "LocalNodeConfig",
    "ConfigFileOverrides",
    "NodeSettings",
]
