"""localnet - Run disposable local clusters of blockchain nodes."""

__version__ = "0.1.0"

from .errors import (
    NetworkError,
    ConfigValidationError,
    NodeStartError,
    NodeNotFoundError,
    NetworkStoppedError,
    HealthTimeoutError,
    ProcessExitError,
)
from .models import NetworkConfig, NodeConfig, RunnerSettings
from .network import LocalNetwork, Node, new_network, new_default_network

__all__ = [
    "NetworkError",
    "ConfigValidationError",
    "NodeStartError",
    "NodeNotFoundError",
    "NetworkStoppedError",
    "HealthTimeoutError",
    "ProcessExitError",
    "NetworkConfig",
    "NodeConfig",
    "RunnerSettings",
    "LocalNetwork",
    "Node",
    "new_network",
    "new_default_network",
]
