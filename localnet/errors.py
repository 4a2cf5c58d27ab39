"""Errors raised by the network runner."""

from typing import Optional


class NetworkError(Exception):
    """Base class for network runner errors."""


class ConfigValidationError(NetworkError, ValueError):
    """A network or node configuration is malformed or inconsistent."""

    def __init__(self, message: str, field: Optional[str] = None, node: Optional[str] = None):
        self.field = field
        self.node = node
        if node:
            message = f"node {node!r}: {message}"
        super().__init__(message)


class NodeStartError(NetworkError):
    """A node process or its API client could not be started."""


class NodeNotFoundError(NetworkError, KeyError):
    """No node with the given name is registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"node {name!r} not found")

    def __str__(self) -> str:
        return self.args[0]


class NetworkStoppedError(NetworkError):
    """The network has already been stopped."""

    def __init__(self, message: str = "network stopped"):
        super().__init__(message)


class HealthTimeoutError(NetworkError, TimeoutError):
    """Not every node became healthy before the deadline."""


class ProcessExitError(NetworkError):
    """A node process exited with a nonzero status."""

    def __init__(self, name: str, returncode: int):
        self.name = name
        self.returncode = returncode
        super().__init__(f"node {name!r} exited with status {returncode}")
