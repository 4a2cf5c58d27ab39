"""Node process supervision."""

from .base import NodeProcess, ProcessFactory, flags_to_args
from .supervisor import SubprocessNodeProcess, new_node_process

__all__ = [
    "NodeProcess",
    "ProcessFactory",
    "flags_to_args",
    "SubprocessNodeProcess",
    "new_node_process",
]
