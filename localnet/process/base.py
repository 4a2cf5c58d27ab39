"""Interfaces between the network runner and node processes."""

from typing import Callable, Protocol


class NodeProcess(Protocol):
    """A node's operating-system process, as seen by the runner."""

    async def start(self) -> None:
        """Launch the process. Raises if the binary fails to launch."""
        ...

    async def wait(self) -> None:
        """Block until the process exits. Raises on a failed exit."""
        ...

    async def stop(self) -> None:
        """Request graceful termination. Stopping twice is not an error."""
        ...


# (resolved node config, *extra args) -> process handle
ProcessFactory = Callable[..., NodeProcess]


def flags_to_args(flags: dict) -> list[str]:
    """Render flags as ``--key=value`` command line arguments."""
    args = []
    for key, value in flags.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        args.append(f"--{key}={value}")
    return args
