"""
Node process supervision.

Runs a node binary as a real subprocess:

- The process is started in a new session so it never outlives the runner
  as an orphan of the terminal
- Output is appended to a per-node log file
- Stopping sends SIGTERM, waits, then escalates to SIGKILL
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import IO, Optional

from ..errors import NodeStartError, ProcessExitError
from ..models import LocalNodeConfig, NodeConfig
from .base import NodeProcess, flags_to_args

logger = logging.getLogger(__name__)

DEFAULT_STOP_TIMEOUT = 5.0


class SubprocessNodeProcess:
    """
    Node process backed by an asyncio subprocess.

    Example:
        process = SubprocessNodeProcess("node-0", ["/usr/bin/node", "--http-port=9650"])
        await process.start()
        # ... later ...
        await process.stop()
    """

    def __init__(
        self,
        name: str,
        command: list[str],
        log_path: Optional[Path] = None,
        stop_timeout: float = DEFAULT_STOP_TIMEOUT
    ):
        """
        Initialize node process.

        Args:
            name: Node name, used in logs and errors
            command: Binary followed by its arguments
            log_path: File receiving stdout and stderr (discarded when None)
            stop_timeout: Seconds to wait after SIGTERM before SIGKILL
        """
        self.name = name
        self.command = command
        self.log_path = log_path
        self.stop_timeout = stop_timeout

        self._process: Optional[asyncio.subprocess.Process] = None
        self._log_file: Optional[IO[bytes]] = None

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode if self._process else None

    async def start(self):
        """Launch the node binary."""
        if self._process is not None:
            raise NodeStartError(f"node {self.name!r} already started")

        stdout = asyncio.subprocess.DEVNULL
        if self.log_path is not None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._log_file = open(self.log_path, 'ab')
            stdout = self._log_file

        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=stdout,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            self._close_log()
            raise NodeStartError(f"couldn't launch node {self.name!r}: {e}") from e

        logger.info(f"Started node {self.name} (pid {self._process.pid})")

    async def wait(self):
        """Wait for the node to exit."""
        if self._process is None:
            return
        returncode = await self._process.wait()
        self._close_log()
        if returncode != 0:
            raise ProcessExitError(self.name, returncode)

    async def stop(self):
        """Terminate the node, escalating to SIGKILL after the timeout."""
        proc = self._process
        if proc is None or proc.returncode is not None:
            self._close_log()
            return

        try:
            proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), timeout=self.stop_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Node {self.name} ignored SIGTERM, killing it")
                proc.kill()
                await proc.wait()
        except ProcessLookupError:
            pass  # Already gone
        finally:
            self._close_log()

        logger.info(f"Stopped node {self.name} (exit status {proc.returncode})")

    def _close_log(self):
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None


def _arg_value(args: tuple, key: str) -> Optional[str]:
    prefix = f"--{key}="
    for arg in args:
        if arg.startswith(prefix):
            return arg[len(prefix):]
    return None


def new_node_process(
    config: NodeConfig,
    *args: str,
    binary_path: Optional[str] = None,
    stop_timeout: float = DEFAULT_STOP_TIMEOUT
) -> NodeProcess:
    """
    Default process factory.

    The runner's arguments come first, followed by the node's merged flags.

    Args:
        config: Resolved node config
        *args: Runner arguments
        binary_path: Node binary; read from the implementation-specific
            config when not given
        stop_timeout: Seconds to wait after SIGTERM before SIGKILL

    Raises:
        NodeStartError: If no binary path is configured
    """
    if binary_path is None:
        raw = config.impl_specific_config
        document = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else (raw or {})
        binary_path = LocalNodeConfig.model_validate(document).binary_path
    if not binary_path:
        raise NodeStartError(f"node {config.name!r} has no binaryPath configured")

    log_path = None
    log_dir = _arg_value(args, "log-dir")
    if log_dir:
        log_path = Path(log_dir) / f"{config.name}.log"

    command = [binary_path, *args, *flags_to_args(config.flags)]
    logger.debug(f"Node {config.name} command: {' '.join(command)}")
    return SubprocessNodeProcess(config.name, command, log_path=log_path, stop_timeout=stop_timeout)
