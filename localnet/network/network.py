"""Local network orchestration."""

import asyncio
import logging
import shutil
import socket
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from ..api import APIClientFactory, new_api_client
from ..crypto import generate_staking_keypair, node_id_from_cert, write_staking_files
from ..errors import ConfigValidationError, NetworkStoppedError, NodeNotFoundError, NodeStartError
from ..models import NetworkConfig, NodeConfig, NodeSettings, RunnerSettings
from ..process import NodeProcess, ProcessFactory, new_node_process
from .health import HealthAggregator
from .names import merge_flags, next_free_name
from .node import Node
from .validation import validate_network_config, validate_node_config

logger = logging.getLogger(__name__)


class LocalNetwork:
    """
    A cluster of node processes running on this machine.

    The network owns the registry of running nodes. Every operation takes
    the registry lock, so a node is visible only once its process has
    started and its API client is attached, and disappears only after it
    has been torn down. Once stopped, a network cannot be restarted and
    every operation raises NetworkStoppedError.

    Use new_network() to create one.
    """

    def __init__(
        self,
        genesis: str,
        network_id: int,
        flags: Optional[dict] = None,
        api_client_factory: APIClientFactory = new_api_client,
        process_factory: ProcessFactory = new_node_process,
        settings: Optional[RunnerSettings] = None,
        log_level: str = "INFO",
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize an empty network.

        Args:
            genesis: Raw genesis document, already validated
            network_id: Network ID extracted from the genesis
            flags: Network-wide default node flags
            api_client_factory: Builds the API client of each node
            process_factory: Builds the process handle of each node
            settings: Runner tunables
            log_level: Log level handed to the node processes
            log: Logger to report to
        """
        self.genesis = genesis
        self.network_id = network_id
        self.flags = dict(flags or {})
        self.settings = settings or RunnerSettings()
        self.log_level = log_level
        self.log = log or logger

        self.nodes: Dict[str, Node] = {}
        self.stopped = False

        self._api_client_factory = api_client_factory
        self._process_factory = process_factory
        self._lock = asyncio.Lock()

        # A temporary root is removed again on stop
        self._owns_root_dir = self.settings.root_dir is None
        if self._owns_root_dir:
            self.root_dir = Path(tempfile.mkdtemp(prefix="localnet-"))
        else:
            self.root_dir = Path(self.settings.root_dir)
            self.root_dir.mkdir(parents=True, exist_ok=True)
        self.genesis_path = self.root_dir / "genesis.json"
        with open(self.genesis_path, 'w') as f:
            f.write(genesis)

        self._health = HealthAggregator(
            self._snapshot_clients,
            interval=self.settings.health_check_interval,
            log=self.log
        )

    async def __aenter__(self) -> "LocalNetwork":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if not self.stopped:
            await self.stop()

    def _check_running(self):
        """Must be called with the lock held."""
        if self.stopped:
            raise NetworkStoppedError()

    def _free_port(self, *exclude: int) -> int:
        """Ask the OS for a port no registered node uses."""
        used = {port for node in self.nodes.values() for port in (node.http_port, node.staking_port)}
        used.update(exclude)
        while True:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.bind((self.settings.bind_address, 0))
                port = sock.getsockname()[1]
            if port not in used:
                return port

    def _bootstrap_args(self) -> List[str]:
        beacons = [node for node in self.nodes.values() if node.is_beacon]
        return [
            f"--bootstrap-ips={','.join(node.staking_endpoint for node in beacons)}",
            f"--bootstrap-ids={','.join(node.node_id for node in beacons)}",
        ]

    async def _start_node(self, config: NodeConfig, settings: NodeSettings) -> Node:
        """
        Start a validated node and register it. Must be called with the lock held.

        Args:
            config: Node config with its name resolved and flags merged
            settings: Settings decoded by the validator

        Returns:
            The registered node

        Raises:
            NodeStartError: If the process or the API client could not be started
        """
        name = config.name

        # Nodes without a staking identity get a fresh one
        if not config.staking_key:
            keypair = generate_staking_keypair()
            config = config.model_copy(update={
                "staking_key": keypair.key_pem,
                "staking_cert": keypair.cert_pem,
            })
        node_id = node_id_from_cert(config.staking_cert)

        data_dir = self.root_dir / name
        db_dir = Path(settings.db_dir) if settings.db_dir else data_dir / "db"
        log_dir = Path(settings.log_dir) if settings.log_dir else data_dir / "logs"
        http_port = settings.http_port or self._free_port()
        staking_port = settings.staking_port or self._free_port(http_port)

        try:
            key_path, cert_path = write_staking_files(config.staking_key, config.staking_cert, data_dir)
            config_path = None
            if config.config_file:
                config_path = data_dir / "config.json"
                with open(config_path, 'w') as f:
                    f.write(config.config_file)
        except (OSError, ValueError) as e:
            raise NodeStartError(f"couldn't write files of node {name!r}: {e}") from e

        args = [
            f"--network-id={self.network_id}",
            f"--genesis={self.genesis_path}",
            f"--db-dir={db_dir}",
            f"--log-dir={log_dir}",
            f"--http-host={self.settings.bind_address}",
            f"--http-port={http_port}",
            f"--staking-port={staking_port}",
            f"--staking-tls-key-file={key_path}",
            f"--staking-tls-cert-file={cert_path}",
        ]
        if config_path is not None:
            args.append(f"--config-file={config_path}")
        if "log-level" not in config.flags:
            args.append(f"--log-level={self.log_level}")
        args.extend(self._bootstrap_args())

        try:
            process = self._create_process(config, settings, args)
            await process.start()
        except NodeStartError:
            raise
        except Exception as e:
            raise NodeStartError(f"couldn't start node {name!r}: {e}") from e

        try:
            client = self._api_client_factory(
                self.settings.bind_address,
                http_port,
                self.settings.api_request_timeout
            )
        except Exception as e:
            await self._stop_process(name, process)
            raise NodeStartError(f"couldn't create API client for node {name!r}: {e}") from e

        node = Node(
            name=name,
            node_id=node_id,
            config=config,
            settings=settings,
            process=process,
            client=client,
            http_port=http_port,
            staking_port=staking_port,
            data_dir=data_dir,
            address=self.settings.bind_address,
        )
        self.nodes[name] = node
        self.log.info(f"Node {name} ({node_id}) started, API at {node.api_url}")
        return node

    def _create_process(self, config: NodeConfig, settings: NodeSettings, args: List[str]) -> NodeProcess:
        if self._process_factory is new_node_process:
            return new_node_process(
                config,
                *args,
                binary_path=settings.binary_path,
                stop_timeout=self.settings.stop_timeout
            )
        return self._process_factory(config, *args)

    async def _stop_process(self, name: str, process: NodeProcess) -> bool:
        try:
            await process.stop()
            return True
        except Exception as e:
            self.log.error(f"Error stopping node {name}: {e}")
            return False

    async def _teardown(self, node: Node) -> int:
        """Release a node's client and process. Returns the number of failures."""
        failures = 0
        try:
            node.client.close()
        except Exception as e:
            self.log.error(f"Error closing API client of node {node.name}: {e}")
            failures += 1
        if not await self._stop_process(node.name, node.process):
            failures += 1
        return failures

    async def _snapshot_clients(self) -> dict:
        async with self._lock:
            self._check_running()
            return {name: node.client for name, node in self.nodes.items()}

    async def add_node(self, config: NodeConfig) -> Node:
        """
        Validate, start and register a new node.

        Args:
            config: Node config; a name is generated when empty

        Returns:
            The registered node

        Raises:
            NetworkStoppedError: If the network is stopped
            ConfigValidationError: If the config is invalid or the name is taken
            NodeStartError: If the node could not be started
        """
        async with self._lock:
            self._check_running()

            name = config.name or next_free_name(self.nodes)
            if name in self.nodes:
                raise ConfigValidationError(f"repeated node name {name!r}", field="name")
            settings = validate_node_config(config, self.network_id, name)

            resolved = config.model_copy(update={
                "name": name,
                "flags": merge_flags(self.flags, config.flags),
            })
            return await self._start_node(resolved, settings)

    async def remove_node(self, name: str):
        """
        Stop a node and remove it from the network.

        Cleanup failures are logged; the node is removed regardless and its
        name can be reused.

        Raises:
            NetworkStoppedError: If the network is stopped
            NodeNotFoundError: If no such node is registered
        """
        async with self._lock:
            self._check_running()
            node = self.nodes.pop(name, None)
            if node is None:
                raise NodeNotFoundError(name)
            await self._teardown(node)
            self.log.info(f"Node {name} removed")

    async def get_node(self, name: str) -> Node:
        """
        Get a registered node.

        Raises:
            NetworkStoppedError: If the network is stopped
            NodeNotFoundError: If no such node is registered
        """
        async with self._lock:
            self._check_running()
            node = self.nodes.get(name)
            if node is None:
                raise NodeNotFoundError(name)
            return node

    async def get_node_names(self) -> List[str]:
        """Names of all registered nodes, in registration order."""
        async with self._lock:
            self._check_running()
            return list(self.nodes)

    async def get_all_nodes(self) -> Dict[str, Node]:
        """Copy of the name -> node registry."""
        async with self._lock:
            self._check_running()
            return dict(self.nodes)

    async def healthy(self, timeout: Optional[float] = None):
        """
        Wait until every node reports healthy.

        Wrap in asyncio.create_task() to wait in the background; the task
        completes exactly once with the outcome.

        Args:
            timeout: Seconds to wait before giving up (None waits forever)

        Raises:
            NetworkStoppedError: If the network is or becomes stopped
            HealthTimeoutError: If the timeout elapses first
        """
        async with self._lock:
            self._check_running()
        await self._health.await_healthy(timeout)

    async def stop(self):
        """
        Stop every node and mark the network stopped.

        Per-node cleanup failures are logged, never raised; the network
        always ends up stopped. A temporary root directory created by the
        network is removed.

        Raises:
            NetworkStoppedError: If the network was already stopped
        """
        async with self._lock:
            self._check_running()

            failures = 0
            try:
                for node in list(self.nodes.values()):
                    failures += await self._teardown(node)
            finally:
                self.nodes.clear()
                self.stopped = True

            if self._owns_root_dir:
                try:
                    shutil.rmtree(self.root_dir)
                except OSError as e:
                    self.log.error(f"Error removing {self.root_dir}: {e}")
                    failures += 1

            if failures:
                self.log.warning(f"Network stopped with {failures} cleanup failure(s)")
            else:
                self.log.info("Network stopped")

    def get_status(self) -> dict:
        """
        Get network status information.

        Returns:
            Dictionary with network status
        """
        return {
            "network_id": self.network_id,
            "root_dir": str(self.root_dir),
            "stopped": self.stopped,
            "nodes": {name: node.get_status() for name, node in self.nodes.items()},
        }


async def new_network(
    config: NetworkConfig,
    api_client_factory: APIClientFactory = new_api_client,
    process_factory: ProcessFactory = new_node_process,
    log: Optional[logging.Logger] = None,
    settings: Optional[RunnerSettings] = None
) -> LocalNetwork:
    """
    Validate a network config and start all of its nodes.

    Nodes are started in configuration order. If one fails to start, the
    error is raised and nodes started before it are left running; no
    network handle is returned for them.

    Args:
        config: Network config
        api_client_factory: Builds the API client of each node
        process_factory: Builds the process handle of each node
        log: Logger to report to (module logger when None)
        settings: Runner tunables

    Returns:
        The running network

    Raises:
        ConfigValidationError: If the config is invalid
        NodeStartError: If a node could not be started
    """
    log = log or logger
    validated = validate_network_config(config)

    net = LocalNetwork(
        genesis=config.genesis,
        network_id=validated.network_id,
        flags=config.flags,
        api_client_factory=api_client_factory,
        process_factory=process_factory,
        settings=settings,
        log_level=config.log_level,
        log=log,
    )
    log.info(
        f"Starting network {config.name or validated.network_id} "
        f"with {len(config.node_configs)} node(s) in {net.root_dir}"
    )

    async with net._lock:
        for node_config, name, node_settings in zip(config.node_configs, validated.names, validated.node_settings):
            resolved = node_config.model_copy(update={
                "name": name,
                "flags": merge_flags(config.flags, node_config.flags),
            })
            try:
                await net._start_node(resolved, node_settings)
            except NodeStartError:
                if net.nodes:
                    log.warning(
                        f"Network creation failed; {len(net.nodes)} already started node(s) "
                        f"left running: {', '.join(net.nodes)}"
                    )
                raise

    return net
