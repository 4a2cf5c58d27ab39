"""Default five-node local network."""

import json
import logging
from typing import List, Optional, Sequence

from ..api import APIClientFactory, new_api_client
from ..crypto import StakingKeyPair, generate_staking_keypair, node_id_from_public_key
from ..errors import ConfigValidationError
from ..models import Allocation, Genesis, NetworkConfig, NodeConfig, RunnerSettings
from ..process import ProcessFactory, new_node_process
from .network import LocalNetwork, new_network

DEFAULT_NETWORK_ID = 1337
DEFAULT_NODE_COUNT = 5
DEFAULT_FUNDED_ADDRESS = "local1qqz3qctdsnlw8k5t0yuxwv2uyu8c7c0n9sqyhq"
DEFAULT_FUNDED_BALANCE = 300_000_000_000_000_000


def default_staking_keypair(index: int) -> StakingKeyPair:
    """Fixed staking identity of the index-th default node."""
    return generate_staking_keypair(seed=f"localnet-default-node-{index}".encode('utf-8'))


def build_genesis(
    network_id: int,
    allocations: Sequence[Allocation],
    initial_stakers: Sequence[str],
    start_time: Optional[int] = None,
    message: Optional[str] = None
) -> str:
    """
    Render a genesis document.

    Args:
        network_id: Network identifier
        allocations: Initial balances
        initial_stakers: Node IDs staking from genesis
        start_time: Optional Unix start time
        message: Optional free-form message

    Returns:
        Genesis JSON document

    Raises:
        ConfigValidationError: If there are no initial stakers
    """
    if not initial_stakers:
        raise ConfigValidationError("genesis needs at least one initial staker")

    genesis = Genesis(
        network_id=network_id,
        allocations=list(allocations),
        initial_stakers=list(initial_stakers),
        start_time=start_time,
        message=message,
    )
    return genesis.to_json()


def default_network_config(binary_path: str, node_count: int = DEFAULT_NODE_COUNT) -> NetworkConfig:
    """
    Config of the default local network.

    Nodes are left unnamed so they come up as node-0 ... node-N; node-0 is
    the beacon. Staking identities are fixed, so node IDs are stable across
    runs.

    Args:
        binary_path: Node binary every node runs
        node_count: Number of nodes

    Returns:
        NetworkConfig
    """
    keypairs: List[StakingKeyPair] = [default_staking_keypair(i) for i in range(node_count)]
    genesis = build_genesis(
        DEFAULT_NETWORK_ID,
        [Allocation(address=DEFAULT_FUNDED_ADDRESS, balance=DEFAULT_FUNDED_BALANCE)],
        [node_id_from_public_key(keypair.public_key) for keypair in keypairs],
    )

    impl_specific_config = json.dumps({"binaryPath": binary_path})
    node_configs = [
        NodeConfig(
            is_beacon=(i == 0),
            staking_key=keypair.key_pem,
            staking_cert=keypair.cert_pem,
            impl_specific_config=impl_specific_config,
        )
        for i, keypair in enumerate(keypairs)
    ]
    return NetworkConfig(name="default", genesis=genesis, node_configs=node_configs)


async def new_default_network(
    binary_path: str,
    api_client_factory: APIClientFactory = new_api_client,
    process_factory: ProcessFactory = new_node_process,
    log: Optional[logging.Logger] = None,
    settings: Optional[RunnerSettings] = None
) -> LocalNetwork:
    """Start the default local network."""
    return await new_network(
        default_network_config(binary_path),
        api_client_factory=api_client_factory,
        process_factory=process_factory,
        log=log,
        settings=settings,
    )
