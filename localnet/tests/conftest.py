"""Shared fixtures: fake node processes and API clients."""

import json

import pytest

from localnet.crypto import generate_staking_keypair, node_id_from_public_key
from localnet.models import Allocation, NetworkConfig, NodeConfig, RunnerSettings
from localnet.network import build_genesis

NETWORK_ID = 1337


class FakeProcess:
    """In-memory node process."""

    def __init__(self, config, *args, fail_start=False):
        self.config = config
        self.args = args
        self.fail_start = fail_start
        self.started = False
        self.stop_calls = 0

    async def start(self):
        if self.fail_start:
            raise RuntimeError("Start failed")
        self.started = True

    async def wait(self):
        return None

    async def stop(self):
        self.stop_calls += 1


class FakeClient:
    """In-memory API client answering health checks with a fixed value."""

    def __init__(self, address, port, healthy=True):
        self.address = address
        self.port = port
        self.healthy = healthy
        self.checks = 0
        self.closed = False

    def check_health(self):
        self.checks += 1
        return self.healthy

    def close(self):
        self.closed = True


def local_node_config(binary_path="pepito"):
    return json.dumps({"binaryPath": binary_path})


@pytest.fixture
def runner_settings(tmp_path):
    """Settings writing node data under tmp_path and polling fast."""
    return RunnerSettings(root_dir=tmp_path / "network", health_check_interval=0.05)


@pytest.fixture
def processes():
    """Every FakeProcess created by the process factories."""
    return []


@pytest.fixture
def process_factory(processes):
    def factory(config, *args):
        process = FakeProcess(config, *args)
        processes.append(process)
        return process
    return factory


@pytest.fixture
def failing_process_factory(processes):
    def factory(config, *args):
        process = FakeProcess(config, *args, fail_start=True)
        processes.append(process)
        return process
    return factory


@pytest.fixture
def clients():
    """Every FakeClient created by the API client factories."""
    return []


@pytest.fixture
def api_client_factory(clients):
    def factory(address, port, timeout):
        client = FakeClient(address, port, healthy=True)
        clients.append(client)
        return client
    return factory


@pytest.fixture
def unhealthy_api_client_factory(clients):
    def factory(address, port, timeout):
        client = FakeClient(address, port, healthy=False)
        clients.append(client)
        return client
    return factory


@pytest.fixture
def empty_network_config():
    """A network config with a valid genesis and no nodes."""
    staker = generate_staking_keypair()
    genesis = build_genesis(
        NETWORK_ID,
        [Allocation(address="local1testaddress", balance=1)],
        [node_id_from_public_key(staker.public_key)],
    )
    return NetworkConfig(name="My Network", genesis=genesis, log_level="DEBUG")


@pytest.fixture
def network_config(empty_network_config):
    """A three node network config; node0 is the only beacon."""
    node_configs = []
    for i in range(3):
        keypair = generate_staking_keypair()
        node_configs.append(NodeConfig(
            name=f"node{i}",
            impl_specific_config=local_node_config(),
            staking_key=keypair.key_pem,
            staking_cert=keypair.cert_pem,
        ))
    node_configs[0].is_beacon = True
    return empty_network_config.model_copy(update={"node_configs": node_configs})
