"""Tests for config validation."""

import json

import pytest
from localnet.crypto import generate_staking_keypair
from localnet.errors import ConfigValidationError
from localnet.models import NetworkConfig, NodeConfig
from localnet.network import parse_genesis, validate_network_config, validate_node_config

from conftest import local_node_config


def test_parse_genesis():
    genesis = parse_genesis('{"networkID": 12345, "message": "hi"}')

    assert genesis.network_id == 12345
    assert genesis.message == "hi"


@pytest.mark.parametrize("raw", ["", "nonempty", "[1, 2]", "{}", '{"networkID": "0"}', '{"networkID": 1.5}'])
def test_parse_genesis_errors(raw):
    with pytest.raises(ConfigValidationError):
        parse_genesis(raw)


def test_error_names_node_and_field():
    config = NodeConfig(impl_specific_config=local_node_config(), config_file='{"http-port": "0"}')

    with pytest.raises(ConfigValidationError) as exc_info:
        validate_node_config(config, 0, "node-7")

    assert exc_info.value.node == "node-7"
    assert exc_info.value.field == "http-port"
    assert "node-7" in str(exc_info.value)


def test_impl_specific_config_as_dict():
    config = NodeConfig(impl_specific_config={"binaryPath": "pepito", "httpPort": 9650})

    settings = validate_node_config(config, 0)

    assert settings.binary_path == "pepito"
    assert settings.http_port == 9650


def test_wrong_impl_specific_config_types():
    config = NodeConfig(impl_specific_config=json.dumps({"binaryPath": 1}))

    with pytest.raises(ConfigValidationError):
        validate_node_config(config, 0)

    with pytest.raises(ConfigValidationError):
        validate_node_config(NodeConfig(impl_specific_config=42), 0)


def test_matching_network_id_is_accepted():
    config = NodeConfig(impl_specific_config=local_node_config(), config_file='{"network-id": 5}')

    assert validate_node_config(config, 5).network_id == 5


def test_validate_network_config():
    keypair = generate_staking_keypair()
    config = NetworkConfig(
        genesis='{"networkID": 7}',
        node_configs=[
            NodeConfig(
                is_beacon=True,
                impl_specific_config=local_node_config(),
                staking_key=keypair.key_pem,
                staking_cert=keypair.cert_pem,
            ),
            NodeConfig(name="named", impl_specific_config=local_node_config()),
            NodeConfig(impl_specific_config=local_node_config(), config_file='{"http-port": 9000}'),
        ],
    )

    validated = validate_network_config(config)

    assert validated.network_id == 7
    assert validated.names == ["node-0", "named", "node-1"]
    assert validated.node_settings[2].http_port == 9000


def test_empty_network_needs_no_beacon():
    validated = validate_network_config(NetworkConfig(genesis='{"networkID": 7}'))

    assert validated.names == []


def test_generated_name_collision():
    config = NetworkConfig(
        genesis='{"networkID": 7}',
        node_configs=[
            NodeConfig(name="node-0", is_beacon=True, impl_specific_config=local_node_config()),
            NodeConfig(impl_specific_config=local_node_config()),
        ],
    )

    with pytest.raises(ConfigValidationError):
        validate_network_config(config)
