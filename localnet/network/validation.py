"""Validation of network and node configurations."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar

import pydantic

from ..crypto import load_staking_pair
from ..models import (
    ConfigFileOverrides,
    Genesis,
    LocalNodeConfig,
    NetworkConfig,
    NodeConfig,
    NodeSettings,
)
from ..errors import ConfigValidationError
from .names import resolve_node_names

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


@dataclass
class ValidatedNetwork:
    """Result of validating a network config."""
    genesis: Genesis
    names: List[str]
    node_settings: List[NodeSettings] = field(default_factory=list)

    @property
    def network_id(self) -> int:
        return self.genesis.network_id


def _decode_document(raw: Any, what: str, node: Optional[str] = None) -> Dict[str, Any]:
    """Decode a raw JSON document that must be an object."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, (str, bytes, bytearray)):
        raise ConfigValidationError(f"{what} must be a JSON document, got {type(raw).__name__}", node=node)

    try:
        document = json.loads(raw)
    except ValueError as e:
        raise ConfigValidationError(f"couldn't parse {what}: {e}", node=node) from e

    if not isinstance(document, dict):
        raise ConfigValidationError(f"{what} must be a JSON object", node=node)
    return document


def _typed_view(model: Type[ModelT], document: Dict[str, Any], what: str, node: Optional[str] = None) -> ModelT:
    """Decode a document into a strictly-typed view, naming every bad field."""
    try:
        return model.model_validate(document)
    except pydantic.ValidationError as e:
        problems = []
        fields = []
        for error in e.errors():
            name = ".".join(str(part) for part in error["loc"])
            fields.append(name)
            problems.append(f"{name}: {error['msg']}")
        raise ConfigValidationError(
            f"wrong {what} field(s): {'; '.join(problems)}",
            field=fields[0] if fields else None,
            node=node
        ) from e


def parse_genesis(raw: Any) -> Genesis:
    """
    Parse a genesis document and extract its network ID.

    Raises:
        ConfigValidationError: If the genesis is missing, malformed or has no valid network ID
    """
    if not raw:
        raise ConfigValidationError("genesis is missing")
    document = _decode_document(raw, "genesis")
    if "networkID" not in document:
        raise ConfigValidationError("genesis has no networkID", field="networkID")
    return _typed_view(Genesis, document, "genesis")


def _validate_staking(config: NodeConfig, node: Optional[str]) -> None:
    has_key = bool(config.staking_key)
    has_cert = bool(config.staking_cert)
    if has_key and not has_cert:
        raise ConfigValidationError("staking key given without staking cert", field="staking_cert", node=node)
    if has_cert and not has_key:
        raise ConfigValidationError("staking cert given without staking key", field="staking_key", node=node)
    if not has_key:
        return

    try:
        load_staking_pair(config.staking_key, config.staking_cert)
    except ValueError as e:
        raise ConfigValidationError(f"invalid staking key/cert: {e}", node=node) from e


def _validate_name(name: str) -> None:
    """Node names become directory names under the network root."""
    if name in (".", "..") or any(c in name for c in ("/", "\\", "\0")):
        raise ConfigValidationError(f"invalid node name {name!r}", field="name")


def validate_node_config(config: NodeConfig, network_id: int, name: Optional[str] = None) -> NodeSettings:
    """
    Validate a single node config against a network ID.

    Args:
        config: Node config to check
        network_id: Network ID from the genesis
        name: Resolved node name, used in error messages

    Returns:
        NodeSettings decoded from the node's config documents

    Raises:
        ConfigValidationError: On the first problem found
    """
    node = name or config.name or None
    if node:
        _validate_name(node)

    if config.impl_specific_config is None or config.impl_specific_config == "":
        raise ConfigValidationError("implementation-specific config is missing", node=node)
    local = _typed_view(
        LocalNodeConfig,
        _decode_document(config.impl_specific_config, "implementation-specific config", node),
        "implementation-specific config",
        node
    )

    overrides = None
    if config.config_file:
        overrides = _typed_view(
            ConfigFileOverrides,
            _decode_document(config.config_file, "config file", node),
            "config file",
            node
        )

    settings = NodeSettings.merge(local, overrides)
    if settings.network_id is not None and settings.network_id != network_id:
        raise ConfigValidationError(
            f"network ID {settings.network_id} does not match genesis network ID {network_id}",
            field="network-id",
            node=node
        )

    _validate_staking(config, node)
    return settings


def validate_network_config(config: NetworkConfig) -> ValidatedNetwork:
    """
    Validate a network config before any node is started.

    Checks the genesis, every node config, that a non-empty network has a
    beacon, and that resolved node names are unique.

    Raises:
        ConfigValidationError: On the first problem found
    """
    genesis = parse_genesis(config.genesis)
    names = resolve_node_names(config.node_configs)

    node_settings = [
        validate_node_config(node_config, genesis.network_id, name)
        for node_config, name in zip(config.node_configs, names)
    ]

    if config.node_configs and not any(c.is_beacon for c in config.node_configs):
        raise ConfigValidationError("network has no beacon node")

    seen = set()
    for name in names:
        if name in seen:
            raise ConfigValidationError(f"repeated node name {name!r}", field="name")
        seen.add(name)

    return ValidatedNetwork(genesis=genesis, names=names, node_settings=node_settings)
