"""Network and node configuration models."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


class NodeConfig(BaseModel):
    """
    Configuration for a single node, before it is started.

    The name may be left empty, in which case the runner generates one.
    The staking key and certificate are PEM-armored and must be given
    together or not at all.
    """
    name: str = Field("", description="Unique node name (generated when empty)")
    is_beacon: bool = Field(False, description="Whether other nodes bootstrap from this node")
    staking_key: str = Field("", description="PEM-armored staking private key")
    staking_cert: str = Field("", description="PEM-armored staking certificate")
    impl_specific_config: Optional[Any] = Field(
        None,
        description="Raw JSON document with implementation-specific settings"
    )
    config_file: str = Field("", description="Raw JSON config file overriding derived settings")
    flags: Dict[str, Any] = Field(
        default_factory=dict,
        description="Node-level command line flags"
    )


class NetworkConfig(BaseModel):
    """
    Configuration for a whole local network.

    An empty list of node configs is valid. A non-empty one needs at
    least one beacon node.
    """
    name: str = Field("", description="Human readable network name")
    genesis: str = Field("", description="Raw genesis JSON document")
    node_configs: List[NodeConfig] = Field(
        default_factory=list,
        description="Nodes to start, in order"
    )
    flags: Dict[str, Any] = Field(
        default_factory=dict,
        description="Network-wide default flags"
    )
    log_level: str = Field("INFO", description="Log level for the node processes")

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "NetworkConfig":
        """Load a network config from a JSON file."""
        with open(path, 'r') as f:
            return cls(**json.load(f))

    def to_file(self, path: Union[str, Path]) -> Path:
        """Write the network config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.model_dump(mode='json'), f, indent=2)
        return path


class RunnerSettings(BaseModel):
    """Tunables for the network runner."""
    health_check_interval: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between health polling rounds"
    )
    api_request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Per-request timeout for node API clients"
    )
    stop_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for a node to exit before killing it"
    )
    root_dir: Optional[Path] = Field(
        None,
        description="Directory holding node data (temporary directory when unset)"
    )
    bind_address: str = Field(default="127.0.0.1", description="Address nodes listen on")
