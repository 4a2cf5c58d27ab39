"""Runtime representation of a started node."""

import time
from dataclasses import dataclass, field
from pathlib import Path

from ..api import APIClient
from ..models import NodeConfig, NodeSettings
from ..process import NodeProcess


@dataclass
class Node:
    """
    A node registered in a running network.

    The process handle and the API client belong to this node alone and
    are released when it is removed or the network stops. Callers must
    not change the identity fields.
    """
    name: str
    node_id: str
    config: NodeConfig
    settings: NodeSettings
    process: NodeProcess
    client: APIClient
    http_port: int
    staking_port: int
    data_dir: Path
    address: str = "127.0.0.1"
    started_at: float = field(default_factory=time.time)

    @property
    def is_beacon(self) -> bool:
        return self.config.is_beacon

    @property
    def staking_endpoint(self) -> str:
        """Address other nodes bootstrap from (host:port)."""
        return f"{self.address}:{self.staking_port}"

    @property
    def api_url(self) -> str:
        return f"http://{self.address}:{self.http_port}"

    def get_status(self) -> dict:
        """
        Get node status information.

        Returns:
            Dictionary with node status
        """
        return {
            "name": self.name,
            "node_id": self.node_id,
            "is_beacon": self.is_beacon,
            "api_url": self.api_url,
            "staking_endpoint": self.staking_endpoint,
            "data_dir": str(self.data_dir),
            "uptime": round(time.time() - self.started_at, 1),
        }
