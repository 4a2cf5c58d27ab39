"""Node API clients used by the network runner."""

import logging
from typing import Callable, Optional, Protocol

import requests

logger = logging.getLogger(__name__)


class APIClient(Protocol):
    """What the runner needs from a node API client."""

    def check_health(self) -> bool:
        """Return True if the node reports itself healthy."""
        ...

    def close(self) -> None:
        """Release any resources held by the client. Must be idempotent."""
        ...


APIClientFactory = Callable[[str, int, float], APIClient]


class HTTPAPIClient:
    """
    JSON-RPC client for a node's HTTP API.

    Keeps one persistent session per node so repeated health polls reuse
    the same connection.
    """

    def __init__(self, address: str, port: int, timeout: float = 10.0):
        """
        Initialize API client.

        Args:
            address: Node address (e.g., 127.0.0.1)
            port: Node HTTP port
            timeout: Per-request timeout in seconds
        """
        self.address = address
        self.port = port
        self.timeout = timeout
        self.base_url = f"http://{address}:{port}"
        self._session: Optional[requests.Session] = requests.Session()
        self._request_id = 0

    def call(self, endpoint: str, method: str, params: Optional[dict] = None) -> dict:
        """
        Issue a JSON-RPC call.

        Args:
            endpoint: API path (e.g., /ext/health)
            method: JSON-RPC method name
            params: Method parameters

        Returns:
            The ``result`` member of the reply

        Raises:
            requests.RequestException: On transport or HTTP errors
            RuntimeError: If the client is closed or the reply carries an error
        """
        if self._session is None:
            raise RuntimeError(f"API client for {self.base_url} is closed")

        self._request_id += 1
        response = self._session.post(
            f"{self.base_url}{endpoint}",
            json={
                "jsonrpc": "2.0",
                "id": self._request_id,
                "method": method,
                "params": params or {},
            },
            timeout=self.timeout
        )
        response.raise_for_status()

        reply = response.json()
        if reply.get("error"):
            raise RuntimeError(f"{method} failed: {reply['error']}")
        return reply.get("result", {})

    def check_health(self) -> bool:
        """Ask the node's health API whether it is healthy."""
        result = self.call("/ext/health", "health.health")
        return bool(result.get("healthy", False))

    def close(self) -> None:
        """Close the underlying session."""
        if self._session is None:
            return
        self._session.close()
        self._session = None
        logger.debug(f"Closed API client for {self.base_url}")


def new_api_client(address: str, port: int, timeout: float) -> APIClient:
    """Default API client factory."""
    return HTTPAPIClient(address, port, timeout)
