"""Cluster health aggregation."""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from ..api import APIClient
from ..errors import HealthTimeoutError


logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Node health status."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


def unhealthy_nodes(results: Dict[str, HealthStatus]) -> List[str]:
    """Names of nodes that were not healthy in a round."""
    return [name for name, status in results.items() if status != HealthStatus.HEALTHY]


class HealthAggregator:
    """
    Polls every node's API client and reduces the answers to one signal.

    Each round takes a fresh snapshot of the registered clients, checks
    them all concurrently and waits for every check to return. Nodes added
    during a round are picked up by the next one.
    """

    def __init__(
        self,
        get_clients: Callable[[], Awaitable[Dict[str, APIClient]]],
        interval: float = 1.0,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize health aggregator.

        Args:
            get_clients: Coroutine function returning the current name -> client map;
                may raise to abort polling (e.g. once the network is stopped)
            interval: Seconds to sleep between polling rounds
            log: Logger to report progress to
        """
        self.get_clients = get_clients
        self.interval = interval
        self.log = log or logger

    async def _check_node(self, name: str, client: APIClient) -> HealthStatus:
        """Run one node's blocking health check in a worker thread."""
        try:
            healthy = await asyncio.to_thread(client.check_health)
        except Exception as e:
            self.log.debug(f"Health check of {name} failed: {e}")
            return HealthStatus.UNKNOWN
        return HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY

    async def check_all(self) -> Dict[str, HealthStatus]:
        """
        Run one polling round.

        Returns:
            Health status of every node in the snapshot
        """
        clients = await self.get_clients()
        names = list(clients)
        statuses = await asyncio.gather(*(self._check_node(name, clients[name]) for name in names))
        return dict(zip(names, statuses))

    async def _poll(self, results: Dict[str, HealthStatus]):
        """Poll until healthy, keeping the latest round in ``results``."""
        rounds = 0
        while True:
            statuses = await self.check_all()
            rounds += 1
            results.clear()
            results.update(statuses)

            unhealthy = unhealthy_nodes(results)
            if not unhealthy:
                self.log.info(f"All {len(results)} node(s) healthy after {rounds} round(s)")
                return

            self.log.debug(f"Waiting on {len(unhealthy)} node(s): {', '.join(unhealthy)}")
            await asyncio.sleep(self.interval)

    async def await_healthy(self, timeout: Optional[float] = None):
        """
        Wait until every node reports healthy.

        Concurrent calls poll independently.

        Args:
            timeout: Seconds to wait before giving up (None waits forever)

        Raises:
            HealthTimeoutError: If the timeout elapses first
        """
        results: Dict[str, HealthStatus] = {}
        try:
            await asyncio.wait_for(self._poll(results), timeout=timeout)
        except asyncio.TimeoutError as e:
            unhealthy = unhealthy_nodes(results)
            raise HealthTimeoutError(
                f"network not healthy after {timeout}s "
                f"(unhealthy: {', '.join(unhealthy) or 'unknown'})"
            ) from e
