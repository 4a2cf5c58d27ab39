"""Tests for health aggregation."""

import asyncio
import contextvars

import pytest
from localnet.errors import HealthTimeoutError, NetworkStoppedError
from localnet.network import HealthAggregator, HealthStatus
from localnet.network.health import unhealthy_nodes

from conftest import FakeClient


class RaisingClient(FakeClient):
    def check_health(self):
        self.checks += 1
        raise ConnectionError("connection refused")


def aggregator_for(clients, interval=0.01):
    async def get_clients():
        return dict(clients)
    return HealthAggregator(get_clients, interval=interval)


@pytest.mark.asyncio
async def test_check_all():
    """Test that one round reports every node's status."""
    aggregator = aggregator_for({
        "node-0": FakeClient("127.0.0.1", 1),
        "node-1": FakeClient("127.0.0.1", 2, healthy=False),
        "node-2": RaisingClient("127.0.0.1", 3),
    })

    results = await aggregator.check_all()

    assert results == {
        "node-0": HealthStatus.HEALTHY,
        "node-1": HealthStatus.UNHEALTHY,
        "node-2": HealthStatus.UNKNOWN,
    }
    assert unhealthy_nodes(results) == ["node-1", "node-2"]


@pytest.mark.asyncio
async def test_await_healthy_with_no_nodes():
    calls = []

    async def get_clients():
        calls.append(1)
        return {}

    await HealthAggregator(get_clients, interval=0.01).await_healthy(1.0)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_await_healthy_after_recovery():
    """A node that turns healthy ends the wait on the next round."""
    client = FakeClient("127.0.0.1", 1, healthy=False)
    aggregator = aggregator_for({"node-0": client})

    task = asyncio.create_task(aggregator.await_healthy(5.0))
    await asyncio.sleep(0.05)
    assert not task.done()

    client.healthy = True
    await task

    assert client.checks >= 2


@pytest.mark.asyncio
async def test_await_healthy_timeout_names_nodes():
    aggregator = aggregator_for({
        "node-0": FakeClient("127.0.0.1", 1),
        "node-1": FakeClient("127.0.0.1", 2, healthy=False),
    })

    with pytest.raises(HealthTimeoutError) as exc_info:
        await aggregator.await_healthy(0.2)

    assert "node-1" in str(exc_info.value)
    assert "node-0" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_snapshot_error_aborts_polling():
    async def get_clients():
        raise NetworkStoppedError()

    aggregator = HealthAggregator(get_clients, interval=0.01)

    with pytest.raises(NetworkStoppedError):
        await aggregator.await_healthy(1.0)


@pytest.mark.asyncio
async def test_concurrent_waits_report_their_own_nodes():
    """A timed out wait names its own unhealthy nodes, not another wait's."""
    scope = contextvars.ContextVar("scope")

    async def get_clients():
        name = f"node-{scope.get()}"
        return {name: FakeClient("127.0.0.1", 1, healthy=False)}

    aggregator = HealthAggregator(get_clients, interval=0.01)

    async def wait_as(name, timeout):
        scope.set(name)
        await aggregator.await_healthy(timeout)

    other = asyncio.create_task(wait_as("b", 5.0))
    await asyncio.sleep(0.05)

    with pytest.raises(HealthTimeoutError) as exc_info:
        await wait_as("a", 0.2)

    assert "node-a" in str(exc_info.value)
    assert "node-b" not in str(exc_info.value)

    other.cancel()
    with pytest.raises(asyncio.CancelledError):
        await other
