"""Live node fixtures: a running xy-chain dev node at ws://127.0.0.1:9944."""

from __future__ import annotations

import httpx
import pytest

from xychain_e2e.harness import Harness

from tests.conftest import LOCAL_NODE_URL, make_test_config


@pytest.fixture(scope="session")
def node_available():
    """Check if a local node answers system_health. Skip live tests if not."""
    try:
        r = httpx.post(
            "http://127.0.0.1:9944",
            json={"jsonrpc": "2.0", "id": 1, "method": "system_health", "params": []},
            timeout=3,
        )
        if r.status_code == 200:
            return True
        pytest.skip("xy-chain node not available at localhost:9944")
    except (httpx.ConnectError, httpx.TimeoutException):
        pytest.skip("xy-chain node not available at localhost:9944")


@pytest.fixture
def live_config(node_available):
    return make_test_config(url=LOCAL_NODE_URL, submit_timeout=60.0, request_timeout=30.0)


@pytest.fixture
async def harness(live_config):
    """Connected Harness; disconnects after the test."""
    async with Harness(live_config) as h:
        yield h
