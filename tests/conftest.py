"""Shared fixtures for xychain_e2e tests."""

from __future__ import annotations

import pytest
from aiohttp import web
from pytest_metadata.plugin import metadata_key

from xychain_e2e.identities import dev_accounts
from xychain_e2e.models.config import HarnessConfig
from xychain_e2e.scenarios import ScenarioContext

from tests.mocks import FakeChain, FakeNode

LOCAL_NODE_URL = "ws://127.0.0.1:9944"


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add node info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Node"] = LOCAL_NODE_URL
    meta["SS58 format"] = "42"
    meta["Auditor"] = "//Bob"


def make_test_config(**overrides) -> HarnessConfig:
    """Build a HarnessConfig suitable for testing."""
    defaults = dict(
        url=LOCAL_NODE_URL,
        ss58_format=42,
        connect_timeout=2.0,
        request_timeout=2.0,
        submit_timeout=2.0,
        payload_path="",
        output_path="",
    )
    defaults.update(overrides)
    return HarnessConfig(**defaults)


@pytest.fixture
def test_config():
    """Default HarnessConfig for tests."""
    return make_test_config()


@pytest.fixture(scope="session")
def accounts():
    return dev_accounts(42)


@pytest.fixture
def fake_chain(accounts):
    return FakeChain(accounts)


@pytest.fixture
def scenario_ctx(fake_chain, accounts, test_config):
    """ScenarioContext wired to the in-memory chain."""
    return ScenarioContext(
        queries=fake_chain,
        actions=fake_chain,
        accounts=accounts,
        cfg=test_config,
    )


@pytest.fixture
async def fake_node():
    """A local WebSocket JSON-RPC endpoint. Returns the FakeNode; its url is set."""
    node = FakeNode()
    app = web.Application()
    app.router.add_get("/", node.handle)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    node.url = f"ws://{host}:{port}/"
    yield node
    await runner.cleanup()
