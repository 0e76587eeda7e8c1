"""Wires the connection, submitter, queries and actions together."""

from __future__ import annotations

import logging

from xychain_e2e.chain.actions import NftActions
from xychain_e2e.chain.connection import ChainConnection
from xychain_e2e.chain.queries import ChainQueries
from xychain_e2e.chain.schema import RpcSchema
from xychain_e2e.chain.submitter import ExtrinsicSubmitter
from xychain_e2e.identities import dev_accounts
from xychain_e2e.models.config import HarnessConfig
from xychain_e2e.models.records import ScenarioResult
from xychain_e2e.scenarios import SCENARIOS, ScenarioContext, ScenarioRunner

log = logging.getLogger(__name__)


class Harness:
    """One connection plus the components built on it.

    Usage:
        async with Harness(cfg) as h:
            owner = await h.queries.owner(1)
    """

    def __init__(self, cfg: HarnessConfig, schema: RpcSchema | None = None) -> None:
        self._cfg = cfg
        self.conn = ChainConnection(cfg, schema)
        self.submitter = ExtrinsicSubmitter(self.conn, timeout=cfg.submit_timeout)
        self.queries = ChainQueries(self.conn)
        self.actions = NftActions(self.conn, self.submitter)
        self.accounts = dev_accounts(cfg.ss58_format)

    async def __aenter__(self) -> Harness:
        await self.conn.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.conn.close()

    def scenario_context(self) -> ScenarioContext:
        return ScenarioContext(
            queries=self.queries,
            actions=self.actions,
            accounts=self.accounts,
            cfg=self._cfg,
        )


async def run_scenarios(cfg: HarnessConfig, names: list[str] | None = None) -> list[ScenarioResult]:
    """Connect, run the named scenarios (default: configured ones), disconnect."""
    names = names or cfg.scenarios
    log.info("Running %s against %s", ", ".join(names), cfg.url)
    async with Harness(cfg) as harness:
        runner = ScenarioRunner(harness.scenario_context(), SCENARIOS)
        return await runner.run(names)
