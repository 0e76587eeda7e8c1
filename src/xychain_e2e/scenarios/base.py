"""Scenario plumbing: shared context, expectation helpers and the runner."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Container

from substrateinterface import Keypair

from xychain_e2e.errors import (
    AssertionFailure,
    ChainConnectionError,
    HarnessError,
)
from xychain_e2e.identities import AUDITOR_URI
from xychain_e2e.interfaces.actions import NftActionAPI
from xychain_e2e.interfaces.queries import NftQueryAPI
from xychain_e2e.models.config import HarnessConfig
from xychain_e2e.models.records import ScenarioResult

log = logging.getLogger(__name__)


class ScenarioSkipped(HarnessError):
    """A scenario cannot run in the current configuration."""


@dataclass
class ScenarioContext:
    """Everything a scenario needs to drive and observe the chain."""

    queries: NftQueryAPI
    actions: NftActionAPI
    accounts: dict[str, Keypair]
    cfg: HarnessConfig
    steps: list[str] = field(default_factory=list)

    def account(self, name: str) -> Keypair:
        return self.accounts[name.lstrip("/").lower()]

    @property
    def auditor(self) -> Keypair:
        return self.account(AUDITOR_URI)

    def step(self, message: str, *args: Any) -> None:
        text = message % args if args else message
        self.steps.append(text)
        log.info("  %s", text)


Scenario = Callable[[ScenarioContext], Awaitable[None]]


# ── Expectations ───────────────────────────────────────


def expect_equal(label: str, expected: Any, actual: Any) -> None:
    if expected != actual:
        raise AssertionFailure(label, expected, actual)


def expect_in(label: str, item: Any, container: Container[Any]) -> None:
    if item not in container:
        raise AssertionFailure(label, f"{item!r} in collection", container)


def expect_not_in(label: str, item: Any, container: Container[Any]) -> None:
    if item in container:
        raise AssertionFailure(label, f"{item!r} absent", container)


# ── Runner ─────────────────────────────────────────────


class ScenarioRunner:
    """Runs independent scenarios and records one result per scenario.

    Any error inside a scenario, a failed expectation or a rejected
    extrinsic included, fails only that scenario. A lost connection aborts
    the run.
    """

    def __init__(self, ctx: ScenarioContext, scenarios: dict[str, Scenario]) -> None:
        self._ctx = ctx
        self._scenarios = scenarios

    async def run(self, names: list[str] | None = None) -> list[ScenarioResult]:
        names = names or list(self._scenarios)
        unknown = [n for n in names if n not in self._scenarios]
        if unknown:
            raise KeyError(f"unknown scenario(s): {', '.join(unknown)}")

        results = []
        for name in names:
            results.append(await self.run_one(name))
        passed = sum(1 for r in results if r.passed)
        log.info("Scenarios: %d/%d passed", passed, len(results))
        return results

    async def run_one(self, name: str) -> ScenarioResult:
        result = ScenarioResult(name=name, passed=False)
        self._ctx.steps = result.steps
        log.info("Scenario %s: starting", name)
        start = time.monotonic()
        try:
            await self._scenarios[name](self._ctx)
        except ChainConnectionError:
            log.error("Scenario %s: connection lost, aborting run", name)
            raise
        except ScenarioSkipped as exc:
            result.passed = True
            result.skipped = True
            result.error = str(exc)
            log.warning("Scenario %s: skipped (%s)", name, exc)
        except (HarnessError, AssertionError) as exc:
            result.error = f"{type(exc).__name__}: {exc}"
            log.error("Scenario %s: FAILED %s", name, result.error)
        except Exception as exc:
            result.error = f"{type(exc).__name__}: {exc}"
            log.error("Scenario %s: FAILED %s", name, result.error, exc_info=True)
        else:
            result.passed = True
            log.info("Scenario %s: passed", name)
        finally:
            result.duration_s = time.monotonic() - start
        return result
