"""End-to-end scenarios driven against a running node."""

from xychain_e2e.scenarios import nft_download, nft_pod
from xychain_e2e.scenarios.base import (
    Scenario,
    ScenarioContext,
    ScenarioRunner,
    ScenarioSkipped,
)

SCENARIOS: dict[str, Scenario] = {
    "nft_pod": nft_pod.run,
    "nft_download": nft_download.run,
}

__all__ = [
    "SCENARIOS", "Scenario", "ScenarioContext", "ScenarioRunner", "ScenarioSkipped",
]
