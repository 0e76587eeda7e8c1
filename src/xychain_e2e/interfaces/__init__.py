"""Protocol interfaces for the scenario-facing components."""

from xychain_e2e.interfaces.actions import NftActionAPI
from xychain_e2e.interfaces.queries import NftQueryAPI
from xychain_e2e.interfaces.stream import StatusStream

__all__ = ["NftActionAPI", "NftQueryAPI", "StatusStream"]
