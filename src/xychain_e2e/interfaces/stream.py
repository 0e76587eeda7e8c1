"""StatusStream protocol - a cancellable stream of extrinsic status updates."""

from __future__ import annotations

from typing import Any, Protocol


class StatusStream(Protocol):
    """What ExtrinsicSubmitter needs from a status subscription."""

    async def next(self) -> Any:
        """Wait for the next status notification."""
        ...

    async def unsubscribe(self) -> bool:
        """Cancel on the node. Returns False if already cancelled."""
        ...
