"""NftQueryAPI protocol - typed chain reads used by the scenarios."""

from __future__ import annotations

from typing import Protocol

from xychain_e2e.models.records import (
    NftData,
    PendingNft,
    PendingNftPods,
    RpcAccountData,
)


class NftQueryAPI(Protocol):
    """Reads NFT, POD and bank state from the node."""

    async def next_nft_id(self) -> int:
        ...

    async def next_pod_id(self) -> int:
        ...

    async def pending_nft(self, nft_id: int) -> PendingNft | None:
        ...

    async def owner(self, nft_id: int) -> str | None:
        """SS58 address of the NFT owner, None if not minted."""
        ...

    async def free_balance(self, who: str | bytes) -> int:
        ...

    async def pod_fee(self) -> int:
        ...

    async def account_data(self, who: str | bytes) -> RpcAccountData:
        ...

    async def interest_pa(self, who: str | bytes) -> int:
        ...

    async def pending_pods(self, who: str | bytes) -> PendingNftPods:
        ...

    async def nft_data(self, nft_id: int) -> NftData | None:
        ...
