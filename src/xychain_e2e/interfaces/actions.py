"""NftActionAPI protocol - state-changing NFT and POD operations."""

from __future__ import annotations

from typing import Protocol

from substrateinterface import Keypair

from xychain_e2e.models.records import Response, SubmissionResult


class NftActionAPI(Protocol):
    """Submits NFT and POD extrinsics and waits for their inclusion."""

    async def request_mint(self, signer: Keypair, file_name: bytes,
                           data: bytes) -> SubmissionResult:
        ...

    async def approve_nft(self, auditor: Keypair, nft_id: int,
                          response: Response = Response.ACCEPT) -> SubmissionResult:
        ...

    async def create_pod(self, signer: Keypair, to_public_key: bytes | str,
                         nft_id: int, price: int) -> SubmissionResult:
        ...

    async def receive_pod(self, signer: Keypair, pod_id: int,
                          response: Response, tip: int = 0) -> SubmissionResult:
        ...
