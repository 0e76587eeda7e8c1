"""State-changing NFT and POD calls, each submitted and awaited."""

from __future__ import annotations

import logging
from typing import Any

from substrateinterface import Keypair

from xychain_e2e.chain.connection import ChainConnection
from xychain_e2e.chain.submitter import ExtrinsicSubmitter
from xychain_e2e.models.records import Response, SubmissionResult
from xychain_e2e.utils import bytes_to_hex, public_key_to_address

log = logging.getLogger(__name__)

NFT_PALLET = "Nft"


class NftActions:
    """Builds `Nft` pallet calls and submits them through an ExtrinsicSubmitter."""

    def __init__(self, conn: ChainConnection, submitter: ExtrinsicSubmitter) -> None:
        self._conn = conn
        self._submitter = submitter

    async def _send(self, signer: Keypair, function: str,
                    params: dict[str, Any]) -> SubmissionResult:
        call = await self._conn.compose_call(NFT_PALLET, function, params)
        return await self._submitter.submit(call, signer)

    async def request_mint(self, signer: Keypair, file_name: bytes,
                           data: bytes) -> SubmissionResult:
        """Ask an auditor to mint `data` under `file_name`."""
        log.info("request_mint %s (%d bytes)", file_name[:32], len(data))
        return await self._send(signer, "request_mint", {
            "file_name": bytes_to_hex(file_name),
            "data": bytes_to_hex(data),
        })

    async def approve_nft(self, auditor: Keypair, nft_id: int,
                          response: Response = Response.ACCEPT) -> SubmissionResult:
        return await self._send(auditor, "approve_nft", {
            "nft_id": nft_id,
            "response": Response(response).value,
        })

    async def create_pod(self, signer: Keypair, to_public_key: bytes | str,
                         nft_id: int, price: int) -> SubmissionResult:
        """Offer `nft_id` to another account for `price` minor units."""
        to_user = (
            to_public_key if isinstance(to_public_key, str)
            else public_key_to_address(to_public_key, self._conn.ss58_format)
        )
        return await self._send(signer, "create_pod", {
            "to_user": to_user,
            "nft_id": nft_id,
            "price": price,
        })

    async def receive_pod(self, signer: Keypair, pod_id: int,
                          response: Response, tip: int = 0) -> SubmissionResult:
        """Accept (paying price + tip) or reject a POD addressed to the signer."""
        return await self._send(signer, "receive_pod", {
            "pod_id": pod_id,
            "response": Response(response).value,
            "tips": tip,
        })
