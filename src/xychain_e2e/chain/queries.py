"""Read-only NFT, POD and bank queries against the node."""

from __future__ import annotations

from typing import Any

from xychain_e2e.chain.connection import ChainConnection
from xychain_e2e.errors import DecodeError
from xychain_e2e.models.records import (
    NftData,
    PendingNft,
    PendingNftPods,
    RpcAccountData,
)
from xychain_e2e.utils import bytes_to_hex, normalize_account, public_key_to_address

NFT_PALLET = "Nft"
BANK_PALLET = "Bank"


def _as_hex(value: Any) -> str:
    if isinstance(value, str):
        return value if value[:2] in ("0x", "0X") else bytes_to_hex(value.encode("utf-8"))
    return bytes_to_hex(value)


class ChainQueries:
    """Typed reads over storage, constants and the custom RPC surface."""

    def __init__(self, conn: ChainConnection) -> None:
        self._conn = conn

    def _address(self, who: str | bytes) -> str:
        if isinstance(who, (bytes, bytearray)):
            return public_key_to_address(who, self._conn.ss58_format)
        return normalize_account(who, self._conn.ss58_format)

    # ── Storage ────────────────────────────────────────────

    async def next_nft_id(self) -> int:
        """The id the next mint request will be assigned."""
        return int(await self._conn.query(NFT_PALLET, "NextNftId") or 0) + 1

    async def next_pod_id(self) -> int:
        """The id the next POD will be assigned."""
        return int(await self._conn.query(NFT_PALLET, "NextPodId") or 0) + 1

    async def pending_nft(self, nft_id: int) -> PendingNft | None:
        raw = await self._conn.query(NFT_PALLET, "PendingNft", [nft_id])
        if raw is None:
            return None
        try:
            nft, requester = raw
            return PendingNft(
                nft_id=nft_id,
                data=_as_hex(nft["data"]),
                file_name=_as_hex(nft["file_name"]),
                requester=self._address(requester),
            )
        except (TypeError, ValueError, KeyError) as exc:
            raise DecodeError(f"PendingNft({nft_id}): unexpected value {raw!r}") from exc

    async def owner(self, nft_id: int) -> str | None:
        raw = await self._conn.query(NFT_PALLET, "Owners", [nft_id])
        return None if raw is None else self._address(raw)

    async def free_balance(self, who: str | bytes) -> int:
        raw = await self._conn.query(BANK_PALLET, "Accounts", [self._address(who)])
        if not isinstance(raw, dict) or "free" not in raw:
            raise DecodeError(f"Bank.Accounts: unexpected value {raw!r}")
        return int(raw["free"])

    async def pod_fee(self) -> int:
        return int(await self._conn.constant(NFT_PALLET, "PodFee"))

    # ── Custom RPC ─────────────────────────────────────────

    async def account_data(self, who: str | bytes) -> RpcAccountData:
        return await self._conn.rpc("account_data", self._address(who))

    async def interest_pa(self, who: str | bytes) -> int:
        return await self._conn.rpc("interest_pa", self._address(who))

    async def pending_pods(self, who: str | bytes) -> PendingNftPods:
        return await self._conn.rpc("pending_pods", self._address(who))

    async def nft_data(self, nft_id: int) -> NftData | None:
        return await self._conn.rpc("nft_data", nft_id)
