"""Typed records decoded from chain state, custom RPC responses and submissions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LockReason(str, Enum):
    """Why a bank fund is locked."""

    STAKE = "Stake"
    REDEEM = "Redeem"
    AUDITOR = "Auditor"


class Response(str, Enum):
    """Runtime `Response` enum used for auditor decisions and POD receipt."""

    ACCEPT = "Accept"
    REJECT = "Reject"


@dataclass(frozen=True)
class RpcLockedFund:
    """A locked fund as returned by `xyChain_account_data`."""

    id: int
    amount: int  # minor units
    reason: LockReason
    unlock_at: int  # block number


@dataclass(frozen=True)
class RpcAccountData:
    """Bank account data as returned by `xyChain_account_data`."""

    free: int
    reserved: int
    locked: list[RpcLockedFund] = field(default_factory=list)


@dataclass(frozen=True)
class RpcNftData:
    """One NFT in a pending POD."""

    pod_id: int
    sender: str  # SS58 address
    nft_id: int
    nft_name: bytes
    expiry_block: int
    price: int  # minor units


@dataclass(frozen=True)
class PendingNftPods:
    """PODs an account is delivering (as NFT owner) or receiving."""

    delivering: list[RpcNftData] = field(default_factory=list)
    receiving: list[RpcNftData] = field(default_factory=list)

    def pod_ids(self) -> tuple[list[int], list[int]]:
        return (
            [p.pod_id for p in self.delivering],
            [p.pod_id for p in self.receiving],
        )


@dataclass(frozen=True)
class NftData:
    """An approved NFT's payload."""

    data: bytes
    file_name: bytes


@dataclass(frozen=True)
class PendingNft:
    """A mint request awaiting an auditor decision."""

    nft_id: int
    data: str  # 0x-prefixed hex, as stored on chain
    file_name: str  # 0x-prefixed hex
    requester: str  # SS58 address


@dataclass
class SubmissionResult:
    """Outcome of a submitted extrinsic that reached a block."""

    extrinsic_hash: str
    block_hash: str
    status: str = "inBlock"


@dataclass
class ScenarioResult:
    """Outcome of one end-to-end scenario."""

    name: str
    passed: bool
    skipped: bool = False
    duration_s: float = 0.0
    error: str | None = None
    steps: list[str] = field(default_factory=list)
