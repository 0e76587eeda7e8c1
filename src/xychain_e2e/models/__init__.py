"""Data models for xychain_e2e."""

from xychain_e2e.models.config import DEFAULT_SCENARIOS, HarnessConfig
from xychain_e2e.models.records import (
    LockReason,
    NftData,
    PendingNft,
    PendingNftPods,
    Response,
    RpcAccountData,
    RpcLockedFund,
    RpcNftData,
    ScenarioResult,
    SubmissionResult,
)

__all__ = [
    "DEFAULT_SCENARIOS", "HarnessConfig",
    "LockReason", "Response",
    "RpcAccountData", "RpcLockedFund", "RpcNftData", "PendingNftPods",
    "NftData", "PendingNft",
    "SubmissionResult", "ScenarioResult",
]
