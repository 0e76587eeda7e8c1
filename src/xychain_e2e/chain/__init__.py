"""Node connection, submission and typed query/action components."""

from xychain_e2e.chain.actions import NftActions
from xychain_e2e.chain.connection import ChainConnection
from xychain_e2e.chain.queries import ChainQueries
from xychain_e2e.chain.schema import CUSTOM_RPC, CUSTOM_TYPES, RpcSchema
from xychain_e2e.chain.submitter import ExtrinsicSubmitter
from xychain_e2e.chain.transport import Subscription, WsRpcTransport

__all__ = [
    "ChainConnection", "ChainQueries", "NftActions", "ExtrinsicSubmitter",
    "RpcSchema", "CUSTOM_RPC", "CUSTOM_TYPES",
    "Subscription", "WsRpcTransport",
]
