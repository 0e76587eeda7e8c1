"""Exception taxonomy for the harness and the scenarios built on it."""

from __future__ import annotations

from typing import Any


class HarnessError(Exception):
    """Base class for every error raised by xychain_e2e."""


class ChainConnectionError(HarnessError, ConnectionError):
    """Transport or schema failure. Fatal for the whole run, never retried."""


class RpcError(HarnessError):
    """A JSON-RPC error object returned by the node."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        text = f"RPC error {code}: {message}"
        if data is not None:
            text += f" ({data})"
        super().__init__(text)

    @classmethod
    def from_payload(cls, payload: Any) -> RpcError:
        if isinstance(payload, dict):
            return cls(
                int(payload.get("code", 0)),
                str(payload.get("message", "")),
                payload.get("data"),
            )
        return cls(0, str(payload))


class SubmissionRejected(HarnessError):
    """The node refused the extrinsic, or it was included but failed to dispatch."""

    def __init__(self, reason: str, extrinsic_hash: str | None = None,
                 block_hash: str | None = None) -> None:
        self.reason = reason
        self.extrinsic_hash = extrinsic_hash
        self.block_hash = block_hash
        super().__init__(f"extrinsic rejected: {reason}")


class SubmissionTimeout(HarnessError):
    """The extrinsic was not seen in a block within the bounded wait."""

    def __init__(self, timeout: float, extrinsic_hash: str | None = None,
                 last_status: str | None = None) -> None:
        self.timeout = timeout
        self.extrinsic_hash = extrinsic_hash
        self.last_status = last_status
        super().__init__(
            f"extrinsic {extrinsic_hash or '?'} not included within {timeout}s "
            f"(last status: {last_status or 'none'})"
        )


class DecodeError(HarnessError, ValueError):
    """Malformed hex, byte payload or RPC response."""


class PayloadError(HarnessError):
    """A payload file could not be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class AssertionFailure(HarnessError, AssertionError):
    """Expected-vs-actual mismatch inside a scenario."""

    def __init__(self, label: str, expected: Any, actual: Any) -> None:
        self.label = label
        self.expected = expected
        self.actual = actual
        super().__init__(f"{label}: expected {expected!r}, got {actual!r}")
