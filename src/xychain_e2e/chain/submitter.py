"""Extrinsic submitter - signs, submits and waits for block inclusion."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from substrateinterface import Keypair

from xychain_e2e.errors import RpcError, SubmissionRejected, SubmissionTimeout
from xychain_e2e.interfaces.stream import StatusStream
from xychain_e2e.models.records import SubmissionResult

log = logging.getLogger(__name__)

# Transaction pool statuses that end the watch without inclusion.
_REJECTED = {"invalid", "dropped", "usurped"}
_INCLUDED = {"inblock", "finalized"}


def parse_status(result: Any) -> tuple[str, Any]:
    """Split a pool status notification into (name, payload).

    Statuses arrive either as bare strings ("ready", "invalid") or as
    single-key objects ({"inBlock": "0x..."}).
    """
    if isinstance(result, str):
        return result, None
    if isinstance(result, dict) and len(result) == 1:
        name, payload = next(iter(result.items()))
        return str(name), payload
    return "unknown", result


def extrinsic_hash_of(extrinsic: Any) -> str:
    value = getattr(extrinsic, "extrinsic_hash", None)
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value) if value else "?"


def describe_call(call: Any) -> str:
    value = getattr(call, "value", call)
    if isinstance(value, dict) and "call_module" in value:
        return f"{value['call_module']}.{value['call_function']}"
    return type(call).__name__


class ExtrinsicSubmitter:
    """Submits signed extrinsics and resolves once they are in a block.

    Every submission's status subscription is cancelled exactly once,
    whether the extrinsic was included, rejected, or timed out.
    """

    def __init__(self, conn: Any, timeout: float = 60.0) -> None:
        self._conn = conn
        self._timeout = timeout

    async def submit(self, call: Any, signer: Keypair,
                     timeout: float | None = None) -> SubmissionResult:
        """Sign `call` with `signer`, submit it and wait for inclusion.

        Raises SubmissionRejected if the pool refuses the extrinsic or it
        fails to dispatch, SubmissionTimeout if it is not in a block within
        `timeout` seconds.
        """
        timeout = self._timeout if timeout is None else timeout
        label = describe_call(call)
        extrinsic = await self._conn.create_signed_extrinsic(call, signer)
        ext_hash = extrinsic_hash_of(extrinsic)
        log.info("Submitting %s signed by %s (%s)", label, signer.ss58_address, ext_hash[:18])
        start = time.monotonic()

        try:
            sub = await self._conn.submit_and_watch(extrinsic)
        except RpcError as exc:
            log.warning("%s refused by the pool: %s", label, exc)
            raise SubmissionRejected(exc.message or str(exc), ext_hash) from exc

        seen: list[str] = []
        try:
            status, block_hash = await asyncio.wait_for(
                self._await_inclusion(sub, ext_hash, seen), timeout
            )
        except asyncio.TimeoutError:
            log.error("%s not included within %ss (%s)", label, timeout, ext_hash[:18])
            raise SubmissionTimeout(timeout, ext_hash, seen[-1] if seen else None) from None
        finally:
            await sub.unsubscribe()

        error = await self._conn.dispatch_error(ext_hash, block_hash)
        if error:
            log.warning("%s failed in block %s: %s", label, block_hash[:18], error)
            raise SubmissionRejected(error, ext_hash, block_hash)

        log.info(
            "%s included in block %s after %.1fs",
            label,
            block_hash[:18],
            time.monotonic() - start,
        )
        return SubmissionResult(extrinsic_hash=ext_hash, block_hash=block_hash, status=status)

    async def _await_inclusion(self, sub: StatusStream, ext_hash: str,
                               seen: list[str]) -> tuple[str, str]:
        while True:
            status, payload = parse_status(await sub.next())
            seen.append(status)
            log.debug("%s status: %s", ext_hash[:18], status)
            key = status.lower()
            if key in _INCLUDED:
                return status, str(payload)
            if key in _REJECTED:
                raise SubmissionRejected(status, ext_hash)
