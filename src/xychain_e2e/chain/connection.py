"""Ready-to-use, schema-aware connection to an xy-chain node."""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import logging
from typing import Any, Callable, TypeVar

from substrateinterface import ExtrinsicReceipt, Keypair, SubstrateInterface
from substrateinterface.exceptions import ExtrinsicNotFound, SubstrateRequestException

from xychain_e2e.chain.schema import RpcSchema
from xychain_e2e.chain.transport import Subscription, WsRpcTransport
from xychain_e2e.errors import ChainConnectionError, DecodeError, RpcError
from xychain_e2e.models.config import HarnessConfig

log = logging.getLogger(__name__)

T = TypeVar("T")


class _SubstrateBridge(SubstrateInterface):
    """SubstrateInterface whose RPC traffic goes through `WsRpcTransport`.

    Metadata decoding, call composition, signing and storage decoding run in
    a worker thread; each RPC they need is scheduled back onto the event
    loop that owns the socket.
    """

    def __init__(self, transport: WsRpcTransport, loop: asyncio.AbstractEventLoop,
                 bridge_timeout: float, **kwargs: Any) -> None:
        self.rpc_transport = transport
        self.rpc_loop = loop
        self.bridge_timeout = bridge_timeout
        super().__init__(**kwargs)

    def connect_websocket(self) -> None:
        # The socket belongs to WsRpcTransport.
        pass

    def rpc_request(self, method, params, result_handler=None):
        if result_handler is not None:
            raise ChainConnectionError("subscriptions are not routed through the bridge")
        future = asyncio.run_coroutine_threadsafe(
            self.rpc_transport.request(method, params), self.rpc_loop
        )
        try:
            result = future.result(self.bridge_timeout)
        except RpcError as exc:
            raise SubstrateRequestException(
                {"code": exc.code, "message": exc.message, "data": exc.data}
            ) from exc
        except concurrent.futures.TimeoutError as exc:
            future.cancel()
            raise ChainConnectionError(
                f"{method}: no response within {self.bridge_timeout}s"
            ) from exc
        return {"jsonrpc": "2.0", "result": result}


class ChainConnection:
    """An explicitly opened, explicitly closed connection to the node.

    Capabilities:
        - state queries: `query()`, `constant()`
        - transaction construction: `compose_call()`, `create_signed_extrinsic()`
        - custom remote calls declared in the schema: `rpc()`

    Use as `async with await ChainConnection.open(cfg) as conn:` or call
    `connect()` / `close()` yourself.
    """

    def __init__(self, cfg: HarnessConfig, schema: RpcSchema | None = None,
                 transport: WsRpcTransport | None = None) -> None:
        self._cfg = cfg
        self.schema = schema or RpcSchema(ss58_format=cfg.ss58_format)
        self.transport = transport or WsRpcTransport(
            cfg.url,
            request_timeout=cfg.request_timeout,
            connect_timeout=cfg.connect_timeout,
        )
        self._substrate: _SubstrateBridge | None = None
        self._lock = asyncio.Lock()
        self.rpc_methods: set[str] = set()

    @classmethod
    async def open(cls, cfg: HarnessConfig, schema: RpcSchema | None = None) -> ChainConnection:
        conn = cls(cfg, schema)
        await conn.connect()
        return conn

    async def __aenter__(self) -> ChainConnection:
        if not self.ready:
            await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def ready(self) -> bool:
        return self._substrate is not None and self.transport.connected

    @property
    def ss58_format(self) -> int:
        return self._cfg.ss58_format

    @property
    def substrate(self) -> SubstrateInterface:
        if self._substrate is None:
            raise ChainConnectionError("connection is not open")
        return self._substrate

    # ── Lifecycle ──────────────────────────────────────────

    async def connect(self) -> None:
        """Open the socket, check the custom RPC surface, load runtime metadata.

        Returns once the connection is ready. Any failure closes the socket
        and raises ChainConnectionError.
        """
        await self.transport.connect()
        try:
            await self._check_schema()
            loop = asyncio.get_running_loop()
            self._substrate = await asyncio.to_thread(
                _SubstrateBridge,
                self.transport,
                loop,
                self._cfg.request_timeout,
                url=self._cfg.url,
                ss58_format=self._cfg.ss58_format,
                auto_discover=False,
            )
            await self._in_worker(self._substrate.init_runtime)
        except ChainConnectionError:
            await self.close()
            raise
        except (RpcError, SubstrateRequestException, asyncio.TimeoutError, ValueError) as exc:
            await self.close()
            raise ChainConnectionError(f"handshake with {self._cfg.url} failed: {exc}") from exc

        log.info(
            "Node ready: %s (spec %s, ss58 %d)",
            self._cfg.url,
            getattr(self._substrate, "runtime_version", "?"),
            self._cfg.ss58_format,
        )

    async def _check_schema(self) -> None:
        result = await self.transport.request("rpc_methods")
        methods = result.get("methods", []) if isinstance(result, dict) else []
        self.rpc_methods = set(methods)
        missing = [m for m in self.schema.required_wire_names() if m not in self.rpc_methods]
        if missing:
            raise ChainConnectionError(
                f"node at {self._cfg.url} does not expose {', '.join(sorted(missing))}"
            )
        log.debug("Custom RPC surface verified (%d methods)", len(self.rpc_methods))

    async def close(self) -> None:
        self._substrate = None
        await self.transport.close()

    async def _in_worker(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking substrate-interface call off the loop, one at a time."""
        async with self._lock:
            return await asyncio.to_thread(functools.partial(fn, *args, **kwargs))

    async def _call_substrate(self, what: str, fn: Callable[..., T],
                              *args: Any, **kwargs: Any) -> T:
        """Like `_in_worker`, but with substrate-interface errors mapped into ours.

        Node-side failures become RpcError; arguments the metadata cannot
        encode or decode become DecodeError.
        """
        try:
            return await self._in_worker(fn, *args, **kwargs)
        except SubstrateRequestException as exc:
            raise RpcError.from_payload(exc.args[0] if exc.args else str(exc)) from exc
        except ExtrinsicNotFound as exc:
            raise RpcError(0, f"{what}: extrinsic not found", str(exc) or None) from exc
        except (ValueError, TypeError, KeyError, IndexError) as exc:
            raise DecodeError(f"{what}: {exc}") from exc

    # ── State queries ──────────────────────────────────────

    async def query(self, module: str, storage_function: str,
                    params: list | None = None) -> Any:
        """Read a storage entry and return its decoded value (None if absent)."""
        result = await self._call_substrate(
            f"{module}.{storage_function}",
            self.substrate.query, module, storage_function, params or [],
        )
        return None if result is None else result.value

    async def constant(self, module: str, name: str) -> Any:
        result = await self._call_substrate(
            f"{module}.{name}", self.substrate.get_constant, module, name
        )
        if result is None:
            raise DecodeError(f"constant {module}.{name} not found in metadata")
        return result.value

    # ── Transactions ───────────────────────────────────────

    async def compose_call(self, module: str, function: str, params: dict[str, Any]) -> Any:
        return await self._call_substrate(
            f"{module}.{function}",
            self.substrate.compose_call,
            call_module=module,
            call_function=function,
            call_params=params,
        )

    async def create_signed_extrinsic(self, call: Any, keypair: Keypair) -> Any:
        return await self._call_substrate(
            "signing", self.substrate.create_signed_extrinsic, call=call, keypair=keypair
        )

    async def submit_and_watch(self, extrinsic: Any) -> Subscription:
        """Submit a signed extrinsic and return its status subscription."""
        return await self.transport.subscribe(
            "author_submitAndWatchExtrinsic",
            [str(extrinsic.data)],
            "author_unwatchExtrinsic",
        )

    async def dispatch_error(self, extrinsic_hash: str, block_hash: str) -> str | None:
        """Return the module error of a failed extrinsic in a block, None if it succeeded."""

        def _check() -> str | None:
            receipt = ExtrinsicReceipt(
                substrate=self.substrate,
                extrinsic_hash=extrinsic_hash,
                block_hash=block_hash,
            )
            if receipt.is_success:
                return None
            error = receipt.error_message or {}
            if isinstance(error, dict):
                return error.get("name") or error.get("type") or str(error)
            return str(error)

        return await self._call_substrate(f"receipt {extrinsic_hash}", _check)

    # ── Custom RPC ─────────────────────────────────────────

    async def rpc(self, name: str, *args: Any) -> Any:
        """Call a custom RPC declared in the schema and decode its result."""
        method = self.schema.method(name)
        wire_name = method.wire_name(self.schema.namespace)
        if method.optional and self.rpc_methods and wire_name not in self.rpc_methods:
            raise ChainConnectionError(f"node does not expose {wire_name}")
        params = self.schema.encode_params(method, args)
        raw = await self.transport.request(wire_name, params)
        log.debug("%s(%s) -> %.200r", wire_name, params, raw)
        return self.schema.decode(method.type, raw)
