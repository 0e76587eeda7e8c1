"""JSON-RPC 2.0 over WebSocket with subscription support, built on aiohttp."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from typing import Any

import aiohttp

from xychain_e2e.errors import ChainConnectionError, RpcError

log = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """A stream of notifications for one server-side subscription.

    Iterate it with `async for`, or call `next()`. `unsubscribe()` tears the
    subscription down on the node; it only ever does so once.
    """

    def __init__(
        self,
        transport: WsRpcTransport,
        subscription_id: str,
        unsubscribe_method: str,
    ) -> None:
        self._transport = transport
        self.subscription_id = subscription_id
        self._unsubscribe_method = unsubscribe_method
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _push(self, result: Any) -> None:
        self._queue.put_nowait(result)

    def _end(self) -> None:
        self._queue.put_nowait(_CLOSED)

    async def next(self) -> Any:
        """Wait for the next notification. Raises ChainConnectionError if the socket dropped."""
        item = await self._queue.get()
        if item is _CLOSED:
            raise ChainConnectionError(
                f"subscription {self.subscription_id} ended: connection closed"
            )
        return item

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> Any:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def unsubscribe(self) -> bool:
        """Cancel the subscription on the node. Returns False if already cancelled."""
        if self._closed:
            return False
        self._closed = True
        self._transport._forget(self.subscription_id)
        if not self._transport.connected:
            return True
        try:
            await self._transport.request(self._unsubscribe_method, [self.subscription_id])
        except (RpcError, ChainConnectionError, asyncio.TimeoutError) as exc:
            log.warning(
                "%s(%s) failed: %s", self._unsubscribe_method, self.subscription_id, exc
            )
        else:
            log.debug("Unsubscribed %s", self.subscription_id)
        return True


class WsRpcTransport:
    """A single WebSocket connection to a node's JSON-RPC endpoint.

    Requests are correlated by id. Notifications are routed to their
    `Subscription` by subscription id; notifications that arrive before the
    subscribe response has been handled are buffered until the subscription
    is registered.
    """

    def __init__(
        self,
        url: str,
        request_timeout: float = 30.0,
        connect_timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._url = url
        self._request_timeout = request_timeout
        self._connect_timeout = connect_timeout
        self._session = session
        self._owns_session = session is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task | None = None
        self._ids = itertools.count(1)
        self._pending: dict[int, asyncio.Future] = {}
        self._subscriptions: dict[str, Subscription] = {}
        self._early: dict[str, list[Any]] = {}

    @property
    def url(self) -> str:
        return self._url

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def connect(self) -> None:
        """Open the socket. A single attempt; failures raise ChainConnectionError."""
        if self.connected:
            return
        if self._session is None:
            self._session = aiohttp.ClientSession()
        try:
            self._ws = await asyncio.wait_for(
                self._session.ws_connect(
                    self._url,
                    max_msg_size=0,  # runtime metadata exceeds the 4 MiB default
                    autoping=True,
                ),
                self._connect_timeout,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            await self._close_session()
            raise ChainConnectionError(f"cannot connect to {self._url}: {exc}") from exc
        self._reader = asyncio.create_task(self._read_loop(), name="ws-rpc-reader")
        log.info("Connected to %s", self._url)

    async def close(self) -> None:
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._reader is not None:
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        self._fail_all(ChainConnectionError("connection closed"))
        await self._close_session()
        log.info("Disconnected from %s", self._url)

    async def _close_session(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # ── Requests ───────────────────────────────────────────

    async def request(self, method: str, params: list | None = None,
                      timeout: float | None = None) -> Any:
        """Send one request and return its `result`.

        Raises RpcError for a JSON-RPC error object, ChainConnectionError if
        the socket is gone, asyncio.TimeoutError if no answer arrives in time.
        """
        if not self.connected:
            raise ChainConnectionError(f"not connected to {self._url}")
        request_id = next(self._ids)
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or []}
        log.debug("-> %s #%d", method, request_id)
        try:
            await self._ws.send_str(json.dumps(payload))
            return await asyncio.wait_for(future, timeout or self._request_timeout)
        except ConnectionResetError as exc:
            raise ChainConnectionError(f"{method}: connection lost: {exc}") from exc
        finally:
            self._pending.pop(request_id, None)

    async def subscribe(self, method: str, params: list | None,
                        unsubscribe_method: str) -> Subscription:
        subscription_id = await self.request(method, params)
        if not isinstance(subscription_id, (str, int)):
            raise RpcError(0, f"{method} returned no subscription id: {subscription_id!r}")
        subscription_id = str(subscription_id)
        sub = Subscription(self, subscription_id, unsubscribe_method)
        self._subscriptions[subscription_id] = sub
        for result in self._early.pop(subscription_id, []):
            sub._push(result)
        log.debug("Subscribed %s -> %s", method, subscription_id)
        return sub

    def _forget(self, subscription_id: str) -> None:
        self._subscriptions.pop(subscription_id, None)
        self._early.pop(subscription_id, None)

    # ── Reader ─────────────────────────────────────────────

    async def _read_loop(self) -> None:
        assert self._ws is not None
        try:
            async for msg in self._ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._dispatch(msg.data)
                elif msg.type == aiohttp.WSMsgType.BINARY:
                    self._dispatch(msg.data.decode("utf-8"))
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    log.error("WebSocket error: %s", self._ws.exception())
                    break
        finally:
            self._fail_all(ChainConnectionError(f"connection to {self._url} closed"))

    def _dispatch(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("Dropping non-JSON frame: %.80s", raw)
            return

        if "id" in message and message.get("id") is not None:
            future = self._pending.get(message["id"])
            if future is None or future.done():
                log.debug("Response for unknown request id %s", message["id"])
                return
            if "error" in message:
                future.set_exception(RpcError.from_payload(message["error"]))
            else:
                future.set_result(message.get("result"))
            return

        params = message.get("params")
        if isinstance(params, dict) and "subscription" in params:
            subscription_id = str(params["subscription"])
            sub = self._subscriptions.get(subscription_id)
            if sub is not None:
                sub._push(params.get("result"))
            else:
                self._early.setdefault(subscription_id, []).append(params.get("result"))
            return

        log.debug("Ignoring unexpected message: %.120s", raw)

    def _fail_all(self, exc: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(exc)
        self._pending.clear()
        for sub in list(self._subscriptions.values()):
            sub._end()
        self._subscriptions.clear()
