"""WebSocket transport delivering decoded response trees to the mapper."""

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol
from uuid import uuid4

import websockets
from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed, WebSocketException

from soap_mapper.config import TransportConfig, get_transport_config
from soap_mapper.contracts import CallRequest, CallResult
from soap_mapper.errors import RemoteCallError, TransportError

logger = logging.getLogger("soap-mapper.transport")


class Transport(Protocol):
    """Executes a remote call and returns its decoded response tree."""

    async def request(self, method: str, params: Any) -> Any: ...


class WebSocketTransport:
    """Async request/response transport over a JSON WebSocket protocol.

    Each call is sent as ``{"type": "call", "request_id", "method", "params"}``
    and answered by ``{"type": "result", "request_id", "status", "data"}``.
    """

    def __init__(
        self,
        url: str,
        reconnect_interval_s: float = 0.5,
        max_retries: int = 2,
        request_timeout_s: float = 10.0,
        auto_reconnect: bool = True,
        user_agent: Optional[str] = None,
        debug: bool = False,
    ) -> None:
        self.url = url
        self.reconnect_interval_s = reconnect_interval_s
        self.max_retries = max_retries
        self.request_timeout_s = request_timeout_s
        self.auto_reconnect = auto_reconnect
        self.user_agent = user_agent
        self.debug = debug

        self._cookies: Dict[str, str] = {}
        self._communication_log = ""
        self._websocket: Any | None = None
        self._receiver_task: asyncio.Task[Any] | None = None
        self._pending_requests: Dict[str, asyncio.Future[tuple[CallResult, str]]] = {}
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: TransportConfig | None = None) -> "WebSocketTransport":
        config = config or get_transport_config()
        return cls(
            url=config.url,
            reconnect_interval_s=config.reconnect_interval_s,
            max_retries=config.max_retries,
            request_timeout_s=config.request_timeout_s,
            auto_reconnect=config.auto_reconnect,
            user_agent=config.user_agent,
            debug=config.debug,
        )

    @property
    def connected(self) -> bool:
        return self._websocket is not None

    @property
    def communication_log(self) -> str:
        """Request and response text of the last completed call."""
        return self._communication_log

    def set_cookie(self, name: str, value: Optional[str] = None) -> None:
        """Send a cookie on the next connection; ``None`` sends an empty value."""
        self._cookies[name] = value or ""

    def cookie_header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    async def connect(self) -> None:
        async with self._lock:
            if self._websocket is not None:
                return
            headers = {"Cookie": self.cookie_header()} if self._cookies else None
            connect_kwargs: Dict[str, Any] = {"compression": None, "additional_headers": headers}
            if self.user_agent:
                connect_kwargs["user_agent_header"] = self.user_agent
            self._websocket = await websockets.connect(self.url, **connect_kwargs)
            self._receiver_task = asyncio.create_task(self._receive_loop())
            logger.info("Connected to %s", self.url)

    async def disconnect(self) -> None:
        async with self._lock:
            receiver_task = self._receiver_task
            websocket = self._websocket
            self._receiver_task = None
            self._websocket = None

        if receiver_task is not None:
            receiver_task.cancel()
            try:
                await receiver_task
            except asyncio.CancelledError:
                pass

        if websocket is not None:
            try:
                await websocket.close()
            except Exception as exc:
                logger.debug("Closing websocket failed: %s", exc)

        self._fail_pending(TransportError("connection closed", url=self.url))

    async def _ensure_connected(self) -> None:
        if self.connected:
            return
        try:
            await self.connect()
        except (OSError, WebSocketException) as exc:
            raise TransportError(f"cannot connect to {self.url}: {exc}", url=self.url) from exc

    def _fail_pending(self, exc: Exception) -> None:
        pending = list(self._pending_requests.values())
        self._pending_requests.clear()
        for future in pending:
            if not future.done():
                future.set_exception(exc)

    async def _receive_loop(self) -> None:
        assert self._websocket is not None
        try:
            async for raw_message in self._websocket:
                if self.debug:
                    logger.debug("Received: %s", raw_message)
                try:
                    result = CallResult.model_validate_json(raw_message)
                except ValidationError as exc:
                    logger.warning("Ignoring malformed message: %s", exc.errors()[0]["msg"])
                    continue
                future = self._pending_requests.pop(result.request_id, None)
                if future and not future.done():
                    future.set_result((result, str(raw_message)))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Receive loop stopped: %s", exc)
        finally:
            async with self._lock:
                self._websocket = None
                self._receiver_task = None
            self._fail_pending(TransportError("connection lost", url=self.url))

    async def _send_request(self, method: str, params: Any, timeout_s: float) -> CallResult:
        await self._ensure_connected()
        assert self._websocket is not None

        message = CallRequest(request_id=str(uuid4()), method=method, params=params)
        payload = message.model_dump_json()

        loop = asyncio.get_running_loop()
        future: asyncio.Future[tuple[CallResult, str]] = loop.create_future()
        self._pending_requests[message.request_id] = future

        if self.debug:
            logger.debug("Sending: %s", payload)
        try:
            await self._websocket.send(payload)
            result, raw_result = await asyncio.wait_for(future, timeout=timeout_s)
        except asyncio.TimeoutError as exc:
            self._pending_requests.pop(message.request_id, None)
            raise TransportError(f"request timed out after {timeout_s:.1f}s", method=method) from exc
        except ConnectionClosed as exc:
            self._pending_requests.pop(message.request_id, None)
            raise TransportError(f"connection closed: {exc}", method=method) from exc

        # Each call records its own request and response.
        self._communication_log = payload + "\n\n" + raw_result
        return result

    async def request(self, method: str, params: Any, timeout_s: Optional[float] = None) -> Any:
        """Call ``method`` and return the decoded ``data`` of its result."""
        timeout = timeout_s if timeout_s is not None else self.request_timeout_s
        attempts = self.max_retries + 1
        last_error: TransportError | None = None

        for attempt in range(1, attempts + 1):
            try:
                result = await self._send_request(method, params, timeout)
            except TransportError as exc:
                last_error = exc
                logger.info("%s attempt %d/%d failed: %s", method, attempt, attempts, exc)
                await self.disconnect()
                if not self.auto_reconnect or attempt >= attempts:
                    break
                await asyncio.sleep(self.reconnect_interval_s)
                continue

            if result.status == "error":
                raise RemoteCallError(result.message or "remote error", method=method)
            return result.data

        assert last_error is not None
        raise TransportError(f"{method} failed: {last_error}", method=method) from last_error
