import asyncio
import contextlib
import json
from dataclasses import dataclass
from typing import Any

from aiohttp import WSMsgType, web

from fedledger.communication.http.identity import (
    HeaderIdentityResolver,
    IdentityResolver,
)
from fedledger.communication.http.types import (
    ErrorResponse,
    InvokeResponse,
    StatusResponse,
)
from fedledger.config.logging import get_logger
from fedledger.contract import FedAvgContract
from fedledger.core.exceptions import (
    ErrorKind,
    InvalidArgumentError,
    LedgerError,
)
from fedledger.core.types import Event
from fedledger.utils import get_current_time

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.ACCESS_DENIED: 403,
    ErrorKind.TRAINING_NOT_FINISHED: 409,
    ErrorKind.TRAINING_FINISHED: 409,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.UNAVAILABLE: 503,
}


@dataclass(slots=True, frozen=True)
class GatewayEndpoints:
    """Gateway endpoint configuration."""

    invoke: str = "/operations/{operation}"
    get_status: str = "/status"
    events: str = "/events"


class EventSubscriber:
    """Bounded hand-off of committed events to one websocket.

    Events are published from whichever thread committed the unit; they
    are queued on the gateway's loop. When the queue is full the event is
    dropped and counted.
    """

    def __init__(
        self, loop: asyncio.AbstractEventLoop, maxsize: int, peer: str = ""
    ) -> None:
        self._loop = loop
        self._peer = peer
        self.queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0
        self._logger = get_logger("fedledger.gateway")

    def __call__(self, event: Event) -> None:
        self._loop.call_soon_threadsafe(self._offer, event)

    def _offer(self, event: Event) -> None:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            self._logger.warning(
                f"Event queue of {self._peer or 'subscriber'} is full, "
                f"dropped {event.name} ({self.dropped} so far)"
            )


class HTTPGateway:
    """HTTP gateway that maps requests onto contract operations."""

    def __init__(
        self,
        host: str,
        port: int,
        contract: FedAvgContract,
        identity_resolver: IdentityResolver | None = None,
        endpoints: GatewayEndpoints | None = None,
        max_request_size: int = 100 * 1024 * 1024,  # 100MB default
        event_queue_size: int = 1024,
    ) -> None:
        self._host = host
        self._port = port
        self._contract = contract
        self._identity_resolver = identity_resolver or HeaderIdentityResolver()
        self._endpoints = endpoints or GatewayEndpoints()
        self._logger = get_logger("fedledger.gateway")
        self._max_request_size = max_request_size
        self._event_queue_size = event_queue_size
        self._app = web.Application(client_max_size=max_request_size)
        self._setup_routes()
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    @property
    def app(self) -> web.Application:
        return self._app

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}"

    def _setup_routes(self) -> None:
        self._app.router.add_post(self._endpoints.invoke, self._handle_invoke)
        self._app.router.add_get(
            self._endpoints.get_status, self._handle_get_status
        )
        self._app.router.add_get(self._endpoints.events, self._handle_events)

    def _error_response(
        self, kind: str, message: str, status: int, **details: Any
    ) -> web.Response:
        response: ErrorResponse = {
            "status": "error",
            "message": message,
            "timestamp": get_current_time().isoformat(),
            "kind": kind,
            "details": details,
        }
        return web.json_response(response, status=status)

    def _ledger_error_response(self, error: LedgerError) -> web.Response:
        return self._error_response(
            error.kind.value,
            error.message,
            STATUS_BY_KIND.get(error.kind, 400),
            **error.details,
        )

    async def _read_args(self, request: web.Request) -> Any:
        if not request.can_read_body:
            return None
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise InvalidArgumentError(
                "Request body must be valid UTF-8 JSON"
            ) from None
        if data is None:
            return None
        if not isinstance(data, dict):
            raise InvalidArgumentError("Request body must be a JSON object")
        return data.get("args")

    async def _handle_invoke(self, request: web.Request) -> web.Response:
        """Handle an operation invocation."""
        name = request.match_info["operation"]
        try:
            identity = self._identity_resolver.resolve(request)
            if identity is None:
                return self._error_response(
                    "UNAUTHENTICATED", "Caller identity is missing", 401
                )
            args = await self._read_args(request)
            result = self._contract.invoke(identity, name, args)
        except LedgerError as e:
            return self._ledger_error_response(e)
        except web.HTTPRequestEntityTooLarge:
            return self._error_response(
                "PAYLOAD_TOO_LARGE",
                "Request body exceeds the configured limit",
                413,
                max_size=self._max_request_size,
            )
        except Exception as e:
            self._logger.exception(f"Error handling {name}")
            return self._error_response("INTERNAL", str(e), 500)

        response: InvokeResponse = {
            "status": "success",
            "message": f"{name} completed",
            "timestamp": get_current_time().isoformat(),
            "operation": name,
            "result": result,
        }
        return web.json_response(response)

    async def _handle_get_status(self, request: web.Request) -> web.Response:
        ledger = self._contract.ledger
        response: StatusResponse = {
            "status": "success",
            "message": "Gateway is running",
            "timestamp": get_current_time().isoformat(),
            "height": ledger.height,
            "keys": len(ledger),
        }
        return web.json_response(response)

    async def _forward_events(
        self, ws: web.WebSocketResponse, subscriber: EventSubscriber
    ) -> None:
        while not ws.closed:
            event = await subscriber.queue.get()
            try:
                await ws.send_json(event.to_dict())
            except ConnectionResetError:
                return

    async def _handle_events(
        self, request: web.Request
    ) -> web.WebSocketResponse:
        """Push committed events to a websocket subscriber.

        ``?names=A,B`` restricts the stream to the listed event names.
        """
        names_param = request.query.get("names")
        names = (
            [n for n in names_param.split(",") if n] if names_param else None
        )

        subscriber = EventSubscriber(
            asyncio.get_running_loop(),
            self._event_queue_size,
            peer=request.remote or "",
        )
        notifier = self._contract.ledger.notifier
        unsubscribe = notifier.subscribe(subscriber, names)
        ws = web.WebSocketResponse()
        forwarder: asyncio.Task | None = None
        try:
            await ws.prepare(request)
            forwarder = asyncio.create_task(
                self._forward_events(ws, subscriber)
            )
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    self._logger.error(
                        f"Event stream closed with {ws.exception()}"
                    )
        finally:
            unsubscribe()
            if forwarder is not None:
                forwarder.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await forwarder
        return ws

    async def start(self) -> None:
        """Start HTTP gateway."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(
            self._runner,
            self._host,
            self._port,
            reuse_address=True,
        )
        await self._site.start()
        self._logger.info(f"Gateway listening on {self.url}")

    async def stop(self) -> None:
        """Stop HTTP gateway."""
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()
        self._logger.info("Gateway stopped")
