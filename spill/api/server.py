"""
Spill Callback Listener

HTTP endpoint that poses as an IPP printer. Targets that accept the UDP
advertisement call back here; every caller is logged and answered with the
virtual printer's attributes.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from aiohttp import web

from spill.constants import (
    DEFAULT_CALLBACK_PORT,
    DEFAULT_LISTEN_HOST,
    IPP_CONTENT_TYPE,
    IPP_MAX_BODY_SIZE,
    PRINTER_PATH,
)
from spill.errors import (
    ListenerStartupError,
    MalformedRequestError,
    UnsupportedVersionError,
)
from spill.protocol.ipp import build_response, parse_request
from spill.protocol.printer import PrinterAttributes, DEFAULT_PRINTER

logger = logging.getLogger(__name__)


@dataclass
class ListenerStats:
    """Counters for callbacks seen by the listener."""
    requests_received: int = 0
    requests_handled: int = 0
    requests_rejected: int = 0
    last_client: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "requests_received": self.requests_received,
            "requests_handled": self.requests_handled,
            "requests_rejected": self.requests_rejected,
            "last_client": self.last_client,
        }


@dataclass
class CallbackServer:
    """
    IPP callback listener.

    Stateless across requests apart from the counters; the printer
    attributes are shared read-only.
    """
    host: str = DEFAULT_LISTEN_HOST
    port: int = DEFAULT_CALLBACK_PORT
    path: str = PRINTER_PATH
    printer: PrinterAttributes = DEFAULT_PRINTER
    max_body_size: int = IPP_MAX_BODY_SIZE

    stats: ListenerStats = field(default_factory=ListenerStats)
    _runner: Any = None
    _site: Any = None
    _running: bool = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound, useful when port 0 was requested."""
        if self._runner is None:
            return None
        for address in self._runner.addresses:
            if isinstance(address, tuple) and len(address) >= 2:
                return address[1]
        return None

    def build_app(self) -> web.Application:
        """Create the aiohttp application serving the printer path."""
        app = web.Application(client_max_size=self.max_body_size)
        # Registered for every method so non-POST gets our own 405
        app.router.add_route("*", self.path, self._handle_ipp)
        return app

    async def start(self) -> None:
        """
        Start the listener.

        Raises:
            ListenerStartupError: If the address cannot be bound
        """
        runner = web.AppRunner(self.build_app())
        await runner.setup()

        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            raise ListenerStartupError(self.host, self.port, str(e))

        self._runner = runner
        self._site = site
        self._running = True
        logger.info(f"Starting HTTP server on {self.host}:{self.bound_port}{self.path}")

    async def stop(self) -> None:
        """Stop the listener."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            self._running = False
            logger.info("HTTP server stopped")

    def _reject(self, status: int, reason: str) -> web.Response:
        self.stats.requests_rejected += 1
        return web.Response(status=status, text=reason)

    async def _handle_ipp(self, request: web.Request) -> web.Response:
        """Handle an IPP callback."""
        client = request.remote
        self.stats.requests_received += 1
        self.stats.last_client = client
        logger.info(f"Received {request.method} request from {client}")

        if request.method != "POST":
            response = self._reject(405, "Only POST method is allowed")
            response.headers["Allow"] = "POST"
            return response

        try:
            body = await request.read()
        except Exception as e:
            logger.error(f"Failed to read IPP request body from {client}: {e}")
            return self._reject(500, "Failed to read IPP request body")

        try:
            ipp_request = parse_request(body)
        except UnsupportedVersionError as e:
            logger.warning(f"Rejected request from {client}: {e.message}")
            return self._reject(400, "Unsupported IPP version")
        except MalformedRequestError as e:
            logger.warning(f"Rejected request from {client}: {e.message}")
            return self._reject(400, "Malformed IPP request")

        logger.info(
            f"Received IPP request with request ID: {ipp_request.request_id}, "
            f"operation: 0x{ipp_request.operation_id:04x}, "
            f"version: {ipp_request.version_major}.{ipp_request.version_minor} "
            f"from {client}"
        )

        data = build_response(ipp_request, self.printer)
        self.stats.requests_handled += 1

        return web.Response(status=200, body=data, content_type=IPP_CONTENT_TYPE)
