"""
Spill Run Lifecycle

Ties the pieces together for one run:

1. Enumerate targets and build the payloads (no network activity yet)
2. Start the callback listener
3. Dispatch the advertisements in batches while the listener serves
4. Keep the listener up until the process is told to stop
"""

from __future__ import annotations
import asyncio
import logging
import signal
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional

from spill.api.server import CallbackServer
from spill.config import SpillConfig
from spill.core.types import OutboundMessage
from spill.errors import InvalidParameterError
from spill.network.dispatch import DispatchEngine, DispatchReport, ProgressCallback
from spill.protocol.notification import build_messages
from spill.protocol.printer import PrinterAttributes, DEFAULT_PRINTER
from spill.targets.enumerator import enumerate_targets

logger = logging.getLogger(__name__)


@dataclass
class RunStatus:
    """Status of a run."""
    started: bool = False
    start_time: float = 0.0
    targets: int = 0
    report: Optional[DispatchReport] = None

    @property
    def uptime(self) -> float:
        if not self.started:
            return 0.0
        return time.time() - self.start_time


@dataclass
class SpillNode:
    """
    One scan-and-listen run.

    The listener is load-bearing: if it cannot start, the run fails before
    anything is sent.
    """
    config: SpillConfig
    printer: PrinterAttributes = DEFAULT_PRINTER
    on_progress: Optional[ProgressCallback] = None
    sender: Any = None

    status: RunStatus = field(default_factory=RunStatus)
    listener: Optional[CallbackServer] = None
    _shutdown: Optional[asyncio.Event] = None

    def prepare(self) -> List[OutboundMessage]:
        """
        Resolve the configuration into outbound messages.

        Raises:
            InvalidParameterError: Configuration does not validate
            InvalidTargetError / TargetFileError: Bad target specification
        """
        errors = self.config.validate()
        if errors:
            raise InvalidParameterError("config", "; ".join(errors))

        addresses = enumerate_targets(self.config.target)
        self.status.targets = len(addresses)

        return build_messages(
            addresses,
            self.config.dispatch.target_port,
            self.config.callback,
        )

    async def start_listener(self) -> CallbackServer:
        """Start the callback listener (raises ListenerStartupError)."""
        self.listener = CallbackServer(
            host=self.config.listener.host,
            port=self.config.listener.port,
            path=self.config.listener.path,
            printer=self.printer,
        )
        await self.listener.start()
        return self.listener

    async def dispatch(self, messages: List[OutboundMessage]) -> DispatchReport:
        engine = DispatchEngine(
            batch_size=self.config.dispatch.batch_size,
            sender=self.sender,
            on_progress=self.on_progress,
        )
        report = await engine.send_packets_in_batches(messages)
        self.status.report = report
        return report

    def stop(self) -> None:
        """Ask a waiting run to shut down."""
        if self._shutdown is not None:
            self._shutdown.set()

    async def wait_until_stopped(self) -> None:
        """Block until stop() is called or a termination signal arrives."""
        if self._shutdown is None:
            self._shutdown = asyncio.Event()
        logger.info("Dispatch finished; waiting for callbacks (Ctrl+C to stop)")
        await self._shutdown.wait()

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self.stop)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform/thread; rely on KeyboardInterrupt
                pass

    async def run(self) -> DispatchReport:
        """
        Execute the full run.

        Configuration errors surface before the listener is started or any
        packet is sent.
        """
        messages = self.prepare()
        self._shutdown = asyncio.Event()

        await self.start_listener()
        self.status.started = True
        self.status.start_time = time.time()

        try:
            report = await self.dispatch(messages)

            if self.config.wait_forever:
                await self.wait_until_stopped()
        finally:
            await self.listener.stop()
            self.status.started = False

        return report
