"""
Spill Dispatch Engine

Fans the outbound advertisements out to every destination with bounded
concurrency.

ALGORITHM:
1. Split the ordered message list into consecutive batches of batch_size
2. Start one task per message in the batch
3. Wait for every task in the batch (asyncio.gather barrier)
4. Report progress, then move on to the next batch

At most batch_size sends are ever in flight. A failed send is logged and
dropped; it never affects siblings or later batches. There are no retries.
"""

from __future__ import annotations
import asyncio
import logging
import socket
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from spill.constants import DEFAULT_BATCH_SIZE, MAX_RECORDED_ERRORS
from spill.core.types import OutboundMessage, iter_batches
from spill.errors import InvalidParameterError, SendFailedError

logger = logging.getLogger(__name__)

Sender = Callable[[OutboundMessage], Awaitable[None]]
ProgressCallback = Callable[[int, int], None]


@dataclass
class DispatchReport:
    """
    Outcome of one dispatch pass.

    errors keeps (destination, reason) for the first failures only; failed
    counts all of them.
    """
    total: int = 0
    sent: int = 0
    failed: int = 0
    batches: int = 0
    max_in_flight: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def completed(self) -> int:
        return self.sent + self.failed

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "sent": self.sent,
            "failed": self.failed,
            "batches": self.batches,
            "max_in_flight": self.max_in_flight,
        }


# ==============================================================================
# Single Send
# ==============================================================================

class _SendProtocol(asyncio.DatagramProtocol):
    """
    Keeps the first write error of a one-shot datagram endpoint.

    The transport reports failed writes through error_received instead of
    raising from sendto.
    """

    def __init__(self):
        self.error: Optional[BaseException] = None
        self.closed = asyncio.get_running_loop().create_future()

    def error_received(self, exc: Exception) -> None:
        if self.error is None:
            self.error = exc

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc is not None and self.error is None:
            self.error = exc
        if not self.closed.done():
            self.closed.set_result(None)


async def send_datagram(message: OutboundMessage) -> None:
    """
    Deliver one datagram: resolve, open a UDP endpoint, write once, close.

    Raises:
        SendFailedError: If resolution, socket setup or the write fails
    """
    destination = message.destination
    loop = asyncio.get_running_loop()

    try:
        infos = await loop.getaddrinfo(
            destination.address,
            destination.port,
            type=socket.SOCK_DGRAM,
        )
    except (socket.gaierror, UnicodeError) as e:
        raise SendFailedError(str(destination), f"resolve failed: {e}")

    if not infos:
        raise SendFailedError(str(destination), "resolve returned no addresses")

    family, _, _, _, sockaddr = infos[0]

    try:
        transport, protocol = await loop.create_datagram_endpoint(
            _SendProtocol,
            remote_addr=sockaddr,
            family=family,
        )
    except OSError as e:
        raise SendFailedError(str(destination), f"socket setup failed: {e}")

    try:
        transport.sendto(message.payload)
    finally:
        transport.close()

    await protocol.closed
    if protocol.error is not None:
        raise SendFailedError(str(destination), f"write failed: {protocol.error}")

    logger.debug(f"Sent {len(message)} bytes to {destination}")


# ==============================================================================
# Batched Dispatch
# ==============================================================================

class DispatchEngine:
    """
    Batched concurrent UDP sender.

    The sender coroutine is pluggable so the scheduling can be exercised
    without touching the network.
    """

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        sender: Optional[Sender] = None,
        on_progress: Optional[ProgressCallback] = None,
        max_recorded_errors: int = MAX_RECORDED_ERRORS,
    ):
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise InvalidParameterError("batch_size", "must be a positive integer")

        self.batch_size = batch_size
        self._sender = sender or send_datagram
        self._on_progress = on_progress
        self.max_recorded_errors = max_recorded_errors
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        """Number of sends currently running."""
        return self._in_flight

    async def _send_one(self, message: OutboundMessage, report: DispatchReport) -> None:
        self._in_flight += 1
        report.max_in_flight = max(report.max_in_flight, self._in_flight)
        try:
            await self._sender(message)
        finally:
            self._in_flight -= 1

    async def send_packets_in_batches(self, messages: Sequence[OutboundMessage]) -> DispatchReport:
        """
        Send every message, batch by batch.

        Returns once all batches have been fully waited on.
        """
        report = DispatchReport(total=len(messages))

        if not messages:
            logger.info("No packets to send")
            return report

        logger.info(
            f"Sending {report.total} packets in batches of {self.batch_size}"
        )

        for batch in iter_batches(messages, self.batch_size):
            results = await asyncio.gather(
                *[self._send_one(message, report) for message in batch],
                return_exceptions=True
            )

            for message, result in zip(batch, results):
                if isinstance(result, BaseException):
                    report.failed += 1
                    if len(report.errors) < self.max_recorded_errors:
                        report.errors.append((str(message.destination), str(result)))
                    if isinstance(result, SendFailedError):
                        logger.warning(result.message)
                    else:
                        logger.warning(
                            f"Failed to send UDP packet to {message.destination}: {result!r}"
                        )
                else:
                    report.sent += 1

            report.batches += 1
            self._report_progress(report)

        logger.info(
            f"Dispatch complete: {report.sent} sent, {report.failed} failed, "
            f"{report.batches} batches"
        )
        return report

    def _report_progress(self, report: DispatchReport) -> None:
        logger.info(f"Packet progress: {report.completed}/{report.total}")
        if self._on_progress is not None:
            self._on_progress(report.completed, report.total)


async def send_packets_in_batches(
    messages: Sequence[OutboundMessage],
    batch_size: int = DEFAULT_BATCH_SIZE,
    on_progress: Optional[ProgressCallback] = None,
) -> DispatchReport:
    """Convenience wrapper around DispatchEngine with the real UDP sender."""
    engine = DispatchEngine(batch_size=batch_size, on_progress=on_progress)
    return await engine.send_packets_in_batches(messages)
