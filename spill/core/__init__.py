"""
Spill Core Types and Serialization
"""

from spill.core.types import (
    Destination,
    CallbackAddress,
    OutboundMessage,
    Batch,
    iter_batches,
    format_host,
)
from spill.core.serialization import ByteReader, ByteWriter

__all__ = [
    "Destination",
    "CallbackAddress",
    "OutboundMessage",
    "Batch",
    "iter_batches",
    "format_host",
    "ByteReader",
    "ByteWriter",
]
