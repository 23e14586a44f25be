"""
Spill Network Dispatch

Batched UDP delivery of printer advertisements.
"""

from spill.network.dispatch import (
    DispatchEngine,
    DispatchReport,
    send_datagram,
    send_packets_in_batches,
)

__all__ = [
    "DispatchEngine",
    "DispatchReport",
    "send_datagram",
    "send_packets_in_batches",
]
