"""
Spill Callback API
"""

from spill.api.server import CallbackServer, ListenerStats

__all__ = [
    "CallbackServer",
    "ListenerStats",
]
