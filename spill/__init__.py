"""
Spill

Sends unsolicited IPP printer advertisements over UDP to a range of hosts
and runs a minimal IPP endpoint to catch any device that calls back.
"""

__version__ = "0.1.0"
__author__ = "Spill Developers"

from spill.constants import IPP_VERSION_MAJOR, IPP_VERSION_MINOR, PRINTER_PATH

__all__ = [
    "IPP_VERSION_MAJOR",
    "IPP_VERSION_MINOR",
    "PRINTER_PATH",
    "__version__",
]
