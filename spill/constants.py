"""
Spill Constants

Wire tags, protocol versions and runtime defaults in one place.
"""

from typing import Final

# ==============================================================================
# IPP WIRE FORMAT
# ==============================================================================

IPP_VERSION_MAJOR: Final[int] = 0x02
IPP_VERSION_MINOR: Final[int] = 0x00

# Delimiter tags
IPP_TAG_OPERATION: Final[int] = 0x42           # Operation attributes group
IPP_TAG_PRINTER: Final[int] = 0x44             # Printer attributes group
IPP_TAG_END: Final[int] = 0x03                 # End of attributes
IPP_DELIMITER_LIMIT: Final[int] = 0x10         # Tags below are group delimiters

# Value tag used for every attribute we emit
IPP_TAG_TEXT: Final[int] = 0x44

# Operations
IPP_OP_GET_PRINTER_ATTRIBUTES: Final[int] = 0x000B

# Status codes
IPP_SUCCESSFUL_OK: Final[int] = 0x0000

# Fixed header: version(2) + operation/status(2) + request id(4)
IPP_HEADER_SIZE: Final[int] = 8

# Lengths are u16 on the wire
IPP_MAX_FIELD_LENGTH: Final[int] = 0xFFFF

IPP_CONTENT_TYPE: Final[str] = "application/ipp"
IPP_MAX_BODY_SIZE: Final[int] = 256 * 1024 * 1024  # Largest callback body read

# ==============================================================================
# VIRTUAL PRINTER
# ==============================================================================

PRINTER_NAME: Final[str] = "TestPrinter"
PRINTER_PATH: Final[str] = f"/printers/{PRINTER_NAME}"
PRINTER_STATE_IDLE: Final[int] = 3

# ==============================================================================
# UDP NOTIFICATION
# ==============================================================================

NOTIFY_MARKER_A: Final[int] = 0x00
NOTIFY_MARKER_B: Final[int] = 0x03
NOTIFY_LOCATION: Final[str] = "Office HQ"
NOTIFY_INFO: Final[str] = "Printer"

# ==============================================================================
# RUNTIME DEFAULTS
# ==============================================================================

DEFAULT_TARGET_PORT: Final[int] = 631          # CUPS browsing port
DEFAULT_CALLBACK_PORT: Final[int] = 12345
DEFAULT_LISTEN_HOST: Final[str] = "0.0.0.0"
DEFAULT_BATCH_SIZE: Final[int] = 10
MAX_RECORDED_ERRORS: Final[int] = 100

MIN_PORT: Final[int] = 1
MAX_PORT: Final[int] = 65535
