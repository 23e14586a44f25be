"""
Spill Wire Protocols

UDP printer advertisements going out, IPP requests and responses coming
back in.
"""

from spill.protocol.ipp import (
    AttributeRecord,
    ProtocolRequest,
    ProtocolResponse,
    encode_attribute,
    decode_attribute,
    decode_attributes,
    write_attribute,
    parse_request,
    encode_request,
    build_response,
)
from spill.protocol.notification import (
    callback_url,
    encode_notification,
    build_messages,
)
from spill.protocol.printer import PrinterAttributes, DEFAULT_PRINTER

__all__ = [
    # IPP
    "AttributeRecord",
    "ProtocolRequest",
    "ProtocolResponse",
    "encode_attribute",
    "decode_attribute",
    "decode_attributes",
    "write_attribute",
    "parse_request",
    "encode_request",
    "build_response",
    # Notification
    "callback_url",
    "encode_notification",
    "build_messages",
    # Printer
    "PrinterAttributes",
    "DEFAULT_PRINTER",
]
