"""
Spill IPP Codec

Just enough of the Internet Printing Protocol binary encoding to answer a
callback as a well-formed printer.

Request:
    [major:1][minor:1][operation:2][request-id:4 BE][attributes...]

Response:
    [major:1][minor:1][status:2 BE][request-id:4 BE]
    [0x42][attribute]...            operation attributes
    [0x44][attribute]...            printer attributes
    [0x03]                          end of attributes

Attribute:
    [tag:1][name-length:2 BE][name][value-length:2 BE][value]
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from spill.constants import (
    IPP_VERSION_MAJOR,
    IPP_VERSION_MINOR,
    IPP_TAG_OPERATION,
    IPP_TAG_PRINTER,
    IPP_TAG_END,
    IPP_TAG_TEXT,
    IPP_DELIMITER_LIMIT,
    IPP_SUCCESSFUL_OK,
    IPP_HEADER_SIZE,
    IPP_OP_GET_PRINTER_ATTRIBUTES,
)
from spill.core.serialization import ByteReader, ByteWriter
from spill.errors import MalformedRequestError, UnsupportedVersionError
from spill.protocol.printer import PrinterAttributes

logger = logging.getLogger(__name__)

SUPPORTED_VERSION: Tuple[int, int] = (IPP_VERSION_MAJOR, IPP_VERSION_MINOR)

OPERATION_ATTRIBUTES: Tuple[Tuple[str, str], ...] = (
    ("charset", "utf-8"),
    ("natural-language", "en"),
)


# ==============================================================================
# Attributes
# ==============================================================================

@dataclass(frozen=True)
class AttributeRecord:
    """One tagged name/value attribute."""
    name: str
    value: str
    tag: int = IPP_TAG_TEXT

    def serialize(self) -> bytes:
        writer = ByteWriter()
        write_attribute(writer, self.name, self.value, self.tag)
        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple["AttributeRecord", int]:
        """Deserialize from bytes, return (AttributeRecord, bytes_consumed)."""
        reader = ByteReader(data)
        reader.offset = offset
        record = cls.read(reader)
        return record, reader.offset - offset

    @classmethod
    def read(cls, reader: ByteReader) -> "AttributeRecord":
        tag = reader.read_u8()
        name = reader.read_text()
        value = reader.read_text()
        return cls(name=name, value=value, tag=tag)


def write_attribute(writer: ByteWriter, name: str, value: str, tag: int = IPP_TAG_TEXT) -> None:
    """Append one attribute. Every attribute is emitted as text."""
    writer.write_u8(tag)
    writer.write_text(name, "name")
    writer.write_text(value, "value")


def encode_attribute(name: str, value: str, tag: int = IPP_TAG_TEXT) -> bytes:
    return AttributeRecord(name=name, value=value, tag=tag).serialize()


def decode_attribute(data: bytes, offset: int = 0) -> Tuple[AttributeRecord, int]:
    """
    Decode one attribute starting at offset.

    Returns:
        (AttributeRecord, bytes_consumed)

    Raises:
        MalformedRequestError: If the attribute is truncated
    """
    return AttributeRecord.deserialize(data, offset)


def decode_attributes(data: bytes) -> List[AttributeRecord]:
    """
    Decode a flat run of attributes.

    Stops at the end-of-attributes tag or at the end of data. Standard group
    delimiter tags (0x00..0x0F) are skipped.
    """
    reader = ByteReader(data)
    records = []
    while not reader.is_empty():
        tag = reader.peek_u8()
        if tag == IPP_TAG_END:
            break
        if tag < IPP_DELIMITER_LIMIT:
            reader.read_u8()
            continue
        records.append(AttributeRecord.read(reader))
    return records


# ==============================================================================
# Request
# ==============================================================================

@dataclass(frozen=True)
class ProtocolRequest:
    """Parsed view of an inbound IPP request. Attributes are left unparsed."""
    version_major: int
    version_minor: int
    operation_id: int
    request_id: int
    attributes: bytes = b""

    @property
    def version(self) -> Tuple[int, int]:
        return (self.version_major, self.version_minor)


def parse_request(body: bytes) -> ProtocolRequest:
    """
    Parse the fixed IPP request header.

    The version pair is checked as soon as two bytes are available and
    nothing else is read if it does not match. Length is always validated
    before a field is extracted.

    Raises:
        MalformedRequestError: Body shorter than the 8-byte header
        UnsupportedVersionError: Version is not 2.0
    """
    if len(body) < 2:
        raise MalformedRequestError("missing version", len(body))

    major, minor = body[0], body[1]
    if (major, minor) != SUPPORTED_VERSION:
        raise UnsupportedVersionError(major, minor)

    if len(body) < IPP_HEADER_SIZE:
        raise MalformedRequestError(
            f"header needs {IPP_HEADER_SIZE} bytes, got {len(body)}",
            len(body)
        )

    reader = ByteReader(body)
    reader.read_u8()
    reader.read_u8()
    operation_id = reader.read_u16()
    request_id = reader.read_u32()

    return ProtocolRequest(
        version_major=major,
        version_minor=minor,
        operation_id=operation_id,
        request_id=request_id,
        attributes=body[reader.offset:],
    )


def encode_request(
    request_id: int,
    operation_id: int = IPP_OP_GET_PRINTER_ATTRIBUTES,
    version: Tuple[int, int] = SUPPORTED_VERSION,
    attributes: bytes = b"",
) -> bytes:
    """Build a raw IPP request body, as a calling client would."""
    writer = ByteWriter()
    writer.write_u8(version[0])
    writer.write_u8(version[1])
    writer.write_u16(operation_id)
    writer.write_u32(request_id)
    writer.write_raw(attributes)
    return writer.to_bytes()


# ==============================================================================
# Response
# ==============================================================================

@dataclass
class ProtocolResponse:
    """
    Outbound IPP response.

    Built fresh for every request and never cached.
    """
    request_id: int
    status_code: int = IPP_SUCCESSFUL_OK
    operation_attributes: Tuple[Tuple[str, str], ...] = OPERATION_ATTRIBUTES
    printer_attributes: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    version: Tuple[int, int] = SUPPORTED_VERSION

    def serialize(self) -> bytes:
        writer = ByteWriter()

        writer.write_u8(self.version[0])
        writer.write_u8(self.version[1])
        writer.write_u16(self.status_code)
        writer.write_u32(self.request_id)

        writer.write_u8(IPP_TAG_OPERATION)
        for name, value in self.operation_attributes:
            write_attribute(writer, name, value)

        writer.write_u8(IPP_TAG_PRINTER)
        for name, value in self.printer_attributes:
            write_attribute(writer, name, value)

        writer.write_u8(IPP_TAG_END)
        return writer.to_bytes()

    @classmethod
    def for_request(
        cls,
        request: ProtocolRequest,
        printer: PrinterAttributes
    ) -> "ProtocolResponse":
        """Successful response describing the given printer."""
        return cls(
            request_id=request.request_id,
            status_code=IPP_SUCCESSFUL_OK,
            operation_attributes=OPERATION_ATTRIBUTES,
            printer_attributes=tuple(printer),
            version=SUPPORTED_VERSION,
        )

    @classmethod
    def deserialize(cls, data: bytes) -> "ProtocolResponse":
        """
        Parse a response produced by serialize().

        Our group tags share byte values with the text value tag, so a group
        boundary is recognised as a group tag directly followed by either a
        value tag or the final end tag. Attribute names shorter than 0x4400
        bytes keep this unambiguous.
        """
        reader = ByteReader(data)
        major = reader.read_u8()
        minor = reader.read_u8()
        status_code = reader.read_u16()
        request_id = reader.read_u32()

        groups = {IPP_TAG_OPERATION: [], IPP_TAG_PRINTER: []}
        current = None

        while True:
            tag = reader.read_u8()
            if tag == IPP_TAG_END:
                break
            if tag in groups and _starts_group(reader):
                current = groups[tag]
                continue
            if current is None:
                raise MalformedRequestError(f"attribute outside a group at offset {reader.offset - 1}")
            reader.offset -= 1
            record = AttributeRecord.read(reader)
            current.append((record.name, record.value))

        return cls(
            request_id=request_id,
            status_code=status_code,
            operation_attributes=tuple(groups[IPP_TAG_OPERATION]),
            printer_attributes=tuple(groups[IPP_TAG_PRINTER]),
            version=(major, minor),
        )


def _starts_group(reader: ByteReader) -> bool:
    if reader.is_empty():
        return False
    following = reader.peek_u8()
    if following == IPP_TAG_END:
        # Empty trailing group
        return reader.remaining() == 1
    return following in (IPP_TAG_TEXT, IPP_TAG_PRINTER)


def build_response(request: ProtocolRequest, printer: PrinterAttributes) -> bytes:
    """Encode the successful response to a parsed request."""
    response = ProtocolResponse.for_request(request, printer)
    data = response.serialize()
    logger.debug(
        f"Built response for request {request.request_id}: "
        f"{len(printer)} printer attributes, {len(data)} bytes"
    )
    return data
