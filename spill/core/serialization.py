"""
Spill Serialization Utilities

All multi-byte integers are BIG-ENDIAN, without exception.
"""

from __future__ import annotations
import struct
from typing import Tuple

from spill.constants import IPP_MAX_FIELD_LENGTH
from spill.errors import AttributeTooLargeError, MalformedRequestError


# ==============================================================================
# Integer Serialization (Big-Endian)
# ==============================================================================

def serialize_u8(value: int) -> bytes:
    """Serialize unsigned 8-bit integer."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"u8 value out of range: {value}")
    return bytes([value])


def serialize_u16(value: int) -> bytes:
    """Serialize unsigned 16-bit integer (big-endian)."""
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"u16 value out of range: {value}")
    return struct.pack(">H", value)


def serialize_u32(value: int) -> bytes:
    """Serialize unsigned 32-bit integer (big-endian)."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"u32 value out of range: {value}")
    return struct.pack(">I", value)


def serialize_text(value: str, field: str = "value") -> bytes:
    """
    Serialize text with a u16 length prefix.
    Format: u16(length) || utf-8 bytes
    """
    data = value.encode("utf-8")
    if len(data) > IPP_MAX_FIELD_LENGTH:
        raise AttributeTooLargeError(field, len(data), IPP_MAX_FIELD_LENGTH)
    return serialize_u16(len(data)) + data


# ==============================================================================
# Integer Deserialization (Big-Endian)
# ==============================================================================

def _require(data: bytes, offset: int, size: int) -> None:
    if offset < 0 or offset + size > len(data):
        raise MalformedRequestError(
            f"need {size} bytes at offset {offset}, have {max(len(data) - offset, 0)}",
            len(data)
        )


def deserialize_u8(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 8-bit integer.
    Returns (value, bytes_consumed).
    """
    _require(data, offset, 1)
    return data[offset], 1


def deserialize_u16(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 16-bit integer (big-endian).
    Returns (value, bytes_consumed).
    """
    _require(data, offset, 2)
    return struct.unpack(">H", data[offset:offset + 2])[0], 2


def deserialize_u32(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 32-bit integer (big-endian).
    Returns (value, bytes_consumed).
    """
    _require(data, offset, 4)
    return struct.unpack(">I", data[offset:offset + 4])[0], 4


def deserialize_text(data: bytes, offset: int = 0) -> Tuple[str, int]:
    """
    Deserialize u16 length-prefixed utf-8 text.
    Returns (value, bytes_consumed).
    """
    length, size = deserialize_u16(data, offset)
    _require(data, offset + size, length)
    start = offset + size
    try:
        value = data[start:start + length].decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedRequestError(f"invalid utf-8 text at offset {start}: {e}", len(data))
    return value, size + length


class ByteReader:
    """
    Helper class for sequential deserialization.

    Every read is bounds-checked; running off the end raises
    MalformedRequestError instead of returning short data.
    """

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def read_u8(self) -> int:
        value, size = deserialize_u8(self.data, self.offset)
        self.offset += size
        return value

    def read_u16(self) -> int:
        value, size = deserialize_u16(self.data, self.offset)
        self.offset += size
        return value

    def read_u32(self) -> int:
        value, size = deserialize_u32(self.data, self.offset)
        self.offset += size
        return value

    def read_text(self) -> str:
        """Read u16 length-prefixed text."""
        value, size = deserialize_text(self.data, self.offset)
        self.offset += size
        return value

    def peek_u8(self) -> int:
        value, _ = deserialize_u8(self.data, self.offset)
        return value

    def remaining(self) -> int:
        """Return number of bytes remaining."""
        return len(self.data) - self.offset

    def is_empty(self) -> bool:
        """Check if all bytes have been read."""
        return self.offset >= len(self.data)


class ByteWriter:
    """
    Helper class for sequential serialization.
    """

    def __init__(self):
        self.buffer = bytearray()

    def write_u8(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u8(value))
        return self

    def write_u16(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u16(value))
        return self

    def write_u32(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u32(value))
        return self

    def write_text(self, value: str, field: str = "value") -> "ByteWriter":
        self.buffer.extend(serialize_text(value, field))
        return self

    def write_raw(self, data: bytes) -> "ByteWriter":
        self.buffer.extend(data)
        return self

    def to_bytes(self) -> bytes:
        return bytes(self.buffer)

    def __len__(self) -> int:
        return len(self.buffer)
