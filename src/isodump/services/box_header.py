import struct
from dataclasses import dataclass

from ..errors import BoxTooShort, TruncatedHeader

# Smallest possible box: 32-bit size + 4-byte type
MIN_HEADER_SIZE = 8
EXTENDED_HEADER_SIZE = 16


@dataclass(frozen=True)
class BoxHeader:
    """Decoded box header"""

    type_code: bytes
    total_size: int
    header_length: int = MIN_HEADER_SIZE

    @property
    def name(self) -> str:
        return type_name(self.type_code)

    @property
    def payload_size(self) -> int:
        return self.total_size - self.header_length


def type_name(type_code: bytes) -> str:
    """Render a 4-byte type code as text, one character per byte"""
    return type_code.decode("latin-1")


def decode_header(data, offset: int, total_length: int) -> BoxHeader:
    """
    Decode the box header starting at offset

    Args:
        data: Buffer holding the container (bytes, bytearray, mmap or memoryview)
        offset: Absolute offset of the header
        total_length: End of the addressable region (a size field of 0 extends to it)

    Returns:
        BoxHeader with the size resolved to a concrete byte count

    Raises:
        TruncatedHeader: If fewer than 8 (16 for extended size) bytes remain
        BoxTooShort: If the resolved size cannot hold the header itself
    """
    remaining = total_length - offset
    if remaining < MIN_HEADER_SIZE:
        raise TruncatedHeader(offset, f"Only {max(remaining, 0)} bytes left for box header")

    size, type_code = struct.unpack(">I4s", data[offset : offset + 8])
    header_length = MIN_HEADER_SIZE

    if size == 0:
        size = remaining
    elif size == 1:
        if remaining < EXTENDED_HEADER_SIZE:
            raise TruncatedHeader(offset, "Extended size header needs 16 bytes")
        size = struct.unpack(">Q", data[offset + 8 : offset + 16])[0]
        header_length = EXTENDED_HEADER_SIZE

    if size < header_length:
        raise BoxTooShort(offset, f"Box size {size} below header length {header_length}")

    return BoxHeader(type_code=bytes(type_code), total_size=size, header_length=header_length)


def encode_header(type_code: bytes, size: int) -> bytes:
    """Build a box header for a box of the given total size (header included)"""
    if len(type_code) != 4:
        raise ValueError(f"Box type must be 4 bytes, got {len(type_code)}")

    if size <= 0xFFFFFFFF and size >= MIN_HEADER_SIZE:
        return struct.pack(">I4s", size, type_code)
    if size < EXTENDED_HEADER_SIZE:
        raise ValueError(f"Box size {size} is too small")
    return struct.pack(">I4sQ", 1, type_code, size)
