"""Binary codec for the pack header and entry table."""

from __future__ import annotations

from typing import BinaryIO, Tuple

from packfile.core.constants import (
    ENTRY_FIXED_STRUCT,
    HEADER_MAGIC,
    HEADER_STRUCT,
    MAX_ENTRY_LENGTH,
    MAX_VARINT_BYTES,
    VERSION,
)
from packfile.core.errors import PackFormatError
from packfile.core.models import PackHeader

__all__ = [
    "decode_header",
    "decode_entry_record",
    "encode_header",
    "encode_entry_record",
    "encode_varint",
    "decode_varint",
    "read_at",
]


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    raw = stream.read(size)
    if len(raw) != size:
        raise PackFormatError(
            f"Truncated pack: expected {size} bytes for {what}, got {len(raw)}"
        )
    return raw


def read_at(stream: BinaryIO, position: int, length: int) -> bytes:
    """
    Read exactly ``length`` bytes at absolute ``position``.

    Raises:
        PackFormatError: If the stream ends before ``length`` bytes
    """
    if position < 0:
        raise ValueError(f"Invalid read position: {position}")
    stream.seek(position)
    return _read_exact(stream, length, f"content at {position}")


def encode_varint(value: int) -> bytes:
    """Encode an unsigned int, 7 bits per byte, low groups first."""
    if value < 0:
        raise ValueError(f"varint must be non-negative: {value}")

    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(stream: BinaryIO) -> int:
    """
    Decode an unsigned varint written by :func:`encode_varint`.

    Raises:
        PackFormatError: On truncation or more than MAX_VARINT_BYTES bytes
    """
    result = 0
    for i in range(MAX_VARINT_BYTES):
        (byte,) = _read_exact(stream, 1, "string length prefix")
        result |= (byte & 0x7F) << (7 * i)
        if not byte & 0x80:
            return result
    raise PackFormatError("Malformed string length prefix (too many bytes)")


def encode_header(stream: BinaryIO, entry_count: int, flags: int) -> None:
    stream.write(HEADER_STRUCT.pack(HEADER_MAGIC, VERSION, entry_count, flags))


def decode_header(stream: BinaryIO) -> Tuple[int, int]:
    """
    Parse and validate the fixed pack header.

    Returns:
        (entry_count, flags)

    Raises:
        PackFormatError: If magic, version, or entry count are invalid
    """
    raw = _read_exact(stream, HEADER_STRUCT.size, "header")
    header = PackHeader(*HEADER_STRUCT.unpack(raw))
    header.validate()
    return header.entry_count, header.flags


def encode_entry_record(stream: BinaryIO, name: str, length: int, offset: int) -> None:
    if not 0 <= length <= MAX_ENTRY_LENGTH:
        raise ValueError(f"Entry too large for pack format: {name!r} ({length} bytes)")

    name_bytes = name.encode("utf-8")
    stream.write(encode_varint(len(name_bytes)))
    stream.write(name_bytes)
    stream.write(ENTRY_FIXED_STRUCT.pack(length, offset))


def decode_entry_record(stream: BinaryIO) -> Tuple[str, int, int]:
    """
    Parse one entry record.

    Returns:
        (name, length, offset)
    """
    name_len = decode_varint(stream)
    name_bytes = _read_exact(stream, name_len, "entry name")
    try:
        name = name_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PackFormatError(f"Entry name is not valid UTF-8: {name_bytes!r}") from e

    fixed = _read_exact(stream, ENTRY_FIXED_STRUCT.size, f"entry {name!r}")
    length, offset = ENTRY_FIXED_STRUCT.unpack(fixed)
    return name, length, offset
