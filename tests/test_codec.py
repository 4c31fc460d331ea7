"""Tests for the pack header and entry table codec."""
import io
import struct
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from packfile.core.codec import (  # noqa: E402
    decode_entry_record,
    decode_header,
    decode_varint,
    encode_entry_record,
    encode_header,
    encode_varint,
    read_at,
)
from packfile.core.constants import HEADER_SIZE, SENTINEL_OFFSET  # noqa: E402
from packfile.core.errors import PackFormatError  # noqa: E402


@pytest.mark.unit
def test_header_layout():
    """Header is magic, u16 version, i32 count, u32 flags, little-endian."""
    buf = io.BytesIO()
    encode_header(buf, 2, 0)

    raw = buf.getvalue()
    assert len(raw) == HEADER_SIZE == 21
    assert raw[:11] == b"SHARPPACKER"
    assert raw[11:] == b"\x01\x00" + b"\x02\x00\x00\x00" + b"\x00\x00\x00\x00"


@pytest.mark.unit
def test_decode_header():
    buf = io.BytesIO()
    encode_header(buf, 7, 0)
    buf.seek(0)

    assert decode_header(buf) == (7, 0)
    assert buf.tell() == HEADER_SIZE


@pytest.mark.unit
def test_decode_header_bad_magic():
    raw = b"NOTAPACKER!" + struct.pack("<HiI", 1, 0, 0)

    with pytest.raises(PackFormatError, match="Invalid pack header magic"):
        decode_header(io.BytesIO(raw))


@pytest.mark.unit
def test_decode_header_unsupported_version():
    raw = b"SHARPPACKER" + struct.pack("<HiI", 2, 0, 0)

    with pytest.raises(PackFormatError, match="Unsupported pack version"):
        decode_header(io.BytesIO(raw))


@pytest.mark.unit
def test_decode_header_negative_count():
    raw = b"SHARPPACKER" + struct.pack("<HiI", 1, -1, 0)

    with pytest.raises(PackFormatError, match="Invalid entry count"):
        decode_header(io.BytesIO(raw))


@pytest.mark.unit
def test_decode_header_truncated():
    with pytest.raises(PackFormatError, match="Truncated"):
        decode_header(io.BytesIO(b"SHARPPACK"))


@pytest.mark.unit
def test_format_error_is_value_error():
    """Callers catching ValueError keep working."""
    with pytest.raises(ValueError):
        decode_header(io.BytesIO(b""))


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, encoded",
    [
        (0, b"\x00"),
        (127, b"\x7f"),
        (128, b"\x80\x01"),
        (300, b"\xac\x02"),
        (16384, b"\x80\x80\x01"),
    ],
)
def test_varint_encoding(value, encoded):
    assert encode_varint(value) == encoded
    assert decode_varint(io.BytesIO(encoded)) == value


@pytest.mark.unit
def test_varint_rejects_negative():
    with pytest.raises(ValueError):
        encode_varint(-1)


@pytest.mark.unit
def test_varint_too_long():
    with pytest.raises(PackFormatError, match="too many bytes"):
        decode_varint(io.BytesIO(b"\xff" * 6))


@pytest.mark.unit
def test_varint_truncated():
    with pytest.raises(PackFormatError, match="Truncated"):
        decode_varint(io.BytesIO(b"\x80"))


@pytest.mark.unit
def test_entry_record_layout():
    buf = io.BytesIO()
    encode_entry_record(buf, "test1", 11, 0)

    assert buf.getvalue() == b"\x05test1" + b"\x0b\x00\x00\x00" + b"\x00\x00\x00\x00"


@pytest.mark.unit
def test_entry_record_sentinel_offset():
    buf = io.BytesIO()
    encode_entry_record(buf, "a", 3, SENTINEL_OFFSET)

    assert buf.getvalue().endswith(b"\xff\xff\xff\xff")
    buf.seek(0)
    assert decode_entry_record(buf) == ("a", 3, SENTINEL_OFFSET)


@pytest.mark.unit
def test_entry_record_long_and_unicode_names():
    long_name = "x" * 200
    buf = io.BytesIO()
    encode_entry_record(buf, long_name, 1, 5)
    encode_entry_record(buf, "zażółć", 2, 6)

    assert buf.getvalue()[:2] == b"\xc8\x01"

    buf.seek(0)
    assert decode_entry_record(buf) == (long_name, 1, 5)
    assert decode_entry_record(buf) == ("zażółć", 2, 6)


@pytest.mark.unit
def test_entry_record_truncated():
    buf = io.BytesIO()
    encode_entry_record(buf, "test1", 11, 0)
    raw = buf.getvalue()[:-3]

    with pytest.raises(PackFormatError, match="Truncated"):
        decode_entry_record(io.BytesIO(raw))


@pytest.mark.unit
def test_entry_record_invalid_utf8_name():
    raw = b"\x02\xff\xfe" + struct.pack("<ii", 0, 0)

    with pytest.raises(PackFormatError, match="UTF-8"):
        decode_entry_record(io.BytesIO(raw))


@pytest.mark.unit
def test_entry_record_rejects_negative_length():
    with pytest.raises(ValueError, match="too large"):
        encode_entry_record(io.BytesIO(), "bad", -1, 0)


@pytest.mark.unit
def test_read_at():
    stream = io.BytesIO(b"0123456789")

    assert read_at(stream, 3, 4) == b"3456"
    assert read_at(stream, 0, 2) == b"01"
    assert read_at(stream, 10, 0) == b""


@pytest.mark.unit
def test_read_at_short_read():
    with pytest.raises(PackFormatError, match="Truncated"):
        read_at(io.BytesIO(b"0123"), 2, 10)


@pytest.mark.unit
def test_read_at_negative_position():
    with pytest.raises(ValueError):
        read_at(io.BytesIO(b"0123"), -1, 1)
