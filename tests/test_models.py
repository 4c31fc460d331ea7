"""Tests for PackFile data models."""
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from packfile.core.constants import HEADER_MAGIC, SENTINEL_OFFSET, VERSION  # noqa: E402
from packfile.core.errors import PackFormatError  # noqa: E402
from packfile.core.models import PackEntry, PackHeader, PackStats  # noqa: E402


@pytest.mark.unit
def test_pack_entry_basic():
    """Test basic PackEntry creation."""
    entry = PackEntry(name="asset.png", length=50, offset=100)

    assert entry.name == "asset.png"
    assert entry.length == 50
    assert entry.offset == 100
    assert not entry.is_cached()
    assert not entry.dirty
    assert not entry.needs_reallocation()


@pytest.mark.unit
def test_pack_entry_state():
    entry = PackEntry(
        name="new.bin", length=3, offset=SENTINEL_OFFSET, cached=b"abc", dirty=True
    )

    assert entry.is_cached()
    assert entry.needs_reallocation()


@pytest.mark.unit
def test_pack_entry_repr():
    entry = PackEntry(name="a", length=3, offset=0, cached=b"abc", dirty=True)

    text = repr(entry)
    assert "name='a'" in text
    assert "CACHED" in text
    assert "DIRTY" in text
    assert "abc" not in text


@pytest.mark.unit
def test_pack_header_validate():
    PackHeader(magic=HEADER_MAGIC, version=VERSION, entry_count=0, flags=0).validate()

    with pytest.raises(PackFormatError, match="magic"):
        PackHeader(magic=b"X" * 11, version=VERSION, entry_count=0, flags=0).validate()
    with pytest.raises(PackFormatError, match="version"):
        PackHeader(magic=HEADER_MAGIC, version=0, entry_count=0, flags=0).validate()
    with pytest.raises(PackFormatError, match="entry count"):
        PackHeader(magic=HEADER_MAGIC, version=VERSION, entry_count=-5, flags=0).validate()


@pytest.mark.unit
def test_pack_header_repr():
    header = PackHeader(magic=HEADER_MAGIC, version=1, entry_count=3, flags=0)

    assert repr(header) == "PackHeader(version=1, entries=3, flags=0x0)"


@pytest.mark.unit
def test_pack_stats():
    stats = PackStats(
        total_files=3,
        cached_files=1,
        dirty_files=1,
        content_size_bytes=2048,
        archive_size_bytes=2100,
    )

    assert stats.overhead_bytes == 52
    assert "files=3" in repr(stats)
    assert "2.0KB" in repr(stats)


@pytest.mark.unit
def test_pack_stats_unsaved():
    stats = PackStats(
        total_files=1,
        cached_files=1,
        dirty_files=1,
        content_size_bytes=10,
        archive_size_bytes=0,
    )

    assert stats.overhead_bytes == 0
