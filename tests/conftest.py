import sys
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

# Ensure src/ is on sys.path for local test runs without installation
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from packfile.core.codec import encode_entry_record, encode_header  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line("markers", "cli: command line interface tests")


@pytest.fixture
def pack_path(tmp_path: Path) -> Path:
    """Path for a pack that does not exist yet."""
    return tmp_path / "test.pck"


@pytest.fixture
def write_raw_pack():
    """
    Write a pack byte-by-byte, bypassing PackFile.

    Takes a list of (name, length, offset) records and the raw content region,
    so tests can build files PackFile itself would never produce.
    """

    def _write(
        path: Path,
        records: List[Tuple[str, int, int]],
        content: bytes = b"",
        flags: int = 0,
    ) -> None:
        with path.open("wb") as f:
            encode_header(f, len(records), flags)
            for name, length, offset in records:
                encode_entry_record(f, name, length, offset)
            f.write(content)

    return _write


@pytest.fixture
def sample_files() -> Dict[str, bytes]:
    return {
        "test1": b"Hello world",
        "test2": b"This is a string",
    }
