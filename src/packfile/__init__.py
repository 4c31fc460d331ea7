"""PackFile - many named blobs in a single container file."""

__version__ = "1.0.0"

from .core import (  # noqa: E402
    PackEntry,
    PackError,
    PackFile,
    PackFormatError,
    PackInvariantError,
    PackStats,
    open_pack,
)
from .config import PackConfig  # noqa: E402

__all__ = [
    "PackFile",
    "PackEntry",
    "PackStats",
    "PackConfig",
    "PackError",
    "PackFormatError",
    "PackInvariantError",
    "open_pack",
]
