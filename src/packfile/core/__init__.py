"""PackFile core functionality."""

from .errors import PackError, PackFormatError, PackInvariantError
from .models import PackEntry, PackHeader, PackStats
from .pack_file import PackFile, open_pack

__all__ = [
    "PackFile",
    "PackEntry",
    "PackHeader",
    "PackStats",
    "PackError",
    "PackFormatError",
    "PackInvariantError",
    "open_pack",
]
