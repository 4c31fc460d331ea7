"""
PackFile data models and structures.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class PackEntry:
    """
    Represents a single named blob inside a pack.

    Attributes:
        name: Entry name (flat, case-sensitive, unique within the pack)
        length: Length of entry content in bytes
        offset: Byte offset relative to the content region start,
                or SENTINEL_OFFSET when it must be reallocated on save
        cached: In-memory copy of the content; authoritative when present
        dirty: True when cached content has not been written to disk yet
    """

    name: str
    length: int
    offset: int
    cached: Optional[bytes] = None
    dirty: bool = False

    def is_cached(self) -> bool:
        """Check if content is held in memory."""
        return self.cached is not None

    def needs_reallocation(self) -> bool:
        """Check if the on-disk location is unknown."""
        from packfile.core.constants import SENTINEL_OFFSET

        return self.offset == SENTINEL_OFFSET

    def __repr__(self) -> str:
        state = []
        if self.is_cached():
            state.append("CACHED")
        if self.dirty:
            state.append("DIRTY")

        state_repr = f" [{','.join(state)}]" if state else ""
        return (
            f"PackEntry(name={self.name!r}, "
            f"offset={self.offset}, "
            f"length={self.length}{state_repr})"
        )


@dataclass
class PackHeader:
    """
    Parsed fixed pack header.
    """

    magic: bytes
    version: int
    entry_count: int
    flags: int

    def validate(self):
        """Validate header integrity."""
        from packfile.core.constants import HEADER_MAGIC, VERSION
        from packfile.core.errors import PackFormatError

        if self.magic != HEADER_MAGIC:
            raise PackFormatError(
                f"Invalid pack header magic: {self.magic!r} (expected {HEADER_MAGIC!r})"
            )
        if self.version != VERSION:
            raise PackFormatError(
                f"Unsupported pack version: {self.version} (expected {VERSION})"
            )
        if self.entry_count < 0:
            raise PackFormatError(f"Invalid entry count: {self.entry_count}")

    def __repr__(self) -> str:
        return (
            f"PackHeader(version={self.version}, "
            f"entries={self.entry_count}, "
            f"flags={self.flags:#x})"
        )


@dataclass
class PackStats:
    """
    Statistics for an open pack.
    """

    total_files: int
    cached_files: int
    dirty_files: int
    content_size_bytes: int
    archive_size_bytes: int

    @property
    def overhead_bytes(self) -> int:
        """Bytes on disk not accounted for by entry content (header, table, holes)."""
        return max(self.archive_size_bytes - self.content_size_bytes, 0)

    def __repr__(self) -> str:
        return (
            f"PackStats(files={self.total_files} "
            f"[{self.cached_files} cached, {self.dirty_files} dirty], "
            f"content={self._human_size(self.content_size_bytes)}, "
            f"archive={self._human_size(self.archive_size_bytes)})"
        )

    @staticmethod
    def _human_size(size_bytes: int) -> str:
        """Format bytes as human-readable string."""
        for unit in ["B", "KB", "MB", "GB", "TB"]:
            if size_bytes < 1024:
                return f"{size_bytes:.1f}{unit}"
            size_bytes /= 1024
        return f"{size_bytes:.1f}PB"
