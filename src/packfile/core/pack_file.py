"""PackFile: many named blobs multiplexed into one backing file."""

from __future__ import annotations

import io
import os
import time
from typing import BinaryIO, Dict, List, Optional, Tuple

from packfile.config.config import PackConfig
from packfile.core.codec import (
    decode_entry_record,
    decode_header,
    encode_entry_record,
    encode_header,
    read_at,
)
from packfile.core.constants import FLAG_NONE, SENTINEL_OFFSET
from packfile.core.errors import PackFormatError, PackInvariantError
from packfile.core.models import PackEntry, PackStats
from packfile.monitoring.metrics import (
    PACK_BYTES_WRITTEN,
    PACK_CONTENT_READS,
    PACK_LOADS,
    PACK_SAVE_DURATION,
    PACK_SAVES,
)
from packfile.utils.logging import get_logger, log_context

logger = get_logger(__name__)


class PackFile:
    """
    A file that holds several others.

    Construction does no I/O. Call :meth:`load` to read an existing pack, or
    start adding entries and call :meth:`save` to create one.

    Mutations (add/update/move/remove/cache/uncache) report precondition
    failures by returning False; only format and invariant problems raise.
    """

    def __init__(self, path: str, config: Optional[PackConfig] = None) -> None:
        self.path = path
        self.config = config or PackConfig()
        self.flags: int = FLAG_NONE
        self.content_base: int = 0
        self._entries: List[PackEntry] = []
        self._index: Dict[str, PackEntry] = {}
        self._has_removals = False
        self._loaded = False

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Read the header and entry table from disk, discarding in-memory state.

        Raises:
            FileNotFoundError: If the backing file does not exist
            PackFormatError: If the header or table is invalid
        """
        self._reset()
        try:
            with open(self.path, "rb") as f:
                entry_count, flags = decode_header(f)

                entries: List[PackEntry] = []
                index: Dict[str, PackEntry] = {}
                for _ in range(entry_count):
                    name, length, offset = decode_entry_record(f)
                    if not name:
                        raise PackFormatError("Entry with empty name")
                    if name in index:
                        raise PackFormatError(f"Duplicate entry ({name})")
                    if length < 0:
                        raise PackFormatError(
                            f"Invalid length for entry {name!r}: {length}"
                        )
                    # Sentinel is the only negative offset allowed
                    if offset < 0 and offset != SENTINEL_OFFSET:
                        raise PackFormatError(
                            f"Invalid offset for entry {name!r}: {offset}"
                        )
                    entry = PackEntry(name=name, length=length, offset=offset)
                    entries.append(entry)
                    index[name] = entry

                content_base = f.tell()
        except FileNotFoundError:
            PACK_LOADS.labels(outcome="missing").inc()
            raise
        except PackFormatError as exc:
            PACK_LOADS.labels(outcome="invalid").inc()
            logger.error("pack_load_failed", path=self.path, error=str(exc))
            raise

        self.flags = flags
        self._entries = entries
        self._index = index
        self.content_base = content_base
        self._loaded = True

        PACK_LOADS.labels(outcome="ok").inc()
        logger.debug(
            "pack_loaded",
            path=self.path,
            entry_count=entry_count,
            content_base=content_base,
        )

    def _reset(self) -> None:
        self.flags = FLAG_NONE
        self.content_base = 0
        self._entries = []
        self._index = {}
        self._has_removals = False
        self._loaded = False

    @property
    def loaded(self) -> bool:
        """True after a successful load() or save()."""
        return self._loaded

    # ------------------------------------------------------------------
    # Entry table
    # ------------------------------------------------------------------

    @property
    def file_count(self) -> int:
        return len(self._entries)

    def file_exists(self, name: str) -> bool:
        """Check if an entry exists. Zero-length rows count as absent."""
        entry = self._index.get(name)
        if entry is None:
            return False
        return entry.length > 0

    def file_length(self, name: str) -> int:
        """Return the entry length in bytes, 0 if not found."""
        entry = self._index.get(name)
        return entry.length if entry is not None else 0

    def get_files(self) -> List[str]:
        return list(self._index.keys())

    def get_entry(self, name: str) -> Optional[PackEntry]:
        return self._index.get(name)

    def _allocate_offset(self) -> int:
        # End of the content region, unknown while any entry awaits reallocation
        offset = 0
        for entry in self._entries:
            if entry.needs_reallocation():
                return SENTINEL_OFFSET
            offset = max(offset, entry.offset + entry.length)
        return offset

    def add_file(self, name: str, data: bytes) -> bool:
        """
        Add a new entry.

        Returns:
            False if the name is empty or already taken

        Raises:
            TypeError: If data is not bytes-like
        """
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError("data must be bytes-like")
        if not name or name in self._index:
            return False

        entry = PackEntry(
            name=name,
            length=len(data),
            offset=self._allocate_offset(),
            cached=bytes(data),
            dirty=True,
        )
        self._entries.append(entry)
        self._index[name] = entry
        return True

    def update_file(self, name: str, data: bytes) -> bool:
        """Replace an entry's content. Growing content forces reallocation."""
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError("data must be bytes-like")
        entry = self._index.get(name)
        if entry is None:
            return False

        entry.cached = bytes(data)
        entry.dirty = True
        if len(data) > entry.length:
            entry.offset = SENTINEL_OFFSET
        entry.length = len(data)
        return True

    def move_file(self, name: str, new_name: str) -> bool:
        """Rename an entry. Fails if new_name is taken by a live entry."""
        entry = self._index.get(name)
        if entry is None or not new_name:
            return False
        if self.file_exists(new_name):
            return False

        # A zero-length row under new_name is displaced, not shadowed
        displaced = self._index.get(new_name)
        if displaced is not None and displaced is not entry:
            self._entries.remove(displaced)
            self._has_removals = True

        del self._index[name]
        self._index[new_name] = entry
        entry.name = new_name
        entry.dirty = True
        return True

    def remove_file(self, name: str) -> bool:
        """Remove an entry. Its disk space is reclaimed by the next save()."""
        entry = self._index.pop(name, None)
        if entry is None:
            return False

        self._entries.remove(entry)
        self._has_removals = True
        return True

    def get_stats(self) -> PackStats:
        try:
            archive_size = os.path.getsize(self.path)
        except OSError:
            archive_size = 0

        return PackStats(
            total_files=len(self._entries),
            cached_files=sum(1 for e in self._entries if e.is_cached()),
            dirty_files=sum(1 for e in self._entries if e.dirty),
            content_size_bytes=sum(e.length for e in self._entries),
            archive_size_bytes=archive_size,
        )

    # ------------------------------------------------------------------
    # Content access
    # ------------------------------------------------------------------

    def _disk_position(self, entry: PackEntry) -> int:
        if entry.offset < 0:
            raise PackInvariantError(
                f"Entry {entry.name!r} has no cached data and no location on disk"
            )
        return self.content_base + entry.offset

    def _read_from_disk(self, entry: PackEntry) -> bytes:
        position = self._disk_position(entry)
        with open(self.path, "rb") as f:
            data = read_at(f, position, entry.length)
        PACK_CONTENT_READS.labels(source="disk").inc()
        return data

    def get_file(self, name: str) -> Tuple[Optional[BinaryIO], int]:
        """
        Return a stream positioned at the entry content, and its length.

        The caller owns the stream: close it after use and do not read past
        the returned length. Returns (None, 0) if the entry is not found.
        """
        entry = self._index.get(name)
        if entry is None:
            return None, 0

        if entry.cached is not None:
            PACK_CONTENT_READS.labels(source="cache").inc()
            return io.BytesIO(entry.cached), entry.length

        position = self._disk_position(entry)
        f = open(self.path, "rb")
        try:
            f.seek(position)
        except BaseException:
            f.close()
            raise
        PACK_CONTENT_READS.labels(source="disk").inc()
        return f, entry.length

    def get_file_raw(self, name: str, cache: bool = False) -> Optional[bytes]:
        """
        Return the full entry content, or None if not found.

        Args:
            name: Entry name
            cache: Keep the loaded content in memory for later reads
        """
        entry = self._index.get(name)
        if entry is None:
            return None

        if entry.cached is not None:
            PACK_CONTENT_READS.labels(source="cache").inc()
            return entry.cached

        data = self._read_from_disk(entry)
        if cache:
            entry.cached = data
        return data

    def cache_file(self, name: str) -> bool:
        """Load an entry into memory. Does not mark it dirty."""
        entry = self._index.get(name)
        if entry is None or entry.cached is not None:
            return False

        entry.cached = self._read_from_disk(entry)
        return True

    def uncache_file(self, name: str) -> bool:
        """
        Drop an entry's in-memory content.

        Dirty entries are refused unless ``allow_dirty_uncache`` is set,
        in which case the unsaved content is lost.
        """
        entry = self._index.get(name)
        if entry is None or entry.cached is None:
            return False
        if entry.dirty and not self.config.allow_dirty_uncache:
            logger.warning("uncache_refused_dirty", path=self.path, entry=name)
            return False

        entry.cached = None
        return True

    def is_cached(self, name: str) -> bool:
        entry = self._index.get(name)
        return entry is not None and entry.cached is not None

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def needs_save(self) -> bool:
        """True when save() would rewrite the backing file."""
        if self._has_removals:
            return True
        return any(e.dirty or e.needs_reallocation() for e in self._entries)

    def save(self) -> bool:
        """
        Write pending changes by rewriting the whole pack.

        Returns:
            True if the file was rewritten, False if there was nothing to do

        Raises:
            PackInvariantError: If an entry has neither cached data nor a
                location on disk; the original file is left untouched
        """
        if not self.needs_save():
            PACK_SAVES.labels(outcome="skipped").inc()
            logger.debug("pack_save_skipped", path=self.path)
            return False

        start = time.perf_counter()
        with log_context(pack_path=self.path):
            try:
                new_offsets, new_base, written = self._rewrite()
            except Exception as exc:
                PACK_SAVES.labels(outcome="failed").inc()
                logger.error("pack_save_failed", exc_info=exc)
                raise

            for entry, offset in zip(self._entries, new_offsets):
                entry.offset = offset
                entry.dirty = False
            self.content_base = new_base
            self._has_removals = False
            self._loaded = True

            duration_seconds = time.perf_counter() - start
            PACK_SAVES.labels(outcome="written").inc()
            PACK_BYTES_WRITTEN.inc(written)
            PACK_SAVE_DURATION.observe(duration_seconds)
            logger.info(
                "pack_saved",
                entry_count=len(self._entries),
                size_bytes=written,
                duration_seconds=duration_seconds,
            )
        return True

    def _rewrite(self) -> Tuple[List[int], int, int]:
        """
        Serialize table and content into a temp file and move it into place.

        In-memory entries are not modified; the caller commits the returned
        offsets once the replace has succeeded.

        Returns:
            (new offsets in table order, new content base, bytes written)
        """
        tmp_path = self.path + self.config.temp_suffix
        directory = os.path.dirname(self.path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

        old_base = self.content_base
        new_offsets: List[int] = []

        try:
            with open(tmp_path, "wb") as dst:
                src: Optional[BinaryIO] = None
                if os.path.exists(self.path):
                    src = open(self.path, "rb")
                try:
                    # Pass 1: table with sequential offsets
                    encode_header(dst, len(self._entries), self.flags)
                    offset = 0
                    for entry in self._entries:
                        encode_entry_record(dst, entry.name, entry.length, offset)
                        new_offsets.append(offset)
                        offset += entry.length

                    new_base = dst.tell()

                    # Pass 2: content, same order
                    for entry in self._entries:
                        if entry.cached is not None:
                            data = entry.cached
                        elif entry.needs_reallocation() or src is None:
                            raise PackInvariantError(
                                f"No data found when trying to write entry {entry.name!r}"
                            )
                        else:
                            data = read_at(src, old_base + entry.offset, entry.length)
                        dst.write(data)

                    written = dst.tell()
                    dst.flush()
                    if self.config.fsync_on_save:
                        os.fsync(dst.fileno())
                finally:
                    if src is not None:
                        src.close()

            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        return new_offsets, new_base, written

    def __contains__(self, name: str) -> bool:
        return self.file_exists(name)

    def __len__(self) -> int:
        return self.file_count

    def __repr__(self) -> str:
        return f"PackFile(path={self.path!r}, entries={len(self._entries)})"


def open_pack(path: str, config: Optional[PackConfig] = None) -> PackFile:
    """Return a PackFile handle for ``path`` without reading it."""
    return PackFile(path, config=config)
