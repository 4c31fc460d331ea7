"""Prometheus metrics for PackFile operations."""

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
)

# Counters
PACK_LOADS = Counter(
    "packfile_loads_total", "Pack load attempts", ["outcome"]
)
PACK_SAVES = Counter(
    "packfile_saves_total",
    "Pack save calls by outcome (written, skipped, failed)",
    ["outcome"],
)
PACK_BYTES_WRITTEN = Counter(
    "packfile_bytes_written_total", "Total bytes written by pack rewrites"
)
PACK_CONTENT_READS = Counter(
    "packfile_content_reads_total",
    "Entry content reads by source (cache, disk)",
    ["source"],
)

# Histograms
PACK_SAVE_DURATION = Histogram(
    "packfile_save_duration_seconds",
    "Duration of full pack rewrites",
)

__all__ = [
    "PACK_LOADS",
    "PACK_SAVES",
    "PACK_BYTES_WRITTEN",
    "PACK_CONTENT_READS",
    "PACK_SAVE_DURATION",
    "generate_latest",
]
