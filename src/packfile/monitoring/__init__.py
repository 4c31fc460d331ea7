"""
Monitoring utilities for PackFile.
"""

from packfile.monitoring.metrics import (
    PACK_BYTES_WRITTEN,
    PACK_CONTENT_READS,
    PACK_LOADS,
    PACK_SAVE_DURATION,
    PACK_SAVES,
    generate_latest,
)

__all__ = [
    "PACK_LOADS",
    "PACK_SAVES",
    "PACK_BYTES_WRITTEN",
    "PACK_CONTENT_READS",
    "PACK_SAVE_DURATION",
    "generate_latest",
]
