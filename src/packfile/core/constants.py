"""
PackFile format constants, magic marker, and struct layouts.
"""
import struct

# Magic marker (raw ASCII, no length prefix, no terminator)
HEADER_MAGIC = b"SHARPPACKER"
VERSION = 1

# Struct formats
# Header: magic(11) + version(2) + entry_count(4, signed) + flags(4) = 21 bytes
HEADER_STRUCT = struct.Struct("<11sHiI")

# Entry record fixed part, after the varint-prefixed name: length(4) + offset(4)
ENTRY_FIXED_STRUCT = struct.Struct("<ii")

# Sizes
HEADER_SIZE = HEADER_STRUCT.size  # 21 bytes

# Flags (bitwise, reserved)
FLAG_NONE = 0

# Offset meaning "location unknown, reallocate on next save"
SENTINEL_OFFSET = -1

# Validation constants
MAX_ENTRY_LENGTH = 2**31 - 1  # int32 length/offset fields
MAX_VARINT_BYTES = 5  # enough for a 32-bit length prefix

# Default chunk size for streaming extraction (1 MB)
DEFAULT_READ_CHUNK_SIZE = 1024 * 1024
