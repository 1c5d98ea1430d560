# byte_utils.py
"""
Binary packing/unpacking helpers and format constants for DEX headers.

Endianness: all multi-byte header values are **little-endian** (struct format prefix '<').

This module centralizes:
- format constants (magic, field offsets and widths, known versions)
- pack/unpack helpers for u32 fields
"""

import struct

# ---- Format constants ----
MAGIC_PREFIX = b'dex\n'     # 4 bytes, mandatory
MAGIC_SIZE = 8              # prefix + 3 version digits + '\0'
VERSION_OFFSET = 4
VERSION_SIZE = 3

CHECKSUM_OFFSET = 0x08
CHECKSUM_SIZE = 4
SIGNATURE_OFFSET = 0x0C
SIGNATURE_SIZE = 20

# Optional header fields, only read when the buffer reaches them
FILE_SIZE_OFFSET = 0x20
HEADER_SIZE_OFFSET = 0x24
ENDIAN_TAG_OFFSET = 0x28

# magic + checksum + signature
MIN_HEADER_SIZE = SIGNATURE_OFFSET + SIGNATURE_SIZE   # 0x20 = 32
STANDARD_HEADER_SIZE = 0x70
ENDIAN_CONSTANT = 0x12345678

# Adler-32 covers everything after the checksum field
CHECKSUM_REGION_START = CHECKSUM_OFFSET + CHECKSUM_SIZE   # 12

# Version byte policies for the magic check
VERSION_POLICY_ANY = 'any'
VERSION_POLICY_DIGITS = 'digits'
VERSION_POLICY_KNOWN = 'known'
VERSION_POLICIES = (VERSION_POLICY_ANY, VERSION_POLICY_DIGITS, VERSION_POLICY_KNOWN)

KNOWN_VERSIONS = (b'035', b'036', b'037', b'038', b'039', b'040', b'041')

# ---- Struct helpers (little-endian) ----
SIZE_U32 = struct.calcsize('<I')

def unpack_u32_at(buf, offset: int) -> int:
    """Read a u32 at `offset` without slicing a copy out of `buf`."""
    return struct.unpack_from('<I', buf, offset)[0]

def pack_u32_into(buf, offset: int, x: int) -> None:
    """Overwrite 4 bytes of a mutable buffer at `offset` with `x`."""
    struct.pack_into('<I', buf, offset, x)

def fmt_hex32(x: int) -> str:
    return f"0x{x:08x}"

# ---- Convenience / IO helpers ----
class DexIOError(RuntimeError):
    """Input unreadable or output unwritable; keeps the path and the OSError."""

    def __init__(self, action: str, path: str, cause: OSError):
        super().__init__(f"Cannot {action} '{path}': {cause.strerror or cause}")
        self.path = path
        self.cause = cause
