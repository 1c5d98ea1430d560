# header_utils.py

"""
Header view & parser for DEX files.

Functions:
- parse_header(buf, version_policy='any') -> DexHeader
- write_checksum(buf, value) -> None
- header_warnings(header) -> list of str

A DexHeader keeps a reference to the caller's buffer and reads fields on
demand; it never copies the file.
"""

from typing import List, Optional

from byte_utils import (
    MAGIC_PREFIX, MAGIC_SIZE, VERSION_OFFSET, VERSION_SIZE,
    CHECKSUM_OFFSET, SIGNATURE_OFFSET, SIGNATURE_SIZE,
    FILE_SIZE_OFFSET, HEADER_SIZE_OFFSET, ENDIAN_TAG_OFFSET,
    MIN_HEADER_SIZE, STANDARD_HEADER_SIZE, ENDIAN_CONSTANT,
    CHECKSUM_REGION_START, SIZE_U32,
    VERSION_POLICY_ANY, VERSION_POLICY_KNOWN,
    VERSION_POLICIES, KNOWN_VERSIONS,
    unpack_u32_at, pack_u32_into, fmt_hex32
)


class DexFormatError(ValueError):
    """Buffer is not a DEX file this tool can handle."""


class TooShortError(DexFormatError):
    pass


class BadMagicError(DexFormatError):
    pass


class DexHeader:
    """
    View over the header of a DEX buffer.

    Only the magic, checksum and signature are guaranteed to be present.
    file_size, header_size and endian_tag return None when the buffer
    does not reach them.
    """

    def __init__(self, buf):
        self._buf = buf

    @property
    def buffer(self):
        return self._buf

    @property
    def magic(self) -> bytes:
        return bytes(self._buf[0:MAGIC_SIZE])

    @property
    def version(self) -> bytes:
        return bytes(self._buf[VERSION_OFFSET:VERSION_OFFSET + VERSION_SIZE])

    @property
    def checksum(self) -> int:
        return unpack_u32_at(self._buf, CHECKSUM_OFFSET)

    @property
    def signature(self) -> bytes:
        return bytes(self._buf[SIGNATURE_OFFSET:SIGNATURE_OFFSET + SIGNATURE_SIZE])

    @property
    def region_start(self) -> int:
        return CHECKSUM_REGION_START

    @property
    def region_end(self) -> int:
        return len(self._buf)

    @property
    def region_length(self) -> int:
        return self.region_end - self.region_start

    def _optional_u32(self, offset: int) -> Optional[int]:
        if len(self._buf) < offset + SIZE_U32:
            return None
        return unpack_u32_at(self._buf, offset)

    @property
    def file_size(self) -> Optional[int]:
        return self._optional_u32(FILE_SIZE_OFFSET)

    @property
    def header_size(self) -> Optional[int]:
        return self._optional_u32(HEADER_SIZE_OFFSET)

    @property
    def endian_tag(self) -> Optional[int]:
        return self._optional_u32(ENDIAN_TAG_OFFSET)

    def __repr__(self):
        return (f"DexHeader(version={self.version!r}, checksum={fmt_hex32(self.checksum)}, "
                f"length={len(self._buf)})")


def _check_version(magic: bytes, version_policy: str) -> None:
    if version_policy == VERSION_POLICY_ANY:
        return
    version = magic[VERSION_OFFSET:VERSION_OFFSET + VERSION_SIZE]
    if not version.isdigit() or magic[MAGIC_SIZE - 1] != 0:
        raise BadMagicError(f"Malformed DEX version bytes in magic: {magic!r}")
    if version_policy == VERSION_POLICY_KNOWN and version not in KNOWN_VERSIONS:
        raise BadMagicError(f"Unsupported DEX version {version.decode('ascii')}")


def parse_header(buf, version_policy: str = VERSION_POLICY_ANY) -> DexHeader:
    """
    Validate `buf` as a DEX file and return a DexHeader viewing it.

    - buf: whole file contents (bytes, bytearray or memoryview); not copied
    - version_policy: 'any' checks only the 'dex\\n' prefix, 'digits' also
      requires three ASCII digits and a trailing NUL, 'known' also requires
      one of KNOWN_VERSIONS

    Raises TooShortError, BadMagicError, or ValueError for an unknown policy.
    """
    if version_policy not in VERSION_POLICIES:
        raise ValueError(f"Unknown version policy {version_policy!r}; expected one of {VERSION_POLICIES}")

    if len(buf) < MIN_HEADER_SIZE:
        raise TooShortError(f"File too small for DEX header (need {MIN_HEADER_SIZE} bytes, got {len(buf)})")

    magic = bytes(buf[0:MAGIC_SIZE])
    if magic[:len(MAGIC_PREFIX)] != MAGIC_PREFIX:
        raise BadMagicError(f"Bad magic: not a DEX file (starts with {magic[:len(MAGIC_PREFIX)]!r})")
    _check_version(magic, version_policy)

    return DexHeader(buf)


def write_checksum(buf, value: int) -> None:
    """
    Overwrite the checksum field of `buf` in place with `value` (little-endian).
    `buf` must be mutable and must already have passed parse_header.
    """
    pack_u32_into(buf, CHECKSUM_OFFSET, value & 0xFFFFFFFF)


def header_warnings(header: DexHeader) -> List[str]:
    """Non-fatal consistency notes about the header fields."""
    warnings = []
    if header.magic[MAGIC_SIZE - 1] != 0:
        warnings.append("magic does not end with 0x00")

    file_size = header.file_size
    if file_size is not None and file_size != len(header.buffer):
        warnings.append(f"file_size field is {file_size} but file is {len(header.buffer)} bytes")

    header_size = header.header_size
    if header_size is not None and header_size != STANDARD_HEADER_SIZE:
        warnings.append(f"header_size is {header_size:#x}, expected {STANDARD_HEADER_SIZE:#x}")

    endian_tag = header.endian_tag
    if endian_tag is not None and endian_tag != ENDIAN_CONSTANT:
        warnings.append(f"endian_tag is {fmt_hex32(endian_tag)}, expected {fmt_hex32(ENDIAN_CONSTANT)}")
    return warnings
