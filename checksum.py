# checksum.py
"""
Adler-32 checksum engine for DEX files.

The stored checksum (offset 8) is the Adler-32 of every byte after the
checksum field, i.e. the signature and the rest of the file.

Functions:
- compute_adler32(data) -> int
- current_checksum(header) -> int
- region_checksum(header, buf=None) -> ChecksumResult
- expected_checksum(header, buf=None) -> int
- check_checksum(header) -> bool
- correct(header, buf=None) -> (buffer, applied)
"""

import zlib
from typing import NamedTuple, Tuple

from header_utils import DexHeader, write_checksum

ADLER32_INIT = 1
ADLER32_CHUNK_SIZE = 1 << 20


class ChecksumResult(NamedTuple):
    value: int
    length: int


def compute_adler32(data) -> int:
    """
    Standard Adler-32 of `data` (a=1, b=0, both mod 65521; result (b << 16) | a).

    Runs zlib.adler32 over fixed-size chunks, carrying the running value.
    An empty input gives 1.
    """
    view = memoryview(data)
    value = ADLER32_INIT
    for pos in range(0, len(view), ADLER32_CHUNK_SIZE):
        value = zlib.adler32(view[pos:pos + ADLER32_CHUNK_SIZE], value)
    return value & 0xFFFFFFFF


def current_checksum(header: DexHeader) -> int:
    return header.checksum


def region_checksum(header: DexHeader, buf=None) -> ChecksumResult:
    """Adler-32 over the checksum region, with the number of bytes covered."""
    if buf is None:
        buf = header.buffer
    region = memoryview(buf)[header.region_start:]
    return ChecksumResult(compute_adler32(region), len(region))


def expected_checksum(header: DexHeader, buf=None) -> int:
    return region_checksum(header, buf).value


def check_checksum(header: DexHeader) -> bool:
    """True when the stored checksum matches the file contents."""
    return current_checksum(header) == expected_checksum(header)


def correct(header: DexHeader, buf=None) -> Tuple[bytearray, bool]:
    """
    Make the stored checksum match the checksum region.

    - buf: the buffer `header` views (defaults to header.buffer)

    Returns (buffer, applied). When the checksum is already right the buffer
    comes back untouched with applied=False. Otherwise only bytes 8..12 are
    rewritten: a bytearray is patched in place, anything else is copied first.
    """
    if buf is None:
        buf = header.buffer
    expected = expected_checksum(header, buf)
    if current_checksum(header) == expected:
        return buf, False

    if not isinstance(buf, bytearray):
        buf = bytearray(buf)
    write_checksum(buf, expected)
    return buf, True
