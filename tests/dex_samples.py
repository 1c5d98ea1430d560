import struct
import zlib

HEADER_SIZE = 0x70


def reference_adler32(data: bytes) -> int:
    # byte-at-a-time Adler-32, independent of zlib
    a, b = 1, 0
    for byte in data:
        a = (a + byte) % 65521
        b = (b + a) % 65521
    return (b << 16) | a


def make_dex(payload: bytes = b'', version: bytes = b'035', checksum=None) -> bytearray:
    """
    Build a DEX-shaped buffer: full 0x70 header followed by payload.
    checksum=None stores the correct Adler-32.
    """
    file_size = HEADER_SIZE + len(payload)
    buf = bytearray(b'dex\n' + version + b'\x00')
    buf += b'\x00' * 4                      # checksum, filled below
    buf += bytes(range(20))                 # signature
    buf += struct.pack('<III', file_size, HEADER_SIZE, 0x12345678)
    buf += b'\x00' * (HEADER_SIZE - len(buf))
    buf += payload
    if checksum is None:
        checksum = zlib.adler32(bytes(buf[12:])) & 0xFFFFFFFF
    struct.pack_into('<I', buf, 8, checksum)
    return buf


def make_minimal_dex(region_zeros: int, checksum: int = 0) -> bytearray:
    """Magic and checksum followed by region_zeros zero bytes (signature included)."""
    return bytearray(b'dex\n035\x00' + struct.pack('<I', checksum) + b'\x00' * region_zeros)
