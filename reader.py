# reader.py
import sys
from typing import Optional, TextIO, Tuple

from byte_utils import VERSION_POLICY_ANY, DexIOError
from header_utils import DexHeader, parse_header

STDIN_PATH = '-'


def resolve_input_path(path: Optional[str], stdin: Optional[TextIO] = None) -> str:
    """
    Return the input file path. When `path` is omitted or '-', the path
    itself is read from stdin (surrounding whitespace stripped).
    """
    if path is not None and path != STDIN_PATH:
        return path
    if stdin is None:
        stdin = sys.stdin
    resolved = stdin.read().strip()
    if not resolved:
        raise ValueError("No input path given on stdin")
    return resolved


def read_dex(path: str, version_policy: str = VERSION_POLICY_ANY) -> Tuple[bytearray, DexHeader]:
    """
    Read a whole DEX file into a mutable buffer and parse its header.

    Returns (buffer, header); the header is a view over the returned buffer.
    Raises DexIOError if the file cannot be read, TooShortError / BadMagicError
    on malformed files.
    """
    try:
        with open(path, 'rb') as f:
            buf = bytearray(f.read())
    except OSError as e:
        raise DexIOError('read', path, e) from e

    return buf, parse_header(buf, version_policy=version_policy)
