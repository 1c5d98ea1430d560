# writer.py
import os
import secrets

from byte_utils import DexIOError


def write_dex(out_path: str, buf) -> None:
    """
    Write the full buffer to out_path.

    If out_path is a symlink, the file it points to is written and the link
    stays in place. The bytes go to a temporary file in the destination
    directory, which is flushed, fsynced and then renamed over the target.
    On failure the temporary file is removed and any existing target is left
    as it was.

    An existing target keeps its permission bits; a new file gets 0o666 minus
    the process umask, as open() would give it.

    Raises DexIOError if the file cannot be written.
    """
    target = os.path.realpath(out_path)
    directory = os.path.dirname(target)
    temp_path = os.path.join(directory, f".{os.path.basename(target)}.{secrets.token_hex(4)}.tmp")
    try:
        fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
    except OSError as e:
        raise DexIOError('write', out_path, e) from e

    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(buf)
            f.flush()
            os.fsync(f.fileno())

        if os.path.exists(target):
            os.chmod(temp_path, os.stat(target).st_mode & 0o7777)

        # Atomic replace
        os.replace(temp_path, target)
    except OSError as e:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise DexIOError('write', out_path, e) from e
    return None
