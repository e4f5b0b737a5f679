"""File handler module: encoding-aware reads and atomic writes.

Provides the file I/O used by the post parser (reading authored markdown
in whatever encoding it was saved with) and the snapshot store (replacing
state files without ever exposing a partial write).
"""

import os
import tempfile
from pathlib import Path

from charset_normalizer import from_bytes

# =============================================================================
# File Read
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Reads raw bytes first, then uses charset-normalizer to detect encoding.
    Defaults to UTF-8 for empty files or when detection fails.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).

    Raises:
        OSError: If the file cannot be read.
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    # Plain UTF-8 is by far the common case; skip detection for it.
    try:
        return (raw.decode("utf-8"), "utf-8")
    except UnicodeDecodeError:
        pass

    result = from_bytes(raw).best()
    if result is None:
        return (raw.decode("utf-8", errors="replace"), "utf-8")
    return (str(result), result.encoding)


# =============================================================================
# File Write
# =============================================================================


def write_file_atomic(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Replace *path* with *content* atomically.

    Writes to a temporary file in the same directory then calls
    ``os.replace()`` so readers never see partial data. Creates the parent
    directory if needed. The temp file is removed on any failure.

    Args:
        path: Path to the output file.
        content: String content to write.
        encoding: Encoding to use (default: utf-8).

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return len(encoded)
