"""Snapshot persistence: serialize, gzip, and replace the destination file."""

import gzip
import os
import tempfile
import zlib
from pathlib import Path
from typing import Optional, Union

from ..cacher_logging import get_logger
from ..errors import SnapshotError
from ..models.records import Snapshot
from .codec import decode_snapshot, encode_snapshot

logger = get_logger(__name__)

# zlib's default deflate level
COMPRESSION_LEVEL = 6


def compress_snapshot(snapshot: Snapshot) -> bytes:
    """Serialize and gzip a snapshot in memory."""
    return gzip.compress(encode_snapshot(snapshot), compresslevel=COMPRESSION_LEVEL)


def write_snapshot(snapshot: Snapshot, path: Union[str, Path]) -> bool:
    """Write the compressed snapshot to ``path``, replacing any existing file.

    The bytes go to a temporary file next to ``path`` which is then renamed
    over it, so readers never observe a truncated snapshot.

    Args:
        snapshot: Records keyed by map id
        path: Destination file

    Returns:
        True on success, False if serialization or the filesystem failed
    """
    path = Path(path)

    try:
        compressed = compress_snapshot(snapshot)
    except SnapshotError as e:
        logger.error("Failed to serialize snapshot", path=str(path), error=str(e))
        return False

    tmp_path: Optional[Path] = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(compressed)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error("Failed to write snapshot", path=str(path), error=str(e))
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        return False

    logger.info(
        "Saved snapshot",
        path=str(path),
        maps=len(snapshot),
        compressed_size=len(compressed),
    )
    return True


def read_snapshot(path: Union[str, Path]) -> Snapshot:
    """Load a snapshot written by ``write_snapshot``.

    Raises:
        SnapshotError: If the file is not a valid gzip-compressed snapshot
        OSError: If the file cannot be read
    """
    path = Path(path)
    try:
        data = gzip.decompress(path.read_bytes())
    except (gzip.BadGzipFile, EOFError, zlib.error) as e:
        raise SnapshotError(f"{path} is not a gzip-compressed snapshot: {e}") from e

    snapshot = decode_snapshot(data)
    logger.debug("Read snapshot", path=str(path), maps=len(snapshot))
    return snapshot
