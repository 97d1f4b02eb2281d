"""Snapshot wire format and persistence.

Components:
- codec: protobuf schema and record conversion
- writer: gzip compression and atomic file replacement
"""

from .codec import decode_snapshot, encode_record, encode_snapshot
from .writer import compress_snapshot, read_snapshot, write_snapshot

__all__ = [
    'compress_snapshot',
    'decode_snapshot',
    'encode_record',
    'encode_snapshot',
    'read_snapshot',
    'write_snapshot',
]
