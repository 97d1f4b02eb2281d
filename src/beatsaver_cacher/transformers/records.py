"""Map record encoding - pure, synchronous.

Turns an eligible catalog entry into the dense ``MapRecord`` stored in the
snapshot. Encoding either succeeds completely or raises ``MapEncodeError``.
"""

import math
import re
import struct
from datetime import UTC, datetime
from typing import List, Optional

from ..cacher_logging import get_logger
from ..errors import MapEncodeError
from ..models.catalog import MapDetail, MapDifficulty, MapVersion
from ..models.records import (
    UINT32_MAX,
    DifficultyRecord,
    MapRecord,
    Ranked,
    RankedValue,
    Votes,
)
from .eligibility import should_cache_map
from .mods import get_difficulty_mods, get_version_mods

logger = get_logger(__name__)

_HEX_KEY = re.compile(r"[0-9a-fA-F]+")


def as_float32(value: float) -> float:
    """Round to the nearest IEEE-754 single precision value.

    Finite values beyond the single precision range saturate to infinity.
    """
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def parse_map_key(map_id: str) -> int:
    """Parse the hexadecimal map id into an unsigned 32-bit key."""
    if not _HEX_KEY.fullmatch(map_id):
        raise MapEncodeError(map_id, "key", "is not a hexadecimal id")
    key = int(map_id, 16)
    if key > UINT32_MAX:
        raise MapEncodeError(map_id, "key", "does not fit in 32 bits")
    return key


def to_unix_u32(map_id: str, field: str, value: Optional[datetime]) -> int:
    """Convert a timestamp to unsigned 32-bit unix seconds."""
    if value is None:
        raise MapEncodeError(map_id, field, "is missing")
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    seconds = math.floor(value.timestamp())
    if not 0 <= seconds <= UINT32_MAX:
        raise MapEncodeError(map_id, field, f"is not representable as u32 ({seconds})")
    return seconds


def clamp_u32(value: int) -> int:
    """Values outside the unsigned 32-bit range become 0."""
    return value if 0 <= value <= UINT32_MAX else 0


def encode_ranked(diff: MapDifficulty) -> Ranked:
    return Ranked(
        score_saber=RankedValue(
            is_ranked=diff.ss_stars is not None,
            stars=as_float32(diff.ss_stars or 0.0),
        ),
        beat_leader=RankedValue(
            is_ranked=diff.bl_stars is not None,
            stars=as_float32(diff.bl_stars or 0.0),
        ),
    )


def encode_difficulties(map_id: str, map_version: MapVersion) -> List[DifficultyRecord]:
    difficulties = []
    for diff in map_version.diffs:
        if diff.environment is None:
            raise MapEncodeError(
                map_id,
                "environment_name",
                f"is missing on {diff.characteristic}/{diff.difficulty}",
            )
        difficulties.append(DifficultyRecord(
            njs=as_float32(diff.njs),
            notes=clamp_u32(diff.notes),
            characteristic_name=diff.characteristic,
            difficulty_name=diff.difficulty,
            mods=get_difficulty_mods(diff),
            environment_name=diff.environment,
            ranked=encode_ranked(diff),
        ))
    return difficulties


def encode_map(map_detail: MapDetail) -> MapRecord:
    """Encode one eligible map.

    Args:
        map_detail: Catalog entry that already passed ``should_cache_map``

    Returns:
        The snapshot record for the map

    Raises:
        MapEncodeError: If a required field is missing or out of range
    """
    map_id = map_detail.id
    if not map_detail.versions:
        raise MapEncodeError(map_id, "versions", "is empty")
    version = map_detail.versions[0]
    metadata = map_detail.metadata

    if not 0 <= metadata.duration <= UINT32_MAX:
        raise MapEncodeError(map_id, "duration", f"is out of range ({metadata.duration})")

    return MapRecord(
        key=parse_map_key(map_id),
        hash=version.hash,
        song_name=metadata.song_name,
        song_sub_name=metadata.song_sub_name,
        song_author_name=metadata.song_author_name,
        level_author_name=metadata.level_author_name,
        duration=metadata.duration,
        uploaded=to_unix_u32(map_id, "uploaded", map_detail.last_published_at),
        last_updated=to_unix_u32(map_id, "last_updated", map_detail.updated_at),
        mods=get_version_mods(version),
        curator_name=map_detail.curator.name if map_detail.curator is not None else None,
        votes=Votes(
            up=clamp_u32(map_detail.stats.upvotes),
            down=clamp_u32(map_detail.stats.downvotes),
        ),
        difficulties=encode_difficulties(map_id, version),
    )


def cache_map_data(map_detail: MapDetail) -> Optional[MapRecord]:
    """Filter then encode; ``None`` for maps that do not belong in the snapshot."""
    if not should_cache_map(map_detail):
        logger.debug("Not caching map", map_id=map_detail.id)
        return None

    return encode_map(map_detail)
